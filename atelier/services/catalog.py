"""
Style Catalog

Fixed, ordered set of style profiles. Each profile is the visual identity of
one "artist": the compositor keeps its palette, motif and grain recognizable
whatever the prompt asks for.
"""
from atelier.models.schemas import (
    CompositionSchema,
    Motif,
    PaletteSchema,
    StyleProfile,
    TextureSchema,
)

STYLE_CATALOG: tuple[StyleProfile, ...] = (
    StyleProfile(
        id="neon-tide",
        label="Neon Tide",
        description="Deep navy nights lit by magenta and cyan glows",
        palette=PaletteSchema(
            background=("#0b1026", "#1d0b3a"),
            colors=("#ff2fb3", "#21e6ff", "#7b5cff", "#ffd23f"),
            accent="#21e6ff",
            shadow="#070914",
            highlight="#ff9be0",
        ),
        texture=TextureSchema(grain=0.12, softness=2.5, stroke_width=3, motif=Motif.ORBS),
        composition=CompositionSchema(density=14, horizon=0.62, symmetry=False, scale=0.28),
    ),
    StyleProfile(
        id="pastel-atlas",
        label="Pastel Atlas",
        description="Soft chalky pastels laid out in calm horizontal bands",
        palette=PaletteSchema(
            background=("#fdf1e4", "#e6ecfb"),
            colors=("#f7b8c4", "#a8d8cf", "#c9b6f2", "#ffe29a"),
            accent="#ef8fa3",
            shadow="#6d6a86",
            highlight="#fffaf3",
        ),
        texture=TextureSchema(grain=0.06, softness=1.2, stroke_width=0, motif=Motif.BANDS),
        composition=CompositionSchema(density=9, horizon=0.55, symmetry=False, scale=0.35),
    ),
    StyleProfile(
        id="ink-shard",
        label="Ink Shard",
        description="Monochrome ink with sharp vermilion fractures",
        palette=PaletteSchema(
            background=("#f2efe6", "#d8d2c2"),
            colors=("#111111", "#3a3a3a", "#6b6b6b", "#d7261e"),
            accent="#d7261e",
            shadow="#0a0a0a",
            highlight="#f7f3ea",
        ),
        texture=TextureSchema(grain=0.22, softness=0.0, stroke_width=2, motif=Motif.SHARDS),
        composition=CompositionSchema(density=18, horizon=0.5, symmetry=True, scale=0.22),
    ),
    StyleProfile(
        id="solar-grid",
        label="Solar Grid",
        description="Retro sunset gradients over a glowing perspective grid",
        palette=PaletteSchema(
            background=("#ff7e3d", "#2a0845"),
            colors=("#ffd166", "#ef476f", "#ff9f1c", "#9b5de5"),
            accent="#ffd166",
            shadow="#1a0530",
            highlight="#fff1c1",
        ),
        texture=TextureSchema(grain=0.08, softness=0.8, stroke_width=2, motif=Motif.GRID),
        composition=CompositionSchema(density=10, horizon=0.58, symmetry=True, scale=0.4),
    ),
    StyleProfile(
        id="verdant-drift",
        label="Verdant Drift",
        description="Layered forest greens flowing in slow waves",
        palette=PaletteSchema(
            background=("#0f2a1d", "#335c3e"),
            colors=("#7fb069", "#e6aa68", "#b5d99c", "#2f6b4f"),
            accent="#e6aa68",
            shadow="#08160f",
            highlight="#e8f5d0",
        ),
        texture=TextureSchema(grain=0.16, softness=1.6, stroke_width=4, motif=Motif.WAVES),
        composition=CompositionSchema(density=7, horizon=0.66, symmetry=False, scale=0.3),
    ),
)


def list_profiles() -> tuple[StyleProfile, ...]:
    """Return every profile in catalog order."""
    return STYLE_CATALOG


def first_profile() -> StyleProfile:
    return STYLE_CATALOG[0]
