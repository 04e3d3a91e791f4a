"""
Compositor

Turns a prompt, a style profile and an iteration number into a PNG data URI.
The reference strategy is procedural: a backdrop gradient, a motif layer and
a grain pass, all taken from the profile, so every image in a profile shares
the same look while the prompt decides where the emphasis goes.
"""
import asyncio
import functools
import hashlib
import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

from PIL import Image, ImageChops, ImageDraw, ImageFilter, ImageOps

from atelier.config import settings
from atelier.models.schemas import Motif, StyleProfile
from atelier.services.imaging import ImageDecodeError, decode_image, encode_png, hex_to_rgb

logger = logging.getLogger(__name__)

# Alpha for motif shapes on a fresh canvas, and the fraction kept over a base image
SHAPE_ALPHA = 170
BASE_OVERLAY_OPACITY = 0.35
# Portion of the retoned base mixed back with its original colors
BASE_COLOR_CARRY = 0.2


class CompositorError(RuntimeError):
    """Raised when a synthesis cannot produce a complete image."""


class Compositor(Protocol):
    async def synthesize(
        self,
        prompt: str,
        profile: StyleProfile,
        iteration: int,
        base_image: str | None = None,
    ) -> str:
        ...


@dataclass(frozen=True)
class Emphasis:
    """Where and how strongly a prompt pulls the composition."""

    digest: str
    focus: tuple[float, float]
    dominant: int
    rotation: float
    extra_shapes: int


def prompt_emphasis(prompt: str, profile: StyleProfile) -> Emphasis:
    digest = hashlib.sha256(prompt.encode("utf-8")).digest()
    horizon = profile.composition.horizon
    focus_x = 0.2 + (digest[0] / 255) * 0.6
    focus_y = min(max(horizon - 0.25 + (digest[1] / 255) * 0.5, 0.1), 0.9)
    return Emphasis(
        digest=digest.hex(),
        focus=(focus_x, focus_y),
        dominant=digest[2] % len(profile.palette.colors),
        rotation=(digest[3] / 255) * math.tau,
        extra_shapes=len(prompt.split()) % 5,
    )


class ProceduralCompositor:
    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        timeout: float | None = None,
    ):
        self.width = width or settings.canvas_width
        self.height = height or settings.canvas_height
        self.timeout = timeout if timeout is not None else settings.synthesis_timeout
        # Bounded so renders abandoned after a timeout cannot pile up threads
        self._executor = ThreadPoolExecutor(
            max_workers=max(settings.synthesis_workers, 1),
            thread_name_prefix="compositor",
        )

    async def synthesize(
        self,
        prompt: str,
        profile: StyleProfile,
        iteration: int,
        base_image: str | None = None,
    ) -> str:
        """
        Synthesize an image for the prompt in the given style.

        Args:
            prompt: The user's request
            profile: Style profile providing palette, texture and composition
            iteration: Positive attempt number, seeds the variation layer
            base_image: Optional data URI to re-style instead of composing fresh

        Returns:
            PNG data URI

        Raises:
            CompositorError: if the image cannot be produced in full
        """
        if iteration < 1:
            raise CompositorError(f"Iteration must be positive, got {iteration}")

        base = None
        if base_image is not None:
            try:
                base = decode_image(base_image)
            except ImageDecodeError as e:
                raise CompositorError(f"Base image rejected: {e}") from e

        mode = "transform" if base is not None else "compose"
        logger.info(
            f"[compositor] {mode} #{iteration} in '{profile.id}': {prompt[:80]}"
        )

        try:
            loop = asyncio.get_running_loop()
            render = functools.partial(self.render, prompt, profile, iteration, base)
            image = await asyncio.wait_for(
                loop.run_in_executor(self._executor, render),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"[compositor] Synthesis timed out after {self.timeout}s, "
                f"abandoning render #{iteration} in its worker thread"
            )
            raise CompositorError(f"Synthesis timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"[compositor] Rendering failed: {e}")
            raise CompositorError(f"Rendering failed: {e}") from e

        return encode_png(image)

    def render(
        self,
        prompt: str,
        profile: StyleProfile,
        iteration: int,
        base: Image.Image | None = None,
    ) -> Image.Image:
        size = (self.width, self.height)
        emphasis = prompt_emphasis(prompt, profile)
        variation = random.Random(f"{profile.id}:{iteration}:{emphasis.digest}")

        if base is None:
            canvas = backdrop(size, profile)
            opacity = 1.0
        else:
            canvas = retone(base, size, profile)
            opacity = BASE_OVERLAY_OPACITY

        layer = motif_layer(size, profile, emphasis, variation)
        if opacity < 1.0:
            alpha = layer.getchannel("A").point(lambda a: int(a * opacity))
            layer.putalpha(alpha)
        canvas = Image.alpha_composite(canvas.convert("RGBA"), layer).convert("RGB")

        return finish(canvas, profile)


def backdrop(size: tuple[int, int], profile: StyleProfile) -> Image.Image:
    """Vertical gradient between the profile's two background stops."""
    top, bottom = profile.palette.background
    ramp = Image.linear_gradient("L").resize(size)
    return ImageOps.colorize(ramp, black=hex_to_rgb(top), white=hex_to_rgb(bottom))


def retone(base: Image.Image, size: tuple[int, int], profile: StyleProfile) -> Image.Image:
    """Map the base image's luminance onto the profile's shadow/accent/highlight."""
    palette = profile.palette
    fitted = ImageOps.fit(base, size, Image.Resampling.LANCZOS)
    toned = ImageOps.colorize(
        ImageOps.grayscale(fitted),
        black=hex_to_rgb(palette.shadow),
        white=hex_to_rgb(palette.highlight),
        mid=hex_to_rgb(palette.accent),
    )
    return Image.blend(toned, fitted, BASE_COLOR_CARRY)


def motif_layer(
    size: tuple[int, int],
    profile: StyleProfile,
    emphasis: Emphasis,
    variation: random.Random,
) -> Image.Image:
    width, height = size
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    palette = profile.palette
    colors = [hex_to_rgb(c) for c in palette.colors]
    accent = hex_to_rgb(palette.accent)
    texture = profile.texture
    composition = profile.composition

    fx, fy = emphasis.focus[0] * width, emphasis.focus[1] * height
    unit = composition.scale * min(width, height)
    count = composition.density + emphasis.extra_shapes

    def pick_color() -> tuple[int, int, int, int]:
        # The prompt's dominant entry takes half the shapes
        if variation.random() < 0.5:
            rgb = colors[emphasis.dominant]
        else:
            rgb = variation.choice(colors)
        return (*rgb, SHAPE_ALPHA)

    outline = (*accent, 220) if texture.stroke_width else None
    stroke = texture.stroke_width

    if texture.motif == Motif.ORBS:
        for _ in range(count):
            r = unit * variation.uniform(0.25, 0.8)
            cx = variation.gauss(fx, width * 0.22)
            cy = variation.gauss(fy, height * 0.2)
            draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=pick_color(), outline=outline, width=stroke)

    elif texture.motif == Motif.BANDS:
        band = height / (count + 1)
        for i in range(count):
            y = composition.horizon * height + (i - count / 2) * band * 0.9
            y += variation.uniform(-band, band) * 0.3
            tilt = math.sin(emphasis.rotation + i) * band * 0.6
            thickness = band * variation.uniform(0.5, 1.1)
            draw.polygon(
                [(0, y - tilt), (width, y + tilt), (width, y + tilt + thickness), (0, y - tilt + thickness)],
                fill=pick_color(),
            )

    elif texture.motif == Motif.SHARDS:
        for _ in range(count):
            cx = variation.gauss(fx, width * 0.25)
            cy = variation.gauss(fy, height * 0.25)
            r = unit * variation.uniform(0.3, 1.0)
            start = emphasis.rotation + variation.uniform(0, math.tau)
            points = [
                (cx + r * math.cos(start + k * 2.1 + variation.uniform(-0.3, 0.3)),
                 cy + r * math.sin(start + k * 2.1 + variation.uniform(-0.3, 0.3)))
                for k in range(3)
            ]
            draw.polygon(points, fill=pick_color(), outline=outline, width=stroke)

    elif texture.motif == Motif.GRID:
        horizon_y = composition.horizon * height
        sun_r = unit * variation.uniform(0.6, 0.9)
        draw.ellipse(
            (fx - sun_r, horizon_y - sun_r * 1.4, fx + sun_r, horizon_y + sun_r * 0.6),
            fill=(*colors[emphasis.dominant], 230),
        )
        line = (*accent, 200)
        for i in range(-count, count + 1):
            x_far = fx + i * width * 0.03
            x_near = fx + i * width * 0.25 + variation.uniform(-4, 4)
            draw.line([(x_far, horizon_y), (x_near, height)], fill=line, width=max(stroke, 1))
        for k in range(1, count + 1):
            y = horizon_y + (height - horizon_y) * (k / count) ** 2
            draw.line([(0, y), (width, y)], fill=line, width=max(stroke, 1))

    elif texture.motif == Motif.WAVES:
        steps = 48
        for i in range(count):
            base_y = fy + (i - count / 2) * height * 0.09
            amplitude = unit * variation.uniform(0.15, 0.45)
            phase = emphasis.rotation + variation.uniform(0, math.pi)
            frequency = variation.uniform(1.0, 2.5)
            points = [
                (x / steps * width,
                 base_y + amplitude * math.sin(phase + frequency * math.tau * x / steps))
                for x in range(steps + 1)
            ]
            draw.line(points, fill=pick_color(), width=max(stroke, 1) * 3, joint="curve")

    # Focal highlight marks the prompt's point of emphasis
    glow = unit * 0.18
    draw.ellipse((fx - glow, fy - glow, fx + glow, fy + glow), fill=(*accent, 200))

    if composition.symmetry:
        half = width // 2
        left = layer.crop((0, 0, half, height))
        layer.paste(ImageOps.mirror(left), (width - half, 0))

    return layer


def finish(canvas: Image.Image, profile: StyleProfile) -> Image.Image:
    """Apply the profile's softness and grain, the same for every image in it."""
    texture = profile.texture
    if texture.softness > 0:
        canvas = canvas.filter(ImageFilter.GaussianBlur(texture.softness))

    if texture.grain > 0:
        # Grain pattern is fixed per profile so it reads as the same "paper"
        grain_source = random.Random(f"grain:{profile.id}")
        noise = Image.frombytes("L", canvas.size, grain_source.randbytes(canvas.width * canvas.height))
        grained = ImageChops.soft_light(canvas, Image.merge("RGB", (noise, noise, noise)))
        canvas = Image.blend(canvas, grained, texture.grain)

    return canvas
