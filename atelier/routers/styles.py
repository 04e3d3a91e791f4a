"""
Styles Router

Read-only view of the style catalog for the style picker.
"""
from fastapi import APIRouter, HTTPException

from atelier.models.schemas import StyleProfile, StyleSummary
from atelier.services.catalog import list_profiles

router = APIRouter(prefix="/api/styles", tags=["styles"])


def summarize(profile: StyleProfile) -> StyleSummary:
    return StyleSummary(
        id=profile.id,
        label=profile.label,
        description=profile.description,
        palette=profile.palette,
        motif=profile.texture.motif,
    )


@router.get("/", response_model=list[StyleSummary])
async def list_styles():
    """List all styles in catalog order."""
    return [summarize(profile) for profile in list_profiles()]


@router.get("/{style_id}", response_model=StyleProfile)
async def get_style(style_id: str):
    """Full parameters of one style."""
    for profile in list_profiles():
        if profile.id == style_id:
            return profile
    raise HTTPException(status_code=404, detail="Style not found")
