import hashlib
import logging

from atelier.models.schemas import StyleProfile
from atelier.services.catalog import first_profile, list_profiles

logger = logging.getLogger(__name__)


def pick_profile(seed: str) -> StyleProfile:
    """
    Map a seed string to a catalog profile.

    The whole seed is hashed with SHA-256 and the first eight bytes of the
    digest, read as an unsigned integer, are reduced modulo the catalog size.
    Equal seeds always land on the same profile; an empty seed is valid.
    """
    profiles = list_profiles()
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    index = int.from_bytes(digest[:8], "big") % len(profiles)
    return profiles[index]


def resolve_profile(style_id: str | None) -> StyleProfile:
    """
    Look up a profile by id.

    Unknown or missing ids (for instance a stale id kept by a client) resolve
    to the first catalog entry. The fallback is logged as a warning and is
    never reported to the user.
    """
    for profile in list_profiles():
        if profile.id == style_id:
            return profile

    fallback = first_profile()
    logger.warning(
        f"[selector] Unknown style id {style_id!r}, falling back to '{fallback.id}'"
    )
    return fallback
