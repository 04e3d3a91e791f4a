from atelier.services.compositor import Compositor, CompositorError, ProceduralCompositor
from atelier.services.orchestrator import SessionOrchestrator
from atelier.services.selector import pick_profile, resolve_profile

__all__ = [
    "Compositor",
    "CompositorError",
    "ProceduralCompositor",
    "SessionOrchestrator",
    "pick_profile",
    "resolve_profile",
]
