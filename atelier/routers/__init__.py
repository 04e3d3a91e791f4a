from atelier.routers.session import router as session_router
from atelier.routers.styles import router as styles_router

__all__ = [
    "session_router",
    "styles_router",
]
