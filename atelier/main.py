import logging
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from atelier.config import settings
from atelier.routers import session_router, styles_router
from atelier.services.catalog import list_profiles
from atelier.services.orchestrator import session_orchestrator
from atelier.websocket import manager, websocket_endpoint

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# Set specific loggers
logging.getLogger("PIL").setLevel(logging.WARNING)
logging.getLogger("multipart").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Atelier...")
    logger.info(f"Canvas: {settings.canvas_width}x{settings.canvas_height}")
    logger.info(f"Synthesis timeout: {settings.synthesis_timeout}s")
    logger.info(f"Styles: {', '.join(p.id for p in list_profiles())}")
    logger.info("Startup complete")
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Atelier",
    description="Conversational image atelier with a consistent style per session",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(session_router)
app.include_router(styles_router)


@app.get("/")
async def root():
    return {
        "name": "Atelier API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Service status and session summary."""
    return {
        "status": "ok",
        "session": {
            "status": session_orchestrator.status.value,
            "iteration": session_orchestrator.iteration,
            "messages": len(session_orchestrator.messages),
        },
        "styles": len(list_profiles()),
        "websocket_clients": len(manager.active_connections),
    }


@app.websocket("/ws")
async def websocket_route(websocket: WebSocket):
    await websocket_endpoint(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "atelier.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
