import logging
from fastapi import APIRouter, Depends, HTTPException

from atelier.models.schemas import (
    AdoptRequest,
    BaseImageRequest,
    SessionSnapshot,
    StyleSelectRequest,
    SubmitRequest,
    SubmitResponse,
)
from atelier.services.imaging import ImageDecodeError, normalize_upload
from atelier.services.orchestrator import (
    EmptyPromptError,
    SessionBusyError,
    SessionOrchestrator,
    session_orchestrator,
)
from atelier.websocket import manager

router = APIRouter(prefix="/api/session", tags=["session"])
logger = logging.getLogger(__name__)


def get_orchestrator() -> SessionOrchestrator:
    return session_orchestrator


async def _publish(orchestrator: SessionOrchestrator) -> SessionSnapshot:
    snapshot = orchestrator.snapshot()
    await manager.broadcast_snapshot(snapshot.model_dump(mode="json"))
    return snapshot


@router.get("/", response_model=SessionSnapshot)
async def get_session(orchestrator: SessionOrchestrator = Depends(get_orchestrator)):
    """Current message log and session state."""
    return orchestrator.snapshot()


@router.post("/messages", response_model=SubmitResponse)
async def submit_message(
    data: SubmitRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Send a prompt and wait for the resulting composition."""
    try:
        reply = await orchestrator.submit(data.prompt)
    except EmptyPromptError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    # The user message is the one right before the reply
    messages = orchestrator.messages
    user_message = messages[messages.index(reply) - 1]

    return SubmitResponse(
        user_message=user_message,
        assistant_message=reply,
        snapshot=orchestrator.snapshot(),
    )


@router.put("/style", response_model=SessionSnapshot)
async def select_style(
    data: StyleSelectRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Pin the style used by the next generations."""
    orchestrator.select_style(data.style_id)
    return await _publish(orchestrator)


@router.put("/base-image", response_model=SessionSnapshot)
async def set_base_image(
    data: BaseImageRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Upload an image to transform in the active style."""
    try:
        image = normalize_upload(data.image)
    except ImageDecodeError as e:
        logger.warning(f"Rejected base image upload: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    orchestrator.set_base_image(image, data.label)
    return await _publish(orchestrator)


@router.delete("/base-image", response_model=SessionSnapshot)
async def clear_base_image(orchestrator: SessionOrchestrator = Depends(get_orchestrator)):
    orchestrator.clear_base_image()
    return await _publish(orchestrator)


@router.post("/base-image/adopt", response_model=SessionSnapshot)
async def adopt_base_image(
    data: AdoptRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Chain a previous result as the base of the next generation."""
    if not orchestrator.adopt_base_image(data.message_id):
        raise HTTPException(status_code=404, detail="Message not found or has no image")
    return await _publish(orchestrator)
