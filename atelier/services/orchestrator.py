"""
Session Orchestrator

Owns the conversation state of the single chat session and runs the
generation pipeline: record the request, settle the sticky style, bump the
iteration, call the compositor, and append the result or an apology.

Only one generation may be in flight. `submit` checks and flips the status
before its first await, so a second call made while the first is suspended
sees `generating` and is refused.
"""
import itertools
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from atelier.config import settings
from atelier.models.schemas import (
    ChatMessage,
    MessageMeta,
    Role,
    SessionSnapshot,
    SessionStatus,
    StyleProfile,
)
from atelier.services.captions import build_caption
from atelier.services.catalog import first_profile
from atelier.services.compositor import Compositor, ProceduralCompositor
from atelier.services.selector import pick_profile, resolve_profile
from atelier.websocket import manager

logger = logging.getLogger(__name__)

Notifier = Callable[[str, dict], Awaitable[None]]

ADOPTED_BASE_LABEL = "Previous canvas"
UPLOADED_BASE_LABEL = "Uploaded image"


class SubmissionRejected(Exception):
    """A submission was refused without touching the session."""


class EmptyPromptError(SubmissionRejected):
    pass


class SessionBusyError(SubmissionRejected):
    pass


class SessionOrchestrator:
    def __init__(
        self,
        compositor: Compositor | None = None,
        notifier: Notifier | None = None,
        greeting: str | None = None,
        apology: str | None = None,
    ):
        self.compositor = compositor or ProceduralCompositor()
        self.notifier = notifier
        self.apology = apology or settings.apology_text

        self._sequence = itertools.count(1)
        self._messages: list[ChatMessage] = []
        self.status = SessionStatus.IDLE
        self.active_style_id: str | None = None
        self.iteration = 0
        self.active_base_image: str | None = None
        self.base_image_label: str | None = None

        self._append(
            ChatMessage(
                id="greeting",
                role=Role.ASSISTANT,
                text=greeting or settings.greeting_text,
                created_at=_now(),
                meta=MessageMeta(style_id=first_profile().id, iteration=0),
            )
        )

    @property
    def busy(self) -> bool:
        return self.status == SessionStatus.GENERATING

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def find_message(self, message_id: str) -> ChatMessage | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    async def submit(self, prompt: str) -> ChatMessage:
        """
        Run one generation attempt for the prompt.

        Returns:
            The assistant message appended for this attempt, carrying either
            the image or the apology text

        Raises:
            EmptyPromptError: prompt is blank after trimming
            SessionBusyError: another generation is still in flight
        """
        prompt = prompt.strip()
        if not prompt:
            raise EmptyPromptError("Prompt is empty")
        if self.busy:
            raise SessionBusyError("A generation is already in progress")

        self.status = SessionStatus.GENERATING
        try:
            user_message = self._append(
                ChatMessage(
                    id=self._next_id("user"),
                    role=Role.USER,
                    text=prompt,
                    created_at=_now(),
                )
            )
            profile = self._effective_profile(prompt)
            self.iteration += 1
            iteration = self.iteration
            base_image = self.active_base_image

            await self._notify("status", {"status": self.status.value, "iteration": iteration})
            await self._notify("message", user_message.model_dump(mode="json"))

            try:
                image = await self.compositor.synthesize(prompt, profile, iteration, base_image)
            except Exception as e:
                logger.error(f"[session] Generation #{iteration} failed: {e}")
                reply = ChatMessage(
                    id=self._next_id("assistant-error"),
                    role=Role.ASSISTANT,
                    text=self.apology,
                    created_at=_now(),
                    meta=MessageMeta(style_id=profile.id, iteration=iteration),
                )
            else:
                used_base = base_image is not None
                reply = ChatMessage(
                    id=self._next_id("assistant"),
                    role=Role.ASSISTANT,
                    text=build_caption(prompt, profile, used_base),
                    image=image,
                    created_at=_now(),
                    meta=MessageMeta(
                        style_id=profile.id,
                        iteration=iteration,
                        base_image_used=used_base,
                    ),
                )
                logger.info(
                    f"[session] Generation #{iteration} done in '{profile.id}'"
                    f"{' from base image' if used_base else ''}"
                )
            self._append(reply)
        finally:
            self.status = SessionStatus.IDLE

        await self._notify("message", reply.model_dump(mode="json"))
        await self._notify("status", {"status": self.status.value, "iteration": iteration})
        return reply

    def select_style(self, style_id: str) -> StyleProfile:
        """Make a style sticky for the next generations. Unknown ids fall back to the first profile."""
        profile = resolve_profile(style_id)
        self.active_style_id = profile.id
        logger.info(f"[session] Style set to '{profile.id}'")
        return profile

    def set_base_image(self, image: str, label: str | None = None) -> None:
        self.active_base_image = image
        self.base_image_label = label or UPLOADED_BASE_LABEL

    def clear_base_image(self) -> None:
        self.active_base_image = None
        self.base_image_label = None

    def adopt_base_image(self, message_id: str) -> bool:
        """Use the image of a prior message as the next base. Returns False if it has none."""
        message = self.find_message(message_id)
        if message is None or message.image is None:
            logger.warning(f"[session] Message {message_id!r} has no image to adopt")
            return False
        self.active_base_image = message.image
        self.base_image_label = ADOPTED_BASE_LABEL
        return True

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            messages=list(self._messages),
            status=self.status,
            busy=self.busy,
            active_style_id=self.active_style_id,
            iteration=self.iteration,
            has_base_image=self.active_base_image is not None,
            base_image_label=self.base_image_label,
        )

    def _effective_profile(self, prompt: str) -> StyleProfile:
        """
        Sticky style for this attempt.

        No style is preselected, so until the first generation or an explicit
        selection the prompt alone seeds the pick, which is then locked.
        """
        if self.active_style_id is None:
            profile = pick_profile(prompt)
            self.active_style_id = profile.id
            logger.info(f"[session] Style '{profile.id}' picked and locked for this session")
            return profile
        return resolve_profile(self.active_style_id)

    def _append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def _next_id(self, kind: str) -> str:
        return f"{kind}-{next(self._sequence)}"

    async def _notify(self, event: str, data: dict) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier(event, data)
        except Exception as e:
            logger.warning(f"[session] Failed to publish '{event}': {e}")


def _now() -> datetime:
    return datetime.now(timezone.utc)


session_orchestrator = SessionOrchestrator(notifier=manager.broadcast)
