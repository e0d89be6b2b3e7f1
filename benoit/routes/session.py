"""
Session routes: lesson catalog, mode switching and state snapshots.
"""

import logging
from fastapi import APIRouter, HTTPException

from benoit.content import LESSONS, get_lesson
from benoit.models import StartLessonRequest
from benoit.services.audio_service import AudioPlayer
from benoit.services.conversation_service import ConversationSession
from benoit.services.gemini_service import GeminiService
from benoit.services.mode_controller import ModeController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])


def _build_controller() -> ModeController:
    gemini_service = GeminiService()
    session = ConversationSession(gemini_service, AudioPlayer(gemini_service))
    return ModeController(session)


# In-memory tutor state for the single UI session this process serves
_controller = _build_controller()


def get_controller() -> ModeController:
    return _controller


def reset_controller(controller: ModeController | None = None) -> None:
    global _controller
    _controller = controller or _build_controller()


@router.get("/lessons")
async def list_lessons() -> list[dict]:
    return [lesson.model_dump() for lesson in LESSONS]


@router.get("/state")
async def session_state() -> dict:
    return get_controller().snapshot().model_dump()


@router.post("/home")
async def go_home() -> dict:
    controller = get_controller()
    controller.go_home()
    return controller.snapshot().model_dump()


@router.post("/lesson")
async def start_lesson(body: StartLessonRequest) -> dict:
    lesson = get_lesson(body.lesson_id)
    if lesson is None:
        logger.warning("Unknown lesson requested: %s", body.lesson_id)
        raise HTTPException(status_code=404, detail=f"Unknown lesson: {body.lesson_id}")
    controller = get_controller()
    controller.start_lesson(lesson)
    return controller.snapshot().model_dump()


@router.post("/chat")
async def start_free_chat() -> dict:
    controller = get_controller()
    controller.start_free_chat()
    return controller.snapshot().model_dump()
