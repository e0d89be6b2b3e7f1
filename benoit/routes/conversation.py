"""
Conversation routes: submit learner text and replay tutor audio.

POST /api/conversation/message  {"content": "Bonjour"}
    → {"status": "ok" | "ignored", "reply": {...} | null, "state": {...}}
    "ignored" covers empty input, a reply already in flight, and
    backend failures (the learner simply sees no new message).

POST /api/conversation/play     {"text": "..."}
    → {"played": true | false}
"""

import logging

from fastapi import APIRouter, HTTPException

from benoit.models import AppMode, PlayAudioRequest, SendMessageRequest
from benoit.routes.session import get_controller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversation", tags=["conversation"])


@router.post("/message")
async def send_message(body: SendMessageRequest) -> dict:
    controller = get_controller()
    if controller.mode == AppMode.HOME:
        raise HTTPException(status_code=409, detail="Start a lesson or a free chat first")
    reply = await controller.session.submit_user_message(body.content)
    return {
        "status": "ok" if reply is not None else "ignored",
        "reply": reply.model_dump() if reply is not None else None,
        "state": controller.snapshot().model_dump(),
    }


@router.post("/play")
async def play_audio(body: PlayAudioRequest) -> dict:
    controller = get_controller()
    played = await controller.session.play_audio(body.text)
    return {"played": played}
