"""
Conversation Service: one learner's chat transcript and reply cycle.

Holds the ordered message history, the pending input buffer and the
`is_thinking` guard. Each submission runs exactly one completion against
the Gemini service; submissions arriving while a reply is outstanding
are dropped, not queued.

Every mode reset bumps `generation`. A reply that comes back for an
older generation belongs to a conversation the learner already left,
so it is discarded.
"""

import asyncio
import itertools
import logging
import time

from benoit.content import FALLBACK_REPLY, FREE_CHAT_CONTEXT, build_system_instruction, lesson_context
from benoit.models import Lesson, Message

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConversationSession:
    """Message history + request/reply orchestration for one learner."""

    # Auto-play the tutor's voice only for the first exchange of a mode
    AUTOPLAY_HISTORY_THRESHOLD = 2

    def __init__(self, gemini_service, audio_player):
        self._gemini = gemini_service
        self._audio_player = audio_player
        self.messages: list[Message] = []
        self.context = FREE_CHAT_CONTEXT
        self.is_thinking = False
        self.generation = 0
        self.pending_input = ""
        self._ids = itertools.count(1)
        self._playback_tasks: set[asyncio.Task] = set()

    @property
    def pending_playback(self) -> tuple[asyncio.Task, ...]:
        return tuple(self._playback_tasks)

    def reset(self, lesson: Lesson | None, greeting: str | None) -> None:
        """Start a new conversation. Only the ModeController calls this.

        The lesson itself stays with the controller; the session keeps the
        prompt context derived from it.
        """
        self.generation += 1
        self.context = lesson_context(lesson)
        self.is_thinking = False
        self.pending_input = ""
        self._ids = itertools.count(1)
        self.messages = []
        if greeting is not None:
            self.messages.append(
                Message(id="init", role="assistant", content=greeting, timestamp=_now_ms())
            )

    def set_input(self, text: str) -> None:
        self.pending_input = text

    def build_context(self) -> str:
        return self.context

    def _new_message(self, role: str, content: str) -> Message:
        timestamp = _now_ms()
        return Message(
            id=f"{timestamp}-{next(self._ids)}",
            role=role,
            content=content,
            timestamp=timestamp,
        )

    async def submit_user_message(self, text: str | None = None) -> Message | None:
        """Send learner text to the tutor and append the reply.

        Returns the assistant message, or None when the submission was
        ignored, the backend failed, or the session was reset meanwhile.

        No mode check here: callers must not submit on the Home screen
        (the HTTP route answers 409 there).
        """
        if text is None:
            text = self.pending_input
        if not text.strip() or self.is_thinking:
            return None

        generation = self.generation
        prior_count = len(self.messages)
        self.messages.append(self._new_message("user", text))
        self.pending_input = ""
        self.is_thinking = True

        history = [{"role": m.role, "content": m.content} for m in self.messages]
        system_instruction = build_system_instruction(self.build_context())

        try:
            response_text = await self._gemini.complete_conversation(history, system_instruction)
            if generation != self.generation:
                logger.info("Dropping tutor reply for superseded conversation %d", generation)
                return None
            reply = self._new_message("assistant", response_text or FALLBACK_REPLY)
            self.messages.append(reply)
        except Exception as exc:
            logger.error("Tutor reply failed: %s", exc)
            return None
        finally:
            if generation == self.generation:
                self.is_thinking = False

        if prior_count < self.AUTOPLAY_HISTORY_THRESHOLD:
            self.play_audio_in_background(reply.content)
        return reply

    async def play_audio(self, text: str) -> bool:
        """Speak `text` now (the "listen" button); True if playback started."""
        return await self._audio_player.play_audio(text)

    def play_audio_in_background(self, text: str) -> asyncio.Task:
        """Speak `text` without waiting; failures only reach the log."""
        task = asyncio.create_task(self._audio_player.play_audio(text))
        self._playback_tasks.add(task)
        task.add_done_callback(self._on_playback_done)
        return task

    def _on_playback_done(self, task: asyncio.Task) -> None:
        self._playback_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background playback failed: %s", exc)
