"""
Mode Controller: Home / Lesson / Chat state machine.

Single owner of the current mode and lesson. Every transition is a full
reset of the conversation: no message survives a mode change.
"""

import logging

from benoit.content import FREE_CHAT_GREETING, lesson_greeting
from benoit.models import AppMode, Lesson, SessionState
from benoit.services.conversation_service import ConversationSession

logger = logging.getLogger(__name__)


class ModeController:
    def __init__(self, session: ConversationSession):
        self.session = session
        self.mode = AppMode.HOME
        self.active_lesson: Lesson | None = None

    def go_home(self) -> None:
        self._enter(AppMode.HOME, None, None)

    def start_lesson(self, lesson: Lesson) -> None:
        self._enter(AppMode.LESSON, lesson, lesson_greeting(lesson))

    def start_free_chat(self) -> None:
        self._enter(AppMode.CHAT, None, FREE_CHAT_GREETING)

    def _enter(self, mode: AppMode, lesson: Lesson | None, greeting: str | None) -> None:
        self.mode = mode
        self.active_lesson = lesson
        self.session.reset(lesson, greeting)
        logger.info(
            "Mode → %s (lesson=%s, generation=%d)",
            mode.value, lesson.id if lesson else None, self.session.generation,
        )

    def snapshot(self) -> SessionState:
        return SessionState(
            mode=self.mode,
            active_lesson=self.active_lesson,
            messages=list(self.session.messages),
            is_thinking=self.session.is_thinking,
            generation=self.session.generation,
        )
