"""
Pydantic models for the Benoît French tutor.

Defines the data contract between services, routes, and clients.
Conversation messages and lessons are frozen: once created they are
never mutated, only appended or dropped as a whole on a mode reset.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AppMode(str, Enum):
    """Top-level screen the learner is on."""

    HOME = "home"
    LESSON = "lesson"
    CHAT = "chat"


class LessonLevel(str, Enum):
    BEGINNER = "Débutant"
    INTERMEDIATE = "Intermédiaire"
    ADVANCED = "Avancé"


class Lesson(BaseModel):
    """A structured lesson from the static catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable lesson identifier (e.g. l1)")
    title: str = Field(..., description="Lesson title shown to the learner")
    level: LessonLevel = Field(..., description="Difficulty level")
    description: str = Field(..., description="Goal of the lesson, injected into the tutor context")
    icon: str = Field(default="", description="Emoji icon for the lesson card")


class Message(BaseModel):
    """One conversational turn in the chat transcript."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier unique within a session")
    role: Literal["user", "assistant"] = Field(..., description="Who produced the message")
    content: str = Field(..., description="Message text, may include a translation in parentheses")
    translation: Optional[str] = Field(
        default=None, description="Optional separate translation of the content"
    )
    timestamp: int = Field(..., ge=0, description="Creation time in epoch milliseconds")


class SessionState(BaseModel):
    """Snapshot of the tutor state for one learner."""

    mode: AppMode = Field(default=AppMode.HOME, description="Current screen")
    active_lesson: Optional[Lesson] = Field(
        default=None, description="Selected lesson, or None for free chat / home"
    )
    messages: list[Message] = Field(
        default_factory=list, description="Ordered chat transcript"
    )
    is_thinking: bool = Field(
        default=False, description="True while a tutor reply is being generated"
    )
    generation: int = Field(
        default=0, ge=0, description="Incremented on every mode reset"
    )


class StartLessonRequest(BaseModel):
    lesson_id: str = Field(..., description="Id of the lesson to start")


class SendMessageRequest(BaseModel):
    content: str = Field(..., description="Text typed by the learner")


class PlayAudioRequest(BaseModel):
    text: str = Field(..., description="Text to speak aloud")
