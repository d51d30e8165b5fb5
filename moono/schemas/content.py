"""
Pydantic schemas for lesson content.

Step payloads are a tagged union keyed by ``kind``. Raw metadata from the
store is mapped into one of these shapes by
``moono.engines.content.normalizer`` before any interaction logic sees it.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class StepType(str, Enum):
    """Closed set of lesson step types."""
    READ = "read"
    QUIZ = "quiz"
    FLASHCARD = "flashcard"
    AUDIO = "audio"


class UnitSchema(BaseModel):
    """Unit as read from the content store."""

    id: int
    title: str
    description: Optional[str] = None
    order_index: int = 0

    class Config:
        from_attributes = True


class LessonSchema(BaseModel):
    """Lesson as read from the content store."""

    id: int
    unit_id: int
    title: str
    description: Optional[str] = None
    sort_order: int = 0

    class Config:
        from_attributes = True


class QuizOption(BaseModel):
    """Single quiz option with a stable id."""

    id: str
    text: str


class ReadContent(BaseModel):
    """Reading step: markdown body and an optional illustration keyword."""

    kind: Literal["read"] = "read"
    body: str = ""
    image_keyword: Optional[str] = None


class QuizContent(BaseModel):
    """Multiple choice question in canonical form."""

    kind: Literal["quiz"] = "quiz"
    question: str = ""
    options: List[QuizOption] = []
    correct_option_id: Optional[str] = None
    explanation: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.correct_option_id is not None


class FlashcardContent(BaseModel):
    """Two-sided vocabulary card."""

    kind: Literal["flashcard"] = "flashcard"
    front_text: str = ""
    back_text: str = ""


class AudioContent(BaseModel):
    """Listening step. A missing locator only fails when playback starts."""

    kind: Literal["audio"] = "audio"
    audio_url: Optional[str] = None
    description: str = ""


StepContent = Annotated[
    Union[ReadContent, QuizContent, FlashcardContent, AudioContent],
    Field(discriminator="kind"),
]


class LessonStepSchema(BaseModel):
    """A normalized lesson step."""

    id: int
    lesson_id: int
    order_index: int = 0
    type: StepType
    title: Optional[str] = None
    content: Optional[str] = None
    payload: StepContent
