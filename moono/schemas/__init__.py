"""
Pydantic schemas for content and progression views.
"""

from moono.schemas.content import (
    StepType,
    UnitSchema,
    LessonSchema,
    QuizOption,
    ReadContent,
    QuizContent,
    FlashcardContent,
    AudioContent,
    StepContent,
    LessonStepSchema,
)
from moono.schemas.progress import (
    Status,
    UnitPathItem,
    LessonPathItem,
    LessonPath,
    CompletionResult,
)

__all__ = [
    # Content
    "StepType",
    "UnitSchema",
    "LessonSchema",
    "QuizOption",
    "ReadContent",
    "QuizContent",
    "FlashcardContent",
    "AudioContent",
    "StepContent",
    "LessonStepSchema",
    # Progress
    "Status",
    "UnitPathItem",
    "LessonPathItem",
    "LessonPath",
    "CompletionResult",
]
