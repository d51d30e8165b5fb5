"""
Interaction Engine - one state machine per step type.

- read: stateless
- quiz: unanswered / answered_correct / answered_incorrect
- flashcard: flipped flag
- audio: idle / loading / playing / paused
"""

from typing import Union

from moono.config import Settings
from moono.engines.interaction.audio import (
    AudioHandle,
    AudioInteraction,
    AudioResourceManager,
    AudioState,
    AudioTransport,
    PlaybackStatus,
    format_time,
)
from moono.engines.interaction.flashcard import FlashcardInteraction
from moono.engines.interaction.quiz import QuizFeedback, QuizInteraction, QuizState
from moono.engines.interaction.read import ReadInteraction, resolve_glyph
from moono.schemas.content import (
    AudioContent,
    FlashcardContent,
    LessonStepSchema,
    QuizContent,
    ReadContent,
)

StepInteraction = Union[ReadInteraction, QuizInteraction, FlashcardInteraction, AudioInteraction]


def create_interaction(
    step: LessonStepSchema,
    audio_manager: AudioResourceManager,
    settings: Settings,
) -> StepInteraction:
    """Fresh interaction state for a step."""
    payload = step.payload
    if isinstance(payload, QuizContent):
        return QuizInteraction(step.id, payload, QuizFeedback.from_settings(settings))
    if isinstance(payload, FlashcardContent):
        return FlashcardInteraction(step.id, payload)
    if isinstance(payload, AudioContent):
        return AudioInteraction(step.id, payload, audio_manager)
    if isinstance(payload, ReadContent):
        return ReadInteraction(payload, settings.default_read_glyph)
    raise TypeError(f"Unsupported step payload: {type(payload).__name__}")


__all__ = [
    "StepInteraction",
    "create_interaction",
    "ReadInteraction",
    "resolve_glyph",
    "QuizInteraction",
    "QuizFeedback",
    "QuizState",
    "FlashcardInteraction",
    "AudioInteraction",
    "AudioResourceManager",
    "AudioState",
    "AudioTransport",
    "AudioHandle",
    "PlaybackStatus",
    "format_time",
]
