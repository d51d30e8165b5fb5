"""
Quiz step - answer validation state machine.

States: unanswered -> answered_incorrect <-> answered_correct (terminal).
The first correct answer is sticky for the rest of the visit; incorrect
answers can be retried freely.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from moono.config import Settings
from moono.exceptions import ConfigurationError
from moono.logging_config import get_logger
from moono.schemas.content import QuizContent

logger = get_logger(__name__)


class QuizState(str, Enum):
    """Answer state of a quiz step."""
    UNANSWERED = "unanswered"
    CORRECT = "answered_correct"
    INCORRECT = "answered_incorrect"


@dataclass(frozen=True)
class QuizFeedback:
    """Feedback messages shown after a selection."""

    correct: str = "correct"
    incorrect: str = "incorrect"
    unconfigured: str = "This question is not configured."

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuizFeedback":
        return cls(
            correct=settings.feedback_correct,
            incorrect=settings.feedback_incorrect,
            unconfigured=settings.feedback_unconfigured,
        )


class QuizInteraction:
    """
    Tracks the learner's selection for one quiz step.

    Usage:
        quiz = QuizInteraction(step.id, step.payload)
        quiz.select("b")
        if quiz.can_advance(): ...
    """

    def __init__(self, step_id: int, content: QuizContent, feedback: Optional[QuizFeedback] = None):
        self.step_id = step_id
        self.content = content
        self.messages = feedback or QuizFeedback()
        self.state = QuizState.UNANSWERED
        self.selected_option_id: Optional[str] = None
        self.feedback: Optional[str] = None
        self.configuration_error: Optional[ConfigurationError] = None

    @property
    def is_correct(self) -> bool:
        return self.state == QuizState.CORRECT

    @property
    def explanation(self) -> Optional[str]:
        """Explanation is revealed only after a correct answer."""
        return self.content.explanation if self.is_correct else None

    def select(self, option_id: str) -> QuizState:
        """
        Evaluate a selection.

        Ignored once answered correctly. A question without a resolvable
        correct option is answered incorrect with the "unconfigured" message.
        """
        if self.state == QuizState.CORRECT:
            return self.state

        self.selected_option_id = option_id

        if not self.content.is_configured:
            self.state = QuizState.INCORRECT
            self.feedback = self.messages.unconfigured
            self.configuration_error = ConfigurationError(
                "Quiz has no resolvable correct option",
                context={"step_id": self.step_id},
            )
            logger.warning("Selection on unconfigured quiz", extra={"step_id": self.step_id})
            return self.state

        if option_id == self.content.correct_option_id:
            self.state = QuizState.CORRECT
            self.feedback = self.messages.correct
        else:
            self.state = QuizState.INCORRECT
            self.feedback = self.messages.incorrect
        return self.state

    def can_advance(self) -> bool:
        return self.is_correct
