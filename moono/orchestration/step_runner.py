"""
Step Runner - forward-only traversal through a lesson's steps.

Holds the current step index and the interaction state of the displayed step.
Advancing is gated by the step's interaction (quizzes must be answered
correctly); advancing past the last step runs the completion sequence.

Every awaited continuation checks a generation counter so results that arrive
after a reload or close are discarded instead of applied to stale state.
"""

import uuid
from enum import Enum
from typing import Optional, Tuple

from moono.config import Settings, get_settings
from moono.engines.content.repository import ContentRepository
from moono.engines.interaction import (
    AudioInteraction,
    AudioResourceManager,
    AudioState,
    AudioTransport,
    FlashcardInteraction,
    QuizInteraction,
    QuizState,
    StepInteraction,
    create_interaction,
)
from moono.exceptions import IdentityError, LoadError, PlaybackError
from moono.logging_config import get_logger, session_id_var
from moono.orchestration.completion import CompletionSequence
from moono.schemas.content import LessonStepSchema
from moono.schemas.progress import CompletionResult

logger = get_logger(__name__)


class RunnerPhase(str, Enum):
    """Display phase of a lesson session."""
    IDLE = "idle"
    LOADING = "loading"
    LOAD_FAILED = "load_failed"
    READY = "ready"
    ADVANCING = "advancing"
    COMPLETING = "completing"
    FINISHED = "finished"


class StepRunner:
    """
    Drives one lesson session.

    Usage:
        async with StepRunner(repository, completion, transport, unit_id=3, unit_title="Basics") as runner:
            await runner.load(lesson_id)
            runner.select_option("b")
            if runner.can_advance():
                result = await runner.advance()
    """

    def __init__(
        self,
        repository: ContentRepository,
        completion: CompletionSequence,
        audio_transport: AudioTransport,
        unit_id: Optional[int] = None,
        unit_title: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.completion = completion
        self.audio_manager = AudioResourceManager(audio_transport)
        self.unit_id = unit_id
        self.unit_title = unit_title
        self.settings = settings or get_settings()

        self.lesson_id: Optional[int] = None
        self.steps: Tuple[LessonStepSchema, ...] = ()
        self.current_step_index = 0
        self.interaction: Optional[StepInteraction] = None
        self.phase = RunnerPhase.IDLE
        self.error: Optional[str] = None
        self.result: Optional[CompletionResult] = None
        self._generation = 0

    async def __aenter__(self) -> "StepRunner":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def current_step(self) -> Optional[LessonStepSchema]:
        if 0 <= self.current_step_index < len(self.steps):
            return self.steps[self.current_step_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.phase == RunnerPhase.FINISHED

    @property
    def is_last_step(self) -> bool:
        return bool(self.steps) and self.current_step_index == len(self.steps) - 1

    @property
    def progress(self) -> float:
        """Fraction of the lesson reached, counting the current step."""
        if not self.steps:
            return 0.0
        return min(1.0, (self.current_step_index + 1) / len(self.steps))

    async def load(self, lesson_id: int) -> None:
        """
        Fetch the lesson's steps and start at the first one.

        Raises:
            LoadError: If the steps cannot be fetched; call load again to retry
        """
        await self._leave_step()
        self._generation += 1
        generation = self._generation
        session_id_var.set(uuid.uuid4().hex[:12])

        self.lesson_id = lesson_id
        self.steps = ()
        self.current_step_index = 0
        self.interaction = None
        self.result = None
        self.error = None
        self.phase = RunnerPhase.LOADING

        try:
            steps = await self.repository.list_steps(lesson_id)
        except LoadError as exc:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded load", extra={"lesson_id": lesson_id})
                return
            self.phase = RunnerPhase.LOAD_FAILED
            self.error = exc.message
            logger.warning("Lesson load failed", extra={"lesson_id": lesson_id, "error": exc.message})
            raise

        if generation != self._generation:
            logger.debug("Discarding steps of superseded load", extra={"lesson_id": lesson_id})
            return

        self.steps = tuple(steps)
        self.phase = RunnerPhase.READY
        if self.steps:
            self.interaction = self._enter_step(0)
        logger.info("Lesson loaded", extra={"lesson_id": lesson_id, "step_count": len(self.steps)})

    def can_advance(self) -> bool:
        """Whether the learner may move past the current step."""
        if self.phase != RunnerPhase.READY or self.interaction is None:
            return False
        return self.interaction.can_advance()

    async def advance(self) -> Optional[CompletionResult]:
        """
        Move to the next step, or complete the lesson from the last step.

        No-op (returns None) when can_advance() is False.

        Returns:
            The CompletionResult when the lesson finished, otherwise None

        Raises:
            IdentityError: If the lesson cannot be attributed to a user; the
                runner stays on the last step so the learner can retry
        """
        if not self.can_advance():
            return None

        generation = self._generation
        if not self.is_last_step:
            # Blocks re-entry while the old step's audio is released
            self.phase = RunnerPhase.ADVANCING
            await self._leave_step()
            if generation != self._generation:
                return None
            self.current_step_index += 1
            self.interaction = self._enter_step(self.current_step_index)
            self.phase = RunnerPhase.READY
            return None

        self.phase = RunnerPhase.COMPLETING
        try:
            result = await self.completion.run(self.lesson_id, self.unit_id, self.unit_title)
        except IdentityError as exc:
            if generation == self._generation:
                self.phase = RunnerPhase.READY
                self.error = exc.message
            logger.warning("Lesson completion blocked: no user", extra={"lesson_id": self.lesson_id})
            raise

        if generation != self._generation:
            logger.debug("Discarding completion of superseded session", extra={"lesson_id": result.lesson_id})
            return None

        await self._leave_step()
        self.current_step_index = len(self.steps)
        self.interaction = None
        self.result = result
        self.phase = RunnerPhase.FINISHED
        return result

    def select_option(self, option_id: str) -> Optional[QuizState]:
        """Answer the current quiz step. None when the step is not a quiz."""
        if not isinstance(self.interaction, QuizInteraction):
            return None
        return self.interaction.select(option_id)

    def toggle_flashcard(self) -> Optional[bool]:
        """Flip the current card. None when the step is not a flashcard."""
        if not isinstance(self.interaction, FlashcardInteraction):
            return None
        return self.interaction.toggle()

    async def play_audio(self) -> Optional[AudioState]:
        """
        Play the current audio step.

        Playback errors never affect progression: they are logged and left on
        the interaction's ``last_error`` for inline display.
        """
        audio = self.interaction
        if not isinstance(audio, AudioInteraction):
            return None
        try:
            return await audio.play()
        except PlaybackError as exc:
            logger.warning("Audio playback failed", extra={"step_id": audio.step_id, "error": exc.message})
            return audio.state

    async def pause_audio(self) -> Optional[AudioState]:
        audio = self.interaction
        if not isinstance(audio, AudioInteraction):
            return None
        try:
            return await audio.pause()
        except PlaybackError as exc:
            logger.warning("Audio pause failed", extra={"step_id": audio.step_id, "error": exc.message})
            return audio.state

    async def close(self) -> None:
        """Leave the lesson: release audio and invalidate pending work."""
        await self._leave_step()
        self._generation += 1
        if self.phase != RunnerPhase.FINISHED:
            self.phase = RunnerPhase.IDLE

    def _enter_step(self, index: int) -> StepInteraction:
        return create_interaction(self.steps[index], self.audio_manager, self.settings)

    async def _leave_step(self) -> None:
        if isinstance(self.interaction, AudioInteraction):
            await self.interaction.dispose()
        await self.audio_manager.release()
