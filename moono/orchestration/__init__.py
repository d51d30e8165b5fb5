"""Orchestration layer - lesson step runner and completion sequence."""

from moono.orchestration.completion import CompletionSequence, NO_UNIT_ID
from moono.orchestration.step_runner import RunnerPhase, StepRunner

__all__ = [
    "CompletionSequence",
    "NO_UNIT_ID",
    "RunnerPhase",
    "StepRunner",
]
