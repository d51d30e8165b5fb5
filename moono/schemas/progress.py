"""
Pydantic schemas for derived progression views.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from moono.schemas.content import LessonSchema, UnitSchema


class Status(str, Enum):
    """Derived gating status. Never persisted."""
    LOCKED = "LOCKED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class UnitPathItem(BaseModel):
    """One unit on the home path."""

    unit: UnitSchema
    status: Status
    completed_lessons: int = 0
    total_lessons: int = 0

    @property
    def progress(self) -> float:
        if self.total_lessons <= 0:
            return 0.0
        return self.completed_lessons / self.total_lessons


class LessonPathItem(BaseModel):
    """One lesson on a unit's path."""

    lesson: LessonSchema
    status: Status


class LessonPath(BaseModel):
    """All lessons of a unit with their statuses."""

    unit_id: int
    items: List[LessonPathItem] = []
    completed_count: int = 0
    total_count: int = 0
    completion_percentage: int = 0


class CompletionResult(BaseModel):
    """Outcome of the completion sequence, used for the lesson-finished view."""

    lesson_id: int
    unit_id: int
    unit_title: str
    persisted: bool
    error: Optional[str] = None
