"""
Kernel Data Models

SQLAlchemy models for content (read-only) and learner progress.
"""

from moono.kernel.models.base import Base, TimestampMixin, generate_uuid
from moono.kernel.models.user import User
from moono.kernel.models.content import Unit, Lesson, LessonStep
from moono.kernel.models.progress import UserProgress

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    # Content
    "Unit",
    "Lesson",
    "LessonStep",
    # Progress
    "UserProgress",
]
