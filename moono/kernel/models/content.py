"""
Content models - units, lessons and lesson steps.

Content is authored elsewhere and is read-only for the progression engine.
Units and steps are ordered by ``order_index``, lessons by ``sort_order``.
"""

from typing import Any, List, Optional

from sqlalchemy import ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moono.kernel.models.base import Base, TimestampMixin


class Unit(Base, TimestampMixin):
    """Top-level content grouping."""

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lessons: Mapped[List["Lesson"]] = relationship(
        back_populates="unit",
        cascade="all, delete-orphan",
    )


class Lesson(Base, TimestampMixin):
    """Ordered sequence of steps within a unit."""

    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    unit: Mapped["Unit"] = relationship(back_populates="lessons")
    steps: Mapped[List["LessonStep"]] = relationship(
        back_populates="lesson",
        cascade="all, delete-orphan",
    )


class LessonStep(Base):
    """
    One interactive step of a lesson.

    ``step_metadata`` maps to the ``metadata`` column (the name is reserved on
    declarative classes). It holds a JSON object, or occasionally a JSON string
    written by older authoring tools.
    """

    __tablename__ = "lesson_steps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    step_metadata: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)

    lesson: Mapped["Lesson"] = relationship(back_populates="steps")

    __table_args__ = (
        Index("ix_lesson_steps_lesson_order", "lesson_id", "order_index"),
    )
