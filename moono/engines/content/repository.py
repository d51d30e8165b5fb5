"""
Content Repository - read-only queries over units, lessons and steps.

Ordering contract: ascending sequence key, ties broken by id ascending.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moono.exceptions import LoadError
from moono.engines.content.normalizer import normalize_step
from moono.kernel.models.content import Lesson, LessonStep, Unit
from moono.logging_config import get_logger
from moono.schemas.content import LessonSchema, LessonStepSchema, UnitSchema

logger = get_logger(__name__)


class ContentRepository(ABC):
    """Query surface for lesson content."""

    @abstractmethod
    async def list_units(self) -> List[UnitSchema]:
        """Return all units in traversal order."""

    @abstractmethod
    async def list_lessons(self, unit_id: int) -> List[LessonSchema]:
        """Return the lessons of one unit in traversal order."""

    @abstractmethod
    async def list_steps(self, lesson_id: int) -> List[LessonStepSchema]:
        """Return the normalized steps of one lesson in traversal order."""

    async def lesson_ids_by_unit(self) -> Dict[int, List[int]]:
        """Map every unit id to its ordered lesson ids."""
        units = await self.list_units()
        result: Dict[int, List[int]] = {}
        for unit in units:
            result[unit.id] = [lesson.id for lesson in await self.list_lessons(unit.id)]
        return result


class SqlContentRepository(ContentRepository):
    """
    Content repository backed by the relational content store.

    Every failure is raised as LoadError so callers can offer a retry.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_units(self) -> List[UnitSchema]:
        q = select(Unit).order_by(Unit.order_index, Unit.id)
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError as exc:
            logger.warning("Unit query failed", exc_info=True)
            raise LoadError("Could not load units") from exc
        return [UnitSchema.model_validate(row) for row in result.scalars().all()]

    async def list_lessons(self, unit_id: int) -> List[LessonSchema]:
        q = (
            select(Lesson)
            .where(Lesson.unit_id == unit_id)
            .order_by(Lesson.sort_order, Lesson.id)
        )
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError as exc:
            logger.warning("Lesson query failed", exc_info=True, extra={"unit_id": unit_id})
            raise LoadError("Could not load lessons", context={"unit_id": unit_id}) from exc
        return [LessonSchema.model_validate(row) for row in result.scalars().all()]

    async def list_steps(self, lesson_id: int) -> List[LessonStepSchema]:
        q = (
            select(LessonStep)
            .where(LessonStep.lesson_id == lesson_id)
            .order_by(LessonStep.order_index, LessonStep.id)
        )
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError as exc:
            logger.warning("Step query failed", exc_info=True, extra={"lesson_id": lesson_id})
            raise LoadError("Could not load lesson steps", context={"lesson_id": lesson_id}) from exc
        return [normalize_step(row) for row in result.scalars().all()]

    async def lesson_ids_by_unit(self) -> Dict[int, List[int]]:
        """Single query variant of the base implementation."""
        q = select(Lesson.id, Lesson.unit_id).order_by(Lesson.unit_id, Lesson.sort_order, Lesson.id)
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError as exc:
            logger.warning("Lesson index query failed", exc_info=True)
            raise LoadError("Could not load lesson index") from exc
        grouped: Dict[int, List[int]] = {}
        for lesson_id, unit_id in result.all():
            grouped.setdefault(unit_id, []).append(lesson_id)
        return grouped
