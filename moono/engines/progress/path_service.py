"""
Path Service - unit and lesson paths with derived statuses.

Every call fetches a fresh completion snapshot so that statuses reflect the
latest write (e.g. after returning from a finished lesson).
"""

from typing import List, Optional, Set

from moono.config import Settings, get_settings
from moono.engines.content.repository import ContentRepository
from moono.engines.progress.gating import (
    UnitGatingPolicy,
    compute_statuses,
    compute_unit_statuses,
    is_completed,
)
from moono.engines.progress.progress_store import ProgressStore
from moono.exceptions import PersistenceError
from moono.kernel.identity.identity_service import AuthProvider
from moono.logging_config import get_logger
from moono.schemas.progress import LessonPath, LessonPathItem, UnitPathItem

logger = get_logger(__name__)


class PathService:
    """
    Builds the home (unit) path and a unit's lesson path.

    Content failures propagate as LoadError so the caller can offer a retry.
    A failed completion read degrades to "nothing completed yet".
    """

    def __init__(
        self,
        repository: ContentRepository,
        store: ProgressStore,
        auth: AuthProvider,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.store = store
        self.auth = auth
        self.settings = settings or get_settings()

    @property
    def unit_policy(self) -> UnitGatingPolicy:
        try:
            return UnitGatingPolicy(self.settings.unit_gating_policy)
        except ValueError:
            logger.warning(
                "Unknown unit gating policy; using rollup",
                extra={"policy": self.settings.unit_gating_policy},
            )
            return UnitGatingPolicy.ROLLUP

    async def completed_snapshot(self) -> Set[int]:
        """Completed lesson ids for the current user; empty when signed out."""
        user_id = await self.auth.current_user()
        if user_id is None:
            return set()
        try:
            return await self.store.list_completed_lesson_ids(user_id)
        except PersistenceError as exc:
            logger.warning(
                "Completed lessons could not be fetched; showing none",
                extra={"user_id": str(user_id), "error": exc.message},
            )
            return set()

    async def unit_path(self) -> List[UnitPathItem]:
        """All units in order with status and lesson counts."""
        units = await self.repository.list_units()
        lessons_by_unit = await self.repository.lesson_ids_by_unit()
        completed = await self.completed_snapshot()

        unit_ids = [unit.id for unit in units]
        statuses = compute_unit_statuses(unit_ids, lessons_by_unit, completed, self.unit_policy)

        items = []
        for unit, unit_status in zip(units, statuses):
            lesson_ids = lessons_by_unit.get(unit.id, [])
            items.append(
                UnitPathItem(
                    unit=unit,
                    status=unit_status,
                    completed_lessons=sum(1 for lid in lesson_ids if is_completed(lid, completed)),
                    total_lessons=len(lesson_ids),
                )
            )
        return items

    async def lesson_path(self, unit_id: int) -> LessonPath:
        """The unit's lessons in order with status and completion percentage."""
        lessons = await self.repository.list_lessons(unit_id)
        completed = await self.completed_snapshot()

        statuses = compute_statuses([lesson.id for lesson in lessons], completed)
        completed_count = sum(1 for lesson in lessons if lesson.id in completed)
        total = len(lessons)
        return LessonPath(
            unit_id=unit_id,
            items=[LessonPathItem(lesson=lesson, status=s) for lesson, s in zip(lessons, statuses)],
            completed_count=completed_count,
            total_count=total,
            completion_percentage=round(completed_count / total * 100) if total else 0,
        )
