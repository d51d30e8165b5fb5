"""
Progress Store - durable completion facts (DB-backed).

One logical record per (user, lesson). Writing "completed" twice is the same
as writing it once: unique-constraint conflicts count as success.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Set

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moono.exceptions import PersistenceError
from moono.kernel.models.base import generate_uuid
from moono.kernel.models.progress import UserProgress
from moono.logging_config import get_logger

logger = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class ProgressStore(ABC):
    """Boundary to durable completion facts."""

    @abstractmethod
    async def list_completed_lesson_ids(self, user_id: uuid.UUID) -> Set[int]:
        """Return ids of lessons the user has completed."""

    @abstractmethod
    async def upsert_completion(self, user_id: uuid.UUID, lesson_id: int) -> None:
        """Record that the user completed the lesson. Idempotent."""


class SqlProgressStore(ProgressStore):
    """
    Completion facts in the ``user_progress`` table.

    Usage:
        store = SqlProgressStore(session)
        await store.upsert_completion(user_id, lesson_id)
        completed = await store.list_completed_lesson_ids(user_id)
    """

    def __init__(self, session: AsyncSession, native_upsert: bool = True):
        self.session = session
        # False forces read-then-write even where ON CONFLICT is available
        self.native_upsert = native_upsert

    async def list_completed_lesson_ids(self, user_id: uuid.UUID) -> Set[int]:
        """
        Raises:
            PersistenceError: If the query fails
        """
        q = select(UserProgress.lesson_id).where(
            UserProgress.user_id == user_id,
            UserProgress.is_completed.is_(True),
        )
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                "Could not read completed lessons",
                context={"user_id": str(user_id)},
            ) from exc
        return set(result.scalars().all())

    async def upsert_completion(self, user_id: uuid.UUID, lesson_id: int) -> None:
        """
        Mark (user, lesson) completed and commit.

        Uses ``INSERT ... ON CONFLICT DO UPDATE`` where the dialect supports
        it, otherwise read-then-write. On the read-then-write path a
        uniqueness conflict from a concurrent or retried write means the fact
        already holds and is not an error; that is confirmed by re-reading
        the row. Every other integrity failure, such as an unknown user or
        lesson, is an error.

        Raises:
            PersistenceError: On any failure other than a uniqueness conflict
        """
        context = {"user_id": str(user_id), "lesson_id": lesson_id}
        insert = None
        if self.native_upsert:
            insert = _UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
        try:
            if insert is not None:
                await self._upsert_native(insert, user_id, lesson_id)
            else:
                await self._upsert_generic(user_id, lesson_id)
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if insert is None and await self._is_recorded(user_id, lesson_id):
                logger.info("Completion already recorded; treating conflict as success", extra=context)
                return
            raise PersistenceError("Could not record lesson completion", context=context) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise PersistenceError("Could not record lesson completion", context=context) from exc

    async def _is_recorded(self, user_id: uuid.UUID, lesson_id: int) -> bool:
        q = select(UserProgress.is_completed).where(
            UserProgress.user_id == user_id,
            UserProgress.lesson_id == lesson_id,
        )
        try:
            result = await self.session.execute(q)
        except SQLAlchemyError:
            logger.warning("Could not re-read completion after conflict", exc_info=True)
            return False
        return bool(result.scalar_one_or_none())

    async def _upsert_native(self, insert, user_id: uuid.UUID, lesson_id: int) -> None:
        now = datetime.now(timezone.utc)
        stmt = insert(UserProgress).values(
            id=generate_uuid(),
            user_id=user_id,
            lesson_id=lesson_id,
            is_completed=True,
            completed_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "lesson_id"],
            set_={
                "is_completed": True,
                "completed_at": func.coalesce(UserProgress.completed_at, stmt.excluded.completed_at),
                "updated_at": now,
            },
        )
        await self.session.execute(stmt)

    async def _upsert_generic(self, user_id: uuid.UUID, lesson_id: int) -> None:
        q = select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.lesson_id == lesson_id,
        )
        result = await self.session.execute(q)
        row = result.scalar_one_or_none()
        now = datetime.now(timezone.utc)
        if row is None:
            self.session.add(
                UserProgress(
                    user_id=user_id,
                    lesson_id=lesson_id,
                    is_completed=True,
                    completed_at=now,
                )
            )
        elif not row.is_completed:
            row.is_completed = True
            row.completed_at = row.completed_at or now
        await self.session.flush()
