"""
Completion Sequence - writes the lesson completion fact.

Runs when the learner advances past the final step:
1. resolve the acting user (missing user aborts with IdentityError)
2. upsert the (user, lesson) completion fact; conflicts count as success
3. any other write failure is logged and does not block the learner
4. return the context for the lesson-finished view
"""

from typing import Optional

from moono.config import Settings, get_settings
from moono.engines.progress.progress_store import ProgressStore
from moono.exceptions import IdentityError, PersistenceError
from moono.kernel.identity.identity_service import AuthProvider
from moono.logging_config import get_logger
from moono.schemas.progress import CompletionResult

logger = get_logger(__name__)

# Unit id used for the finished view when the lesson was opened without a unit
NO_UNIT_ID = 0


class CompletionSequence:
    """
    Records lesson completion for the acting user.

    A lost write is tolerated: gating re-derives status from whatever facts
    exist, so the next successful completion heals it.
    """

    def __init__(
        self,
        auth: AuthProvider,
        store: ProgressStore,
        settings: Optional[Settings] = None,
    ):
        self.auth = auth
        self.store = store
        self.settings = settings or get_settings()

    async def run(
        self,
        lesson_id: int,
        unit_id: Optional[int] = None,
        unit_title: Optional[str] = None,
    ) -> CompletionResult:
        """
        Complete a lesson.

        Args:
            lesson_id: Lesson that was finished
            unit_id: Parent unit, if known
            unit_title: Parent unit title, if known

        Returns:
            CompletionResult with the unit context and whether the write landed

        Raises:
            IdentityError: If there is no authenticated user
        """
        try:
            user_id = await self.auth.current_user()
        except Exception as exc:
            raise IdentityError("User could not be resolved; please sign in again") from exc
        if user_id is None:
            raise IdentityError("User could not be resolved; please sign in again")

        persisted = True
        error: Optional[str] = None
        log_extra = {"user_id": str(user_id), "lesson_id": lesson_id}
        try:
            await self.store.upsert_completion(user_id, lesson_id)
        except PersistenceError as exc:
            persisted, error = False, exc.message
            logger.warning("Completion write failed; continuing", exc_info=True, extra=log_extra)
        except Exception as exc:
            persisted, error = False, str(exc)
            logger.exception("Unexpected completion write failure; continuing", extra=log_extra)
        else:
            logger.info("Lesson completed", extra=log_extra)

        if unit_id is not None and unit_title:
            context_id, context_title = unit_id, unit_title
        else:
            context_id, context_title = NO_UNIT_ID, self.settings.no_unit_title

        return CompletionResult(
            lesson_id=lesson_id,
            unit_id=context_id,
            unit_title=context_title,
            persisted=persisted,
            error=error,
        )
