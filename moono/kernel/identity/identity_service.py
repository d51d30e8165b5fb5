"""
Identity service for the acting learner.

The app signs learners in anonymously on first launch. The progression
engine only needs to know the current user's id; ``AuthProvider`` is the
boundary it depends on.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from moono.exceptions import IdentityError
from moono.kernel.models.base import generate_uuid
from moono.kernel.models.user import User
from moono.logging_config import get_logger

logger = get_logger(__name__)


class AuthProvider(ABC):
    """Boundary to the authentication collaborator."""

    @abstractmethod
    async def current_user(self) -> Optional[uuid.UUID]:
        """Return the signed-in user's id, or None when there is no session."""

    @abstractmethod
    async def ensure_session(self) -> uuid.UUID:
        """Create a session if none exists and return the user id."""


class AnonymousIdentityService(AuthProvider):
    """
    Anonymous sign-in backed by the ``users`` table.

    Usage:
        identity = AnonymousIdentityService(session)
        user_id = await identity.ensure_session()
    """

    def __init__(self, session: AsyncSession, user_id: Optional[uuid.UUID] = None):
        self.session = session
        self._user_id = user_id

    async def current_user(self) -> Optional[uuid.UUID]:
        return self._user_id

    async def ensure_session(self) -> uuid.UUID:
        """
        Bootstrap an anonymous user if no session exists.

        An id restored from a previous launch is reused when its row still
        exists; otherwise a fresh anonymous user is created.

        Raises:
            IdentityError: If the user row cannot be read or created
        """
        try:
            if self._user_id is not None:
                result = await self.session.execute(select(User.id).where(User.id == self._user_id))
                if result.scalar_one_or_none() is not None:
                    return self._user_id
                logger.info("Stored session user no longer exists", extra={"user_id": str(self._user_id)})

            user_id = generate_uuid()
            self.session.add(User(id=user_id, is_anonymous=True))
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise IdentityError("Could not start an anonymous session") from exc

        self._user_id = user_id
        logger.info("Anonymous session started", extra={"user_id": str(user_id)})
        return user_id

    def sign_out(self) -> None:
        """Forget the current session."""
        self._user_id = None
