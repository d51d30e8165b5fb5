"""
User model for learner identity.

Learners are created anonymously on first launch; the row only exists so
completion facts have an owner.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from moono.kernel.models.base import Base, TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    """Learner account."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    is_anonymous: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    display_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
