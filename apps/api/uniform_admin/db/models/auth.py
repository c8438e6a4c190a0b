"""SQLAlchemy ORM models for users."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from uniform_admin.db.base import Base
from uniform_admin.db.enums import Role
from uniform_admin.db.types import utcnow


class User(Base):
    """
    An operator of the admin application (salesperson, designer, admin...).

    `token_version` is bumped to revoke every issued session token.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(50), nullable=False, default=Role.VIEWER.value
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    token_version: Mapped[int] = mapped_column(default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
