"""SQLAlchemy model for user records."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from credo_auth.clock import utc_now
from credo_auth.persistence.sqlalchemy.base import CredentialBase


class UserModel(CredentialBase):
    """
    SQLAlchemy model for a user and its password digest.

    ``email`` keeps the address as entered for display; ``email_canonical``
    holds the lower-cased form and carries the uniqueness constraint, so
    lookups are case-insensitive on every backend.

    Table: users
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    email_canonical: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # bcrypt digest, ~60 chars
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    profile: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"
