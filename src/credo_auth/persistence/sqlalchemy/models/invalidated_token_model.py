"""SQLAlchemy model for the token denylist."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from credo_auth.clock import utc_now
from credo_auth.persistence.sqlalchemy.base import CredentialBase


class InvalidatedTokenModel(CredentialBase):
    """
    One revoked token, keyed by its identifier.

    ``expires_at`` is the token's own expiry; rows past it can be deleted
    because the token would be rejected anyway.

    Table: invalidated_tokens
    """

    __tablename__ = "invalidated_tokens"

    token_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    invalidated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<InvalidatedTokenModel(token_id={self.token_id})>"
