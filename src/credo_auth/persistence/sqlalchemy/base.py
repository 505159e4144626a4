"""SQLAlchemy declarative base for credo_auth models.

This provides a separate Base for credential tables. An application with
its own migrations should include ``CredentialBase.metadata`` in them.

Examples
--------
# In Alembic env.py:
from credo_auth.persistence.sqlalchemy import CredentialBase

target_metadata = CredentialBase.metadata
"""

from sqlalchemy.orm import DeclarativeBase


class CredentialBase(DeclarativeBase):
    """Declarative base for credo_auth models."""
