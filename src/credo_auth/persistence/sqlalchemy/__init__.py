"""SQLAlchemy implementation of the credential store."""

from credo_auth.persistence.sqlalchemy.base import CredentialBase
from credo_auth.persistence.sqlalchemy.models import (
    InvalidatedTokenModel,
    UserModel,
)
from credo_auth.persistence.sqlalchemy.repositories import SQLAlchemyCredentialStore
from credo_auth.persistence.sqlalchemy.schema import create_tables, drop_tables

__all__ = [
    "CredentialBase",
    "InvalidatedTokenModel",
    "SQLAlchemyCredentialStore",
    "UserModel",
    "create_tables",
    "drop_tables",
]
