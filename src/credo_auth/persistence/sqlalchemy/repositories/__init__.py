from credo_auth.persistence.sqlalchemy.repositories.credential_store import (
    SQLAlchemyCredentialStore,
)

__all__ = ["SQLAlchemyCredentialStore"]
