"""In-memory credential store."""

from credo_auth.persistence.memory.credential_store import InMemoryCredentialStore

__all__ = ["InMemoryCredentialStore"]
