"""Credential store implementations by technology.

- ``memory``: volatile, test-grade store
- ``sqlalchemy``: async SQLAlchemy ORM store
- ``supabase``: PostgREST table API store over httpx

The SQL and Supabase stores are imported from their subpackages so their
dependencies are only loaded when used.
"""

from credo_auth.persistence.memory import InMemoryCredentialStore

__all__ = ["InMemoryCredentialStore"]
