"""Repository interfaces for credo_auth.

This package defines the abstract store interface that can be implemented
by different persistence technologies. Implementations live under
``credo_auth.persistence``.
"""

from credo_auth.repositories.credential_store import (
    CredentialStore,
    canonical_email,
)

__all__ = ["CredentialStore", "canonical_email"]
