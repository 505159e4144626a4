"""Supabase REST implementation of the credential store."""

from credo_auth.persistence.supabase.credential_store import SupabaseCredentialStore

__all__ = ["SupabaseCredentialStore"]
