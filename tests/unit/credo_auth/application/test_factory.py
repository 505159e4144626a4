"""Unit tests for wiring the service from settings."""

import pytest

from credo_auth.application import (
    AuthenticationService,
    build_credential_store,
    create_auth_service,
)
from credo_auth.exceptions import WeakPasswordError
from credo_auth.persistence import InMemoryCredentialStore
from credo_auth.persistence.sqlalchemy import SQLAlchemyCredentialStore
from credo_auth.persistence.supabase import SupabaseCredentialStore
from credo_config import Settings, get_settings
from tests.shared.fixtures import TEST_EMAIL, TEST_PASSWORD, RecordingSender


class TestBuildCredentialStore:
    """Tests for choosing a store from settings."""

    def test_defaults_to_in_memory(self):
        """Test that no persistence settings means the in-memory store."""
        assert isinstance(build_credential_store(get_settings()), InMemoryCredentialStore)

    def test_database_url_selects_sqlalchemy(self):
        """Test that a database URL selects the SQL store."""
        settings = Settings(
            jwt_secret_key="secret",
            database_url="sqlite+aiosqlite:///:memory:",
        )

        assert isinstance(build_credential_store(settings), SQLAlchemyCredentialStore)

    def test_supabase_settings_select_supabase(self):
        """Test that Supabase settings select the REST store."""
        settings = Settings(
            jwt_secret_key="secret",
            supabase_url="https://project.supabase.co",
            supabase_key="service-key",
        )

        assert isinstance(build_credential_store(settings), SupabaseCredentialStore)


class TestCreateAuthService:
    """Tests for the service factory."""

    def test_builds_service(self):
        """Test that the factory returns a wired service."""
        service = create_auth_service(get_settings())

        assert isinstance(service, AuthenticationService)

    async def test_uses_given_store_and_sender(self):
        """Test that injected collaborators are used end to end."""
        store = InMemoryCredentialStore()
        sender = RecordingSender()
        service = create_auth_service(get_settings(), store, sender)

        await service.register(TEST_EMAIL, TEST_PASSWORD)

        assert await store.get_user_by_email(TEST_EMAIL) is not None
        assert sender.messages[0].from_email == "noreply@example.com"

    async def test_settings_policy_applies(self, monkeypatch):
        """Test that password policy flags flow from settings."""
        monkeypatch.setenv("PASSWORD_MIN_LENGTH", "20")
        service = create_auth_service(Settings())

        with pytest.raises(WeakPasswordError, match="at least 20 characters"):
            await service.register(TEST_EMAIL, TEST_PASSWORD)

        result = await service.register(TEST_EMAIL, "Long1Enough" * 2, auto_verify=True)
        assert result.success
