"""Root pytest configuration.

Test Structure:
    tests/
    ├── unit/              # Fast, isolated tests (in-memory store, mocks)
    ├── integration/       # Real adapters: SQLite via aiosqlite, mocked
    │                      # Supabase HTTP transport, FastAPI TestClient
    └── shared/            # Shared fixtures and utilities

Settings are never read from a developer's config/.env files here; every
test runs against the fixed environment set below.
"""

import pytest

from credo_config import clear_settings_cache

TEST_JWT_SECRET = "test-secret-key-for-credo-tests"


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    """Provide a minimal, deterministic settings environment."""
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_JWT_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("SMTP_ENABLED", "false")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
