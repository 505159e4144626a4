"""Engine settings loaded from environment variables.

An optional .env file supplies defaults; the first existing candidate wins:
``$CREDO_ENV_FILE``, then ``config/.env.dev``, then ``config/.env`` under the
project root. Real environment variables always override the file.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ROOT_MARKERS = ("config", "pyproject.toml", ".git")


def project_root() -> Path:
    """Nearest ancestor of this package holding a config dir or repo marker."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return here.parents[1]


def get_config_dir() -> Path:
    return project_root() / "config"


def _env_file_candidates() -> list[Path]:
    root = project_root()
    candidates = []
    override = os.environ.get("CREDO_ENV_FILE")
    if override:
        override_path = Path(override)
        candidates.append(
            override_path if override_path.is_absolute() else root / override_path,
        )
    candidates += [root / "config" / ".env.dev", root / "config" / ".env"]
    return candidates


def _resolve_env_file_path() -> Path | None:
    return next((path for path in _env_file_candidates() if path.is_file()), None)


class Settings(BaseSettings):
    """Engine configuration.

    Only ``jwt_secret_key`` is required; everything else has a default.
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security (MUST be set)
    jwt_secret_key: SecretStr

    # Tokens (seconds)
    jwt_access_token_expire_seconds: int = 3600
    jwt_refresh_token_expire_seconds: int = 604800
    revocation_prune_threshold: int = 10_000

    # Password policy
    bcrypt_rounds: int = 12
    password_min_length: int = 8
    password_require_uppercase: bool = True
    password_require_lowercase: bool = True
    password_require_numbers: bool = True
    password_require_special_chars: bool = False

    # Email
    email_from_address: str = "noreply@example.com"
    smtp_enabled: bool = False
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_starttls: bool = True

    # Persistence
    database_url: str | None = None
    supabase_url: str | None = None
    supabase_key: SecretStr | None = None
    supabase_users_table: str = "users"
    supabase_tokens_table: str = "invalidated_tokens"
    supabase_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"

    @field_validator("jwt_access_token_expire_seconds", "jwt_refresh_token_expire_seconds")
    @classmethod
    def _validate_positive_expiry(cls, v: int) -> int:
        if v <= 0:
            msg = "Token expiry must be a positive number of seconds"
            raise ValueError(msg)
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def _validate_bcrypt_rounds(cls, v: int) -> int:
        # bcrypt only accepts work factors between 4 and 31
        if not 4 <= v <= 31:
            msg = "bcrypt_rounds must be between 4 and 31"
            raise ValueError(msg)
        return v

    @property
    def password_policy(self) -> dict[str, int | bool]:
        """Password policy flags as keyword arguments for PasswordPolicy."""
        return {
            "min_length": self.password_min_length,
            "require_uppercase": self.password_require_uppercase,
            "require_lowercase": self.password_require_lowercase,
            "require_numbers": self.password_require_numbers,
            "require_special_chars": self.password_require_special_chars,
        }


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings.

    ``jwt_secret_key`` must be provided via environment variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
