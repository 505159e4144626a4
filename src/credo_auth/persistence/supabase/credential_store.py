"""Supabase (PostgREST) implementation of CredentialStore.

Talks to the Supabase table API over HTTP. Expected tables:

    users(id text primary key, email text, email_canonical text unique,
          password_hash text, profile jsonb, email_verified boolean,
          created_at timestamptz, updated_at timestamptz,
          last_login_at timestamptz)
    invalidated_tokens(token_id text primary key, invalidated_at timestamptz,
                       expires_at timestamptz)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

import httpx

from credo_auth.clock import utc_now
from credo_auth.exceptions import (
    ConcurrencyError,
    EmailAlreadyExistsError,
    StoreError,
    UserNotFoundError,
)
from credo_auth.repositories import CredentialStore, canonical_email
from credo_auth.schemas import UserData

logger = logging.getLogger(__name__)

# PostgREST: single-object request matched no rows
NO_ROWS_CODE = "PGRST116"
# PostgreSQL unique_violation
UNIQUE_VIOLATION_CODE = "23505"

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class SupabaseCredentialStore(CredentialStore):
    """Credential store over the Supabase REST API.

    Row-not-found responses on lookups become None; unique violations
    become ``EmailAlreadyExistsError``; any other failure is logged and
    raised as ``StoreError``.
    """

    def __init__(  # noqa: PLR0913
        self,
        supabase_url: str,
        supabase_key: str,
        users_table: str = "users",
        tokens_table: str = "invalidated_tokens",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not supabase_url:
            msg = "Supabase URL is required"
            raise ValueError(msg)
        if not supabase_key:
            msg = "Supabase API key is required"
            raise ValueError(msg)

        self._base_url = f"{supabase_url.rstrip('/')}/rest/v1"
        self._key = supabase_key
        self._users_table = users_table
        self._tokens_table = tokens_table
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "apikey": self._key,
                    "Authorization": f"Bearer {self._key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error("Supabase request %s /%s failed: %s", method, table, e)
            raise StoreError(f"Supabase request failed: {e}") from e

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return None
        return body.get("code") if isinstance(body, dict) else None

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        code = self._error_code(response)
        if code == UNIQUE_VIOLATION_CODE:
            raise EmailAlreadyExistsError
        logger.error(
            "Failed to %s: HTTP %s (%s) %s",
            action,
            response.status_code,
            code,
            response.text,
        )
        raise StoreError(f"Failed to {action}: HTTP {response.status_code}")

    def _to_data(self, row: dict[str, Any]) -> UserData:
        """Map a table row (snake_case JSON) to the store's data object."""
        return UserData(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            profile=row.get("profile") or {},
            email_verified=bool(row.get("email_verified")),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
            last_login_at=_parse_timestamp(row.get("last_login_at")),
        )

    async def _fetch_single(
        self,
        column: str,
        value: str,
        action: str,
    ) -> UserData | None:
        response = await self._request(
            "GET",
            self._users_table,
            params={"select": "*", column: f"eq.{value}"},
            headers={"Accept": SINGLE_OBJECT},
        )
        if not response.is_success and self._error_code(response) == NO_ROWS_CODE:
            return None
        self._raise_for_status(response, action)
        return self._to_data(response.json())

    # ── users ─────────────────────────────────────────────────

    async def create_user(  # noqa: PLR0913
        self,
        email: str,
        password_hash: str,
        *,
        user_id: str | None = None,
        profile: dict[str, Any] | None = None,
        email_verified: bool = False,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> UserData:
        user_id = user_id or uuid.uuid4().hex

        owner = await self.get_user_by_email(email)
        if owner is not None and owner.id != user_id:
            raise EmailAlreadyExistsError

        now = utc_now()
        row = {
            "id": user_id,
            "email": email.strip(),
            "email_canonical": canonical_email(email),
            "password_hash": password_hash,
            "profile": dict(profile or {}),
            "email_verified": email_verified,
            "created_at": _iso(created_at or now),
            "updated_at": _iso(updated_at or now),
            "last_login_at": None,
        }
        # upsert on the primary key
        response = await self._request(
            "POST",
            self._users_table,
            params={"on_conflict": "id"},
            json=row,
            headers={
                "Prefer": "return=representation,resolution=merge-duplicates",
                "Accept": SINGLE_OBJECT,
            },
        )
        self._raise_for_status(response, "create user")
        logger.info("Created user: %s", user_id)
        return self._to_data(response.json())

    async def get_user_by_id(self, user_id: str) -> UserData | None:
        return await self._fetch_single("id", user_id, "get user")

    async def get_user_by_email(self, email: str) -> UserData | None:
        return await self._fetch_single(
            "email_canonical",
            canonical_email(email),
            "get user by email",
        )

    async def update_user(  # noqa: PLR0913
        self,
        user_id: str,
        *,
        email: str | None = None,
        password_hash: str | None = None,
        profile: dict[str, Any] | None = None,
        email_verified: bool | None = None,
        last_login_at: datetime | None = None,
        expected_updated_at: datetime | None = None,
    ) -> UserData:
        current = await self.get_user_by_id(user_id)
        if current is None:
            raise UserNotFoundError

        changes: dict[str, Any] = {"updated_at": _iso(utc_now())}
        if email is not None:
            if canonical_email(email) != canonical_email(current.email):
                owner = await self.get_user_by_email(email)
                if owner is not None and owner.id != user_id:
                    raise EmailAlreadyExistsError
            changes["email"] = email.strip()
            changes["email_canonical"] = canonical_email(email)
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if profile is not None:
            changes["profile"] = {**current.profile, **profile}
        if email_verified is not None:
            changes["email_verified"] = email_verified
        if last_login_at is not None:
            changes["last_login_at"] = _iso(last_login_at)

        params = {"id": f"eq.{user_id}"}
        if expected_updated_at is not None:
            params["updated_at"] = f"eq.{_iso(expected_updated_at)}"

        response = await self._request(
            "PATCH",
            self._users_table,
            params=params,
            json=changes,
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        if not response.is_success and self._error_code(response) == NO_ROWS_CODE:
            # the row existed a moment ago, so the guard filtered it out
            if expected_updated_at is not None:
                raise ConcurrencyError
            raise UserNotFoundError
        self._raise_for_status(response, "update user")
        return self._to_data(response.json())

    async def delete_user(self, user_id: str) -> bool:
        response = await self._request(
            "DELETE",
            self._users_table,
            params={"id": f"eq.{user_id}"},
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response, "delete user")
        deleted = len(response.json()) > 0
        if deleted:
            logger.info("Deleted user: %s", user_id)
        return deleted

    # ── denylist ──────────────────────────────────────────────

    async def invalidate_token(
        self,
        token_id: str,
        expires_at: datetime | None = None,
        *,
        now: datetime | None = None,  # noqa: ARG002
    ) -> None:
        response = await self._request(
            "POST",
            self._tokens_table,
            params={"on_conflict": "token_id"},
            json={
                "token_id": token_id,
                "invalidated_at": _iso(utc_now()),
                "expires_at": _iso(expires_at),
            },
            headers={"Prefer": "return=minimal,resolution=ignore-duplicates"},
        )
        self._raise_for_status(response, "invalidate token")

    async def is_token_invalidated(self, token_id: str) -> bool:
        response = await self._request(
            "GET",
            self._tokens_table,
            params={"select": "token_id", "token_id": f"eq.{token_id}"},
        )
        self._raise_for_status(response, "check token")
        return len(response.json()) > 0

    async def cleanup_expired_tokens(self, now: datetime) -> int:
        response = await self._request(
            "DELETE",
            self._tokens_table,
            params={"expires_at": f"lt.{_iso(now)}"},
            headers={"Prefer": "return=representation"},
        )
        self._raise_for_status(response, "clean up tokens")
        return len(response.json())

    async def clear(self) -> None:
        for table, column in (
            (self._tokens_table, "token_id"),
            (self._users_table, "id"),
        ):
            response = await self._request(
                "DELETE",
                table,
                params={column: "not.is.null"},
            )
            self._raise_for_status(response, f"clear {table}")
