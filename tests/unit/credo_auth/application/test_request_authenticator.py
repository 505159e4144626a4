"""Unit tests for RequestAuthenticator."""

from unittest.mock import AsyncMock

import pytest

from credo_auth.application import RequestAuthenticator, extract_bearer_token
from credo_auth.exceptions import UnauthorizedError
from tests.shared.fixtures import TEST_EMAIL, TEST_PASSWORD, build_auth_service


class TestExtractBearerToken:
    """Tests for Authorization header parsing."""

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc.def.ghi", "abc.def.ghi"),
            ("  Bearer   abc.def.ghi  ", "abc.def.ghi"),
            (None, None),
            ("", None),
            ("Bearer", None),
            ("Basic dXNlcjpwYXNz", None),
            ("Bearer two tokens", None),
        ],
    )
    def test_parsing(self, header, expected):
        """Test accepted and rejected header shapes."""
        assert extract_bearer_token(header) == expected


class TestRequestAuthenticator:
    """Tests for authenticate and protect."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service, self.tokens, self.store = build_auth_service()
        self.authenticator = RequestAuthenticator(self.service)

    async def _access_token(self) -> str:
        await self.service.register(
            TEST_EMAIL,
            TEST_PASSWORD,
            profile={"name": "Test"},
            auto_verify=True,
        )
        result = await self.service.login(TEST_EMAIL, TEST_PASSWORD)
        return result.tokens.access_token

    async def test_authenticate_returns_principal(self):
        """Test that a valid bearer token resolves to the user."""
        token = await self._access_token()

        principal = await self.authenticator.authenticate(f"Bearer {token}")

        assert principal.email == TEST_EMAIL
        assert principal.profile == {"name": "Test"}
        assert principal.email_verified is True

    async def test_missing_header(self):
        """Test that no header means unauthorized."""
        with pytest.raises(UnauthorizedError, match="Unauthorized"):
            await self.authenticator.authenticate(None)

    async def test_refresh_token_is_not_accepted(self):
        """Test that only access tokens authenticate requests."""
        await self._access_token()
        refresh = (await self.service.login(TEST_EMAIL, TEST_PASSWORD)).tokens

        with pytest.raises(UnauthorizedError):
            await self.authenticator.authenticate(f"Bearer {refresh.refresh_token}")

    async def test_protect_calls_handler_with_principal(self):
        """Test that the wrapped handler receives the principal."""
        token = await self._access_token()
        handler = AsyncMock(return_value="ok")
        protected = self.authenticator.protect(handler)

        result = await protected(f"Bearer {token}", "extra", flag=True)

        assert result == "ok"
        principal = handler.await_args.args[0]
        assert principal.email == TEST_EMAIL
        assert handler.await_args.args[1:] == ("extra",)
        assert handler.await_args.kwargs == {"flag": True}

    async def test_protect_never_calls_handler_on_failure(self):
        """Test that the protected handler is skipped for bad tokens."""
        handler = AsyncMock()
        protected = self.authenticator.protect(handler)

        with pytest.raises(UnauthorizedError):
            await protected("Bearer not-a-token")

        handler.assert_not_awaited()
