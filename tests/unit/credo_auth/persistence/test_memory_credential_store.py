"""Unit tests for InMemoryCredentialStore."""

from datetime import datetime, timedelta, timezone

import pytest

from credo_auth.exceptions import (
    ConcurrencyError,
    EmailAlreadyExistsError,
    UserNotFoundError,
)
from credo_auth.persistence import InMemoryCredentialStore

PAST = datetime(2000, 1, 1, tzinfo=timezone.utc)
FUTURE = datetime(2999, 1, 1, tzinfo=timezone.utc)


class TestInMemoryUsers:
    """Tests for user records and the email index."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = InMemoryCredentialStore()

    async def test_create_assigns_id_and_defaults(self):
        """Test that create fills in id, profile, verification and timestamps."""
        user = await self.store.create_user("user@example.com", "digest")

        assert user.id
        assert user.profile == {}
        assert user.email_verified is False
        assert user.created_at is not None
        assert user.updated_at is not None
        assert user.last_login_at is None

    async def test_create_keeps_supplied_id(self):
        """Test that a caller-supplied id is used."""
        user = await self.store.create_user("user@example.com", "d", user_id="u-1")

        assert user.id == "u-1"
        assert (await self.store.get_user_by_id("u-1")).email == "user@example.com"

    async def test_email_lookup_is_case_insensitive(self):
        """Test that lookups ignore case while display case is preserved."""
        await self.store.create_user("John.Doe@Example.com", "digest")

        user = await self.store.get_user_by_email("john.doe@example.COM")

        assert user is not None
        assert user.email == "John.Doe@Example.com"

    async def test_duplicate_email_rejected(self):
        """Test the one-user-per-email invariant."""
        await self.store.create_user("user@example.com", "digest")

        with pytest.raises(EmailAlreadyExistsError):
            await self.store.create_user("USER@example.com", "digest")

    async def test_create_with_same_id_upserts(self):
        """Test that an id collision overwrites and repoints the index."""
        await self.store.create_user("old@example.com", "d", user_id="u-1")

        await self.store.create_user("new@example.com", "d2", user_id="u-1")

        assert await self.store.get_user_by_email("old@example.com") is None
        assert (await self.store.get_user_by_email("new@example.com")).id == "u-1"
        assert (await self.store.get_user_by_id("u-1")).password_hash == "d2"

    async def test_unknown_lookups_return_none(self):
        """Test that absence is a None result, not an error."""
        assert await self.store.get_user_by_id("missing") is None
        assert await self.store.get_user_by_email("missing@example.com") is None

    async def test_update_merges_profile_shallowly(self):
        """Test that profile updates merge at the top level."""
        user = await self.store.create_user(
            "user@example.com",
            "d",
            profile={"a": 1, "nested": {"x": 1}},
        )

        await self.store.update_user(user.id, profile={"b": 2})
        updated = await self.store.update_user(user.id, profile={"nested": {"y": 2}})

        assert updated.profile == {"a": 1, "b": 2, "nested": {"y": 2}}

    async def test_update_refreshes_updated_at(self):
        """Test that every mutation moves updated_at forward."""
        user = await self.store.create_user(
            "user@example.com",
            "d",
            updated_at=PAST,
        )

        updated = await self.store.update_user(user.id, email_verified=True)

        assert updated.email_verified is True
        assert updated.updated_at > PAST

    async def test_update_email_repoints_index(self):
        """Test that an email change moves the index entry."""
        user = await self.store.create_user("old@example.com", "d")

        await self.store.update_user(user.id, email="New@example.com")

        assert await self.store.get_user_by_email("old@example.com") is None
        assert (await self.store.get_user_by_email("new@example.com")).id == user.id

    async def test_update_email_to_taken_address_rejected(self):
        """Test that an email change cannot steal another user's address."""
        await self.store.create_user("taken@example.com", "d")
        user = await self.store.create_user("mine@example.com", "d")

        with pytest.raises(EmailAlreadyExistsError):
            await self.store.update_user(user.id, email="taken@example.com")

        assert (await self.store.get_user_by_email("mine@example.com")).id == user.id

    async def test_update_unknown_user_raises(self):
        """Test that updating a missing id fails with not-found."""
        with pytest.raises(UserNotFoundError):
            await self.store.update_user("missing", email_verified=True)

    async def test_update_with_matching_guard(self):
        """Test that a matching updated_at guard lets the update through."""
        user = await self.store.create_user("user@example.com", "d")

        updated = await self.store.update_user(
            user.id,
            profile={"a": 1},
            expected_updated_at=user.updated_at,
        )

        assert updated.profile == {"a": 1}

    async def test_update_with_stale_guard_raises(self):
        """Test that a stale updated_at guard is rejected."""
        user = await self.store.create_user("user@example.com", "d", updated_at=PAST)
        await self.store.update_user(user.id, profile={"a": 1})

        with pytest.raises(ConcurrencyError):
            await self.store.update_user(
                user.id,
                profile={"b": 2},
                expected_updated_at=PAST,
            )

    async def test_returned_records_are_isolated(self):
        """Test that mutating a returned profile does not touch the store."""
        user = await self.store.create_user("user@example.com", "d", profile={"a": 1})

        user.profile["a"] = 999

        assert (await self.store.get_user_by_id(user.id)).profile == {"a": 1}

    async def test_nested_profile_values_are_isolated(self):
        """Test that nested profile values are never shared with callers."""
        prefs = {"theme": "dark"}
        user = await self.store.create_user(
            "user@example.com",
            "d",
            profile={"prefs": prefs},
        )

        prefs["theme"] = "light"
        fetched = await self.store.get_user_by_id(user.id)
        fetched.profile["prefs"]["lang"] = "de"

        stored = await self.store.get_user_by_id(user.id)
        assert stored.profile == {"prefs": {"theme": "dark"}}
        assert stored.updated_at == user.updated_at

    async def test_update_does_not_keep_caller_references(self):
        """Test that a merged nested value is copied on update."""
        user = await self.store.create_user("user@example.com", "d")
        address = {"city": "Berlin"}

        await self.store.update_user(user.id, profile={"address": address})
        address["city"] = "Paris"

        stored = await self.store.get_user_by_id(user.id)
        assert stored.profile == {"address": {"city": "Berlin"}}

    async def test_delete_user(self):
        """Test that delete removes the record and its index entry."""
        user = await self.store.create_user("user@example.com", "d")

        assert await self.store.delete_user(user.id) is True
        assert await self.store.get_user_by_id(user.id) is None
        assert await self.store.get_user_by_email("user@example.com") is None

    async def test_delete_missing_user_returns_false(self):
        """Test that deleting an absent user is not an error."""
        assert await self.store.delete_user("missing") is False


class TestInMemoryDenylist:
    """Tests for token revocation entries."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = InMemoryCredentialStore()

    async def test_invalidate_and_check(self):
        """Test that invalidated ids are reported as such."""
        await self.store.invalidate_token("jti-1", FUTURE)

        assert await self.store.is_token_invalidated("jti-1")
        assert not await self.store.is_token_invalidated("jti-2")

    async def test_cleanup_removes_expired_entries_only(self):
        """Test that cleanup keys on the recorded expiry."""
        await self.store.invalidate_token("expired", PAST)
        await self.store.invalidate_token("live", FUTURE)
        await self.store.invalidate_token("unknown-expiry")

        removed = await self.store.cleanup_expired_tokens(datetime.now(timezone.utc))

        assert removed == 1
        assert not await self.store.is_token_invalidated("expired")
        assert await self.store.is_token_invalidated("live")
        assert await self.store.is_token_invalidated("unknown-expiry")

    async def test_prunes_on_write_past_threshold(self):
        """Test that the denylist garbage-collects once it grows too large."""
        store = InMemoryCredentialStore(prune_threshold=3)
        for i in range(3):
            await store.invalidate_token(f"old-{i}", PAST + timedelta(days=i))

        await store.invalidate_token("live", FUTURE, now=PAST + timedelta(days=10))

        assert await store.is_token_invalidated("live")
        for i in range(3):
            assert not await store.is_token_invalidated(f"old-{i}")

    async def test_prune_uses_caller_time_not_wall_clock(self):
        """Test that entries still live at the caller's time survive pruning."""
        store = InMemoryCredentialStore(prune_threshold=1)
        caller_now = PAST

        await store.invalidate_token("a", PAST + timedelta(days=7), now=caller_now)
        await store.invalidate_token("b", PAST + timedelta(days=7), now=caller_now)
        await store.invalidate_token("c", PAST + timedelta(days=7), now=caller_now)

        for token_id in ("a", "b", "c"):
            assert await store.is_token_invalidated(token_id)

    async def test_no_pruning_without_caller_time(self):
        """Test that a write without a time never prunes."""
        store = InMemoryCredentialStore(prune_threshold=1)

        await store.invalidate_token("old-1", PAST)
        await store.invalidate_token("old-2", PAST)

        assert await store.is_token_invalidated("old-1")
        assert await store.is_token_invalidated("old-2")

    async def test_clear_wipes_everything(self):
        """Test that clear resets users and denylist."""
        await self.store.create_user("user@example.com", "d")
        await self.store.invalidate_token("jti-1", FUTURE)

        await self.store.clear()

        assert await self.store.get_user_by_email("user@example.com") is None
        assert not await self.store.is_token_invalidated("jti-1")
