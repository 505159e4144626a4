"""Unit tests for PasswordHashingService."""

import bcrypt
import pytest

from credo_auth.exceptions import ValidationError, WeakPasswordError
from credo_auth.services import PasswordHashingService, PasswordPolicy


class TestPasswordHashingService:
    """Tests for password hashing and verification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = PasswordHashingService(rounds=4)  # Low rounds for fast tests

    def test_hash_returns_bcrypt_format(self):
        """Test that hash returns a valid bcrypt hash."""
        hashed = self.service.hash("Secure123Pass")

        # bcrypt hashes start with $2b$ or $2a$
        assert hashed.startswith("$2")
        assert len(hashed) >= 50

    def test_verify_correct_password(self):
        """Test that verify returns True for correct password."""
        hashed = self.service.hash("Secure123Pass")

        assert self.service.verify("Secure123Pass", hashed) is True

    def test_verify_incorrect_password(self):
        """Test that verify returns False for incorrect password."""
        hashed = self.service.hash("Secure123Pass")

        assert self.service.verify("Wrong123Pass", hashed) is False

    def test_verify_invalid_hash_returns_false(self):
        """Test that verify returns False for invalid hash format."""
        assert self.service.verify("password", "not_a_valid_hash") is False
        assert self.service.verify("password", "") is False
        assert self.service.verify("", self.service.hash("Secure123Pass")) is False

    def test_hash_produces_different_hashes(self):
        """Test that hashing same password twice produces different hashes."""
        hash1 = self.service.hash("Secure123Pass")
        hash2 = self.service.hash("Secure123Pass")

        # Due to random salt, hashes should differ
        assert hash1 != hash2
        assert self.service.verify("Secure123Pass", hash1)
        assert self.service.verify("Secure123Pass", hash2)

    def test_long_password_hashes_and_verifies(self):
        """Test that passwords past bcrypt's byte limit do not raise."""
        password = "Aa1" + "x" * 100
        hashed = self.service.hash(password)

        assert self.service.verify(password, hashed)


class TestPasswordRehash:
    """Tests for work factor upgrades."""

    def test_needs_rehash_for_weaker_digest(self):
        """Test that a digest below the configured rounds needs a rehash."""
        weak = PasswordHashingService(rounds=4).hash("Secure123Pass")

        assert PasswordHashingService(rounds=5).needs_rehash(weak)

    def test_no_rehash_for_equal_rounds(self):
        """Test that a digest at the configured rounds is kept."""
        service = PasswordHashingService(rounds=4)

        assert not service.needs_rehash(service.hash("Secure123Pass"))

    def test_no_downgrade_for_stronger_digest(self):
        """Test that a stronger digest is never rewritten with fewer rounds."""
        strong = bcrypt.hashpw(b"Secure123Pass", bcrypt.gensalt(rounds=5)).decode()

        assert not PasswordHashingService(rounds=4).needs_rehash(strong)

    def test_unparseable_digest_needs_rehash(self):
        """Test that a digest in an unknown format is flagged."""
        assert PasswordHashingService(rounds=4).needs_rehash("garbage")


class TestPasswordValidation:
    """Tests for password strength validation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = PasswordHashingService(rounds=4)

    def test_valid_password(self):
        """Test that a password meeting the default policy passes."""
        result = self.service.validate("Secure123Pass")

        assert result.valid
        assert result.message == "Password is valid"

    @pytest.mark.parametrize(
        ("password", "message"),
        [
            ("", "Password is required"),
            ("Ab1", "Password must be at least 8 characters long"),
            ("lowercase123", "Password must contain at least one uppercase letter"),
            ("UPPERCASE123", "Password must contain at least one lowercase letter"),
            ("NoNumbersHere", "Password must contain at least one number"),
        ],
    )
    def test_rule_specific_messages(self, password, message):
        """Test that each unmet rule is reported with its own message."""
        result = self.service.validate(password)

        assert not result.valid
        assert result.message == message

    def test_short_circuits_on_first_failure(self):
        """Test that only the first unmet rule is reported."""
        # too short AND missing uppercase AND missing number
        result = self.service.validate("abc")

        assert result.message == "Password must be at least 8 characters long"

    def test_special_chars_when_required(self):
        """Test the optional special character rule."""
        service = PasswordHashingService(
            rounds=4,
            policy=PasswordPolicy(require_special_chars=True),
        )

        assert service.validate("Secure123Pass").message == (
            "Password must contain at least one special character"
        )
        assert service.validate("Secure123Pass!").valid

    def test_rules_are_independently_toggleable(self):
        """Test that disabling every class only leaves the length rule."""
        service = PasswordHashingService(
            rounds=4,
            policy=PasswordPolicy(
                min_length=4,
                require_uppercase=False,
                require_lowercase=False,
                require_numbers=False,
            ),
        )

        assert service.validate("aaaa").valid
        assert not service.validate("aaa").valid

    def test_validate_strength_raises_weak_password(self):
        """Test that validate_strength raises with the rule message."""
        with pytest.raises(WeakPasswordError, match="at least 8 characters"):
            self.service.validate_strength("short")

    def test_weak_password_is_a_validation_error(self):
        """Test that WeakPasswordError belongs to the validation family."""
        with pytest.raises(ValidationError):
            self.service.validate_strength("")


class TestRandomPassword:
    """Tests for random password generation."""

    def test_default_length(self):
        """Test that the default length is 12."""
        service = PasswordHashingService(rounds=4)

        assert len(service.generate_random_password()) == 12

    def test_length_raised_to_policy_minimum(self):
        """Test that a requested length below the minimum is raised."""
        service = PasswordHashingService(
            rounds=4,
            policy=PasswordPolicy(min_length=16),
        )

        assert len(service.generate_random_password(8)) == 16

    @pytest.mark.parametrize(
        "policy",
        [
            PasswordPolicy(),
            PasswordPolicy(require_special_chars=True),
            PasswordPolicy(min_length=20, require_special_chars=True),
            PasswordPolicy(require_uppercase=False, require_numbers=False),
        ],
    )
    def test_generated_password_passes_policy(self, policy):
        """Test that generated passwords always validate under the same policy."""
        service = PasswordHashingService(rounds=4, policy=policy)

        for _ in range(25):
            assert service.validate(service.generate_random_password()).valid

    def test_generated_passwords_differ(self):
        """Test that consecutive passwords are not repeated."""
        service = PasswordHashingService(rounds=4)

        passwords = {service.generate_random_password() for _ in range(10)}

        assert len(passwords) == 10
