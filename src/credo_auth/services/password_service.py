"""Password hashing service using bcrypt.

Provides secure password hashing and verification with a configurable
strength policy.
"""

import re
import secrets
import string
from dataclasses import dataclass

import bcrypt

from credo_auth.exceptions import WeakPasswordError
from credo_auth.schemas import ValidationResult

UPPERCASE_CHARS = string.ascii_uppercase
LOWERCASE_CHARS = string.ascii_lowercase
NUMBER_CHARS = string.digits
SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_SPECIAL_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

# bcrypt ignores everything past 72 bytes; recent releases raise instead
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


@dataclass(frozen=True)
class PasswordPolicy:
    """Password strength rules. Each character class is independently toggleable."""

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = False


class PasswordHashingService:
    """Service for secure password hashing, verification and policy checks.

    Uses bcrypt for password hashing with configurable work factor.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hash = service.hash("Secure123Pass")
    >>> service.verify("Secure123Pass", hash)
    True
    >>> service.verify("wrong_password", hash)
    False
    """

    DEFAULT_RANDOM_LENGTH = 12

    def __init__(self, rounds: int = 12, policy: PasswordPolicy | None = None):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12.
            Higher values are more secure but slower.
        policy
            Strength rules applied by ``validate`` (defaults to ``PasswordPolicy()``)
        """
        self._rounds = rounds
        self._policy = policy or PasswordPolicy()

    @property
    def policy(self) -> PasswordPolicy:
        return self._policy

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Each call uses a fresh random salt, so two digests of the same
        password differ; compare with ``verify``, never with ``==``.
        """
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(_encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Returns False instead of raising for malformed digests.
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                _encode(password),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            # Invalid hash format
            return False

    def validate(self, password: str | None) -> ValidationResult:
        """Check a candidate password against the policy.

        Stops at the first unmet rule and reports a rule-specific message.
        """
        policy = self._policy

        if not password:
            return ValidationResult(False, "Password is required")

        if len(password) < policy.min_length:
            return ValidationResult(
                False,
                f"Password must be at least {policy.min_length} characters long",
            )

        if policy.require_uppercase and not re.search(r"[A-Z]", password):
            return ValidationResult(
                False, "Password must contain at least one uppercase letter"
            )

        if policy.require_lowercase and not re.search(r"[a-z]", password):
            return ValidationResult(
                False, "Password must contain at least one lowercase letter"
            )

        if policy.require_numbers and not re.search(r"[0-9]", password):
            return ValidationResult(False, "Password must contain at least one number")

        if policy.require_special_chars and not _SPECIAL_PATTERN.search(password):
            return ValidationResult(
                False, "Password must contain at least one special character"
            )

        return ValidationResult(True, "Password is valid")

    def validate_strength(self, password: str | None) -> None:
        """Raise ``WeakPasswordError`` if the password violates the policy."""
        result = self.validate(password)
        if not result.valid:
            raise WeakPasswordError(f"Invalid password: {result.message}")

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash was made with a weaker work factor.

        A digest with a higher work factor than the configured one is left
        alone, so lowering ``rounds`` never downgrades stored digests.
        """
        try:
            # bcrypt format: $2b$XX$...
            parts = password_hash.split("$")
            if len(parts) >= 3:
                current_rounds = int(parts[2])
                return current_rounds < self._rounds
        except (ValueError, IndexError):
            pass
        return True

    def generate_random_password(self, length: int | None = None) -> str:
        """Generate a random password that passes ``validate``.

        The result contains at least one character of every required class.
        ``length`` defaults to 12 and is raised to the policy minimum if shorter.
        """
        policy = self._policy
        length = max(length or self.DEFAULT_RANDOM_LENGTH, policy.min_length)

        required = [
            chars
            for enabled, chars in (
                (policy.require_uppercase, UPPERCASE_CHARS),
                (policy.require_lowercase, LOWERCASE_CHARS),
                (policy.require_numbers, NUMBER_CHARS),
                (policy.require_special_chars, SPECIAL_CHARS),
            )
            if enabled
        ]
        pool = "".join(required) or UPPERCASE_CHARS + LOWERCASE_CHARS + NUMBER_CHARS
        length = max(length, len(required))

        chars = [secrets.choice(group) for group in required]
        chars.extend(secrets.choice(pool) for _ in range(length - len(chars)))
        secrets.SystemRandom().shuffle(chars)
        return "".join(chars)
