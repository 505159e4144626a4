"""Input validators for user-supplied fields.

Every validator returns a ``ValidationResult``; none of them raise for
ordinary invalid input.
"""

import re
from datetime import date, datetime
from urllib.parse import urlsplit

from dateutil import parser as date_parser

from credo_auth.schemas import ValidationResult

# local@domain.tld, no whitespace, exactly one "@"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 50

PHONE_MIN_DIGITS = 7


def _ok(message: str) -> ValidationResult:
    return ValidationResult(valid=True, message=message)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(valid=False, message=message)


def is_valid_email(email: str | None) -> bool:
    if not email:
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_email(email: str | None) -> ValidationResult:
    if not email:
        return _fail("Email is required")
    if not is_valid_email(email):
        return _fail("Email address is invalid")
    return _ok("Email is valid")


def validate_username(
    username: str | None,
    min_length: int = USERNAME_MIN_LENGTH,
    max_length: int = USERNAME_MAX_LENGTH,
    allowed_chars: re.Pattern[str] = USERNAME_PATTERN,
) -> ValidationResult:
    if not username:
        return _fail("Username is required")
    if len(username) < min_length:
        return _fail(f"Username must be at least {min_length} characters long")
    if len(username) > max_length:
        return _fail(f"Username must be at most {max_length} characters long")
    if not allowed_chars.match(username):
        return _fail("Username contains invalid characters")
    return _ok("Username is valid")


def validate_name(
    name: str | None,
    min_length: int = NAME_MIN_LENGTH,
    max_length: int = NAME_MAX_LENGTH,
    allow_spaces: bool = True,
) -> ValidationResult:
    """Validate a display name (first name, last name, nickname...)."""
    if not name:
        return _fail("Name is required")
    if len(name) < min_length:
        return _fail(f"Name must be at least {min_length} characters long")
    if len(name) > max_length:
        return _fail(f"Name must be at most {max_length} characters long")
    if not allow_spaces and re.search(r"\s", name):
        return _fail("Name cannot contain spaces")
    return _ok("Name is valid")


def validate_phone(phone: str | None, min_digits: int = PHONE_MIN_DIGITS) -> ValidationResult:
    if not phone:
        return _fail("Phone number is required")
    digits = re.sub(r"\D", "", phone)
    if len(digits) < min_digits:
        return _fail("Phone number is too short")
    return _ok("Phone number is valid")


def validate_url(url: str | None) -> ValidationResult:
    if not url:
        return _fail("URL is required")
    try:
        parts = urlsplit(url)
    except ValueError:
        return _fail("URL is invalid")
    if not parts.scheme or not parts.netloc or any(c.isspace() for c in url):
        return _fail("URL is invalid")
    return _ok("URL is valid")


def _to_date(value: date | datetime | str) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.parse(str(value).strip()).date()
    except (ValueError, OverflowError):
        return None


def validate_date(
    value: date | datetime | str | None,
    min_date: date | datetime | None = None,
    max_date: date | datetime | None = None,
) -> ValidationResult:
    """Validate a calendar date with optional inclusive bounds.

    Strings may be ISO 8601 or any common written form (``2024/05/01``,
    ``05/01/2024``, ``May 1, 2024``). Numeric day and month follow the
    US month-first order.
    """
    if not value:
        return _fail("Date is required")

    parsed = _to_date(value)
    if parsed is None:
        return _fail("Date is invalid")

    lower = _to_date(min_date) if min_date else None
    upper = _to_date(max_date) if max_date else None

    if lower and parsed < lower:
        return _fail(f"Date must be on or after {lower.isoformat()}")
    if upper and parsed > upper:
        return _fail(f"Date must be on or before {upper.isoformat()}")
    return _ok("Date is valid")
