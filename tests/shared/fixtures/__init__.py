"""Shared test helpers for all test suites."""

from tests.shared.fixtures.auth import (
    TEST_EMAIL,
    TEST_PASSWORD,
    TEST_SECRET,
    FakeClock,
    RecordingSender,
    build_auth_service,
)

__all__ = [
    "TEST_EMAIL",
    "TEST_PASSWORD",
    "TEST_SECRET",
    "FakeClock",
    "RecordingSender",
    "build_auth_service",
]
