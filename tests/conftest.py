"""
Pytest configuration og shared fixtures.
"""

import pytest

from storage_telemetry.dependencies import reset_singletons
from storage_telemetry.models import SmartRecord


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before hver test."""
    reset_singletons()
    yield
    reset_singletons()


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def passed_record():
    return SmartRecord(temperature=40, overall_status="PASSED", healthy=True)


@pytest.fixture
def failed_record():
    return SmartRecord(temperature=55, overall_status="FAILED", healthy=False)
