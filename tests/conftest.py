"""Shared fixtures for esignkit tests."""

from datetime import datetime, timezone

import pytest

from esignkit.providers import (
    DigestProvider,
    DigestUnavailableError,
    EnvironmentSnapshot,
    StaticEnvironmentProvider,
)
from esignkit.recorder import SignatureEvidenceRecorder


class FailingDigestProvider(DigestProvider):
    """Digest backend that is not available."""

    def __init__(self):
        self.calls = 0

    async def digest(self, data: bytes) -> bytes:
        self.calls += 1
        raise DigestUnavailableError("crypto.subtle is not available")


class BrokenEnvironmentProvider(StaticEnvironmentProvider):
    def snapshot(self) -> EnvironmentSnapshot:
        raise RuntimeError("navigator is not defined")


@pytest.fixture
def fixed_instant():
    return datetime(2026, 1, 20, 10, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def fixed_timestamp():
    """fixed_instant as capture renders it."""
    return "2026-01-20T10:00:00.123Z"


@pytest.fixture
def browser_environment():
    return EnvironmentSnapshot(
        user_agent="Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0",
        screen_width=1920,
        screen_height=1080,
        timezone="America/New_York",
        language="en-US",
        platform="Linux x86_64",
        timezone_offset=300,
    )


@pytest.fixture
def failing_digest():
    return FailingDigestProvider()


@pytest.fixture
def broken_environment():
    return BrokenEnvironmentProvider()


@pytest.fixture
def recorder(browser_environment, fixed_instant):
    return SignatureEvidenceRecorder(
        environment=StaticEnvironmentProvider(browser_environment),
        clock=lambda: fixed_instant,
    )
