"""
Environment and digest collaborators for signature capture.

The recorder never reads global state directly. It asks an
EnvironmentProvider for what the client reported and a DigestProvider
for a one-way digest. Both are injected, so capture can run (and be
tested) without a real browser or crypto backend.

Environment data is UNTRUSTED and best-effort:
    - missing strings default to "unknown"
    - missing or non-numeric numbers default to 0
"""

from __future__ import annotations

import hashlib
import locale
import platform
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


UNKNOWN = "unknown"


class EsignkitError(Exception):
    """Base class for errors raised by esignkit collaborators."""
    pass


class DigestUnavailableError(EsignkitError):
    """Raised by a digest provider that cannot produce a digest."""
    pass


# =============================================================================
# ENVIRONMENT SNAPSHOT
# =============================================================================

def _text(value: Any) -> str:
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def _number(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """
    Client environment observed at one instant.

    timezone_offset is in minutes, UTC minus local time, the way
    browsers report it (UTC+1 is -60).
    """
    user_agent: str = UNKNOWN
    screen_width: int = 0
    screen_height: int = 0
    timezone: str = UNKNOWN
    language: str = UNKNOWN
    platform: str = UNKNOWN
    timezone_offset: int = 0

    @property
    def screen_resolution(self) -> str:
        return f"{self.screen_width}x{self.screen_height}"

    @property
    def screen_area(self) -> int:
        return self.screen_width * self.screen_height

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> EnvironmentSnapshot:
        """
        Build a snapshot from client-reported values.

        Accepts browser-style camelCase keys (userAgent, screenWidth, ...)
        or the snake_case field names.
        """
        data = data or {}

        def pick(camel: str, snake: str) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake)

        return cls(
            user_agent=_text(pick("userAgent", "user_agent")),
            screen_width=_number(pick("screenWidth", "screen_width")),
            screen_height=_number(pick("screenHeight", "screen_height")),
            timezone=_text(pick("timezone", "timezone")),
            language=_text(pick("language", "language")),
            platform=_text(pick("platform", "platform")),
            timezone_offset=_number(pick("timezoneOffset", "timezone_offset")),
        )


# =============================================================================
# ENVIRONMENT PROVIDERS
# =============================================================================

class EnvironmentProvider(ABC):
    """Source of client environment observations."""

    @abstractmethod
    def snapshot(self) -> EnvironmentSnapshot:
        raise NotImplementedError


class StaticEnvironmentProvider(EnvironmentProvider):
    """Serves values the client already reported (e.g. posted with the form)."""

    def __init__(self, environment: Union[EnvironmentSnapshot, Mapping[str, Any], None] = None):
        if isinstance(environment, EnvironmentSnapshot):
            self._snapshot = environment
        else:
            self._snapshot = EnvironmentSnapshot.from_mapping(environment)

    def snapshot(self) -> EnvironmentSnapshot:
        return self._snapshot


class SystemEnvironmentProvider(EnvironmentProvider):
    """
    Best-effort introspection of the host running the capture.

    There is no display to measure, so geometry is reported as 0x0.
    """

    def snapshot(self) -> EnvironmentSnapshot:
        local = time.localtime()
        offset_seconds = local.tm_gmtoff or 0
        return EnvironmentSnapshot.from_mapping({
            "user_agent": (
                f"Python/{platform.python_version()} "
                f"({platform.system()} {platform.release()})"
            ),
            "timezone": local.tm_zone,
            "language": locale.getlocale()[0],
            "platform": platform.system(),
            "timezone_offset": -offset_seconds // 60,
        })


# =============================================================================
# DIGEST PROVIDERS
# =============================================================================

class DigestProvider(ABC):
    """One-way digest primitive. Returns raw digest bytes."""

    @abstractmethod
    async def digest(self, data: bytes) -> bytes:
        raise NotImplementedError


class Sha256DigestProvider(DigestProvider):
    """SHA-256 via hashlib."""

    async def digest(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()
