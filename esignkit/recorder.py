"""
Signature Evidence Recorder.

Captures, validates and renders SignatureEvidence for one signature
action at a time.

Capture must always complete:
    - If the digest provider is missing or fails, the digest is set to
      DIGEST_UNAVAILABLE and an error is logged
    - If the environment provider fails, an all-default snapshot is used
      and an error is logged
    - Nothing is retried; capture suspends exactly once, on the digest

Callers needing a timeout wrap capture() themselves (asyncio.wait_for).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .evidence import (
    DIGEST_UNAVAILABLE,
    SignatureEvidence,
    ValidationResult,
    format_for_audit,
    validate_evidence,
)
from .providers import (
    DigestProvider,
    DigestUnavailableError,
    EnvironmentProvider,
    EnvironmentSnapshot,
    Sha256DigestProvider,
    SystemEnvironmentProvider,
)

logger = logging.getLogger(__name__)

LOG_TAG = "[SIGNATURE]"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(instant: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision: 2026-01-20T10:00:00.000Z"""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    instant = instant.astimezone(timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def device_fingerprint(environment: EnvironmentSnapshot) -> str:
    """
    Weak device correlator: language|platform|timezone offset|screen area.

    Not a security identifier.
    """
    parts = [
        environment.language,
        environment.platform,
        str(environment.timezone_offset),
        str(environment.screen_area),
    ]
    return "|".join(parts)


class SignatureEvidenceRecorder:
    """Captures evidence for signature events using injected collaborators."""

    def __init__(
        self,
        environment: Optional[EnvironmentProvider] = None,
        digest: Optional[DigestProvider] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.environment = environment if environment is not None else SystemEnvironmentProvider()
        self.digest = digest if digest is not None else Sha256DigestProvider()
        self.clock = clock or _utc_now

    async def capture(self, signature_value: str) -> SignatureEvidence:
        """Capture a fresh evidence record for one signature action."""
        timestamp = format_timestamp(self.clock())
        environment = self._read_environment()

        integrity_digest = await self._hash(signature_value + timestamp)

        return SignatureEvidence(
            timestamp=timestamp,
            signature_value=signature_value,
            consent_given=True,
            integrity_digest=integrity_digest,
            environment_context={
                "user_agent": environment.user_agent,
                "screen_resolution": environment.screen_resolution,
                "timezone": environment.timezone,
            },
            device_fingerprint=device_fingerprint(environment),
            origin_address="",  # filled by the server
        )

    def validate(self, evidence: SignatureEvidence) -> ValidationResult:
        return validate_evidence(evidence)

    def format_for_audit(self, evidence: SignatureEvidence) -> str:
        return format_for_audit(evidence)

    async def verify_integrity(self, evidence: SignatureEvidence) -> bool:
        """
        Recompute the digest over (signature_value, timestamp) and compare.

        False when the record carries no verifiable digest or the
        digest provider is unavailable.
        """
        if not evidence.has_verifiable_digest:
            return False
        expected = await self._hash(evidence.signature_value + evidence.timestamp)
        if expected == DIGEST_UNAVAILABLE:
            return False
        return expected == evidence.integrity_digest.lower()

    def _read_environment(self) -> EnvironmentSnapshot:
        try:
            return self.environment.snapshot()
        except Exception as e:
            logger.error("%s Environment read failed: %s", LOG_TAG, e)
            return EnvironmentSnapshot()

    async def _hash(self, data: str) -> str:
        try:
            raw = await self.digest.digest(data.encode("utf-8"))
            if not isinstance(raw, (bytes, bytearray, memoryview)):
                raise TypeError(f"digest provider returned {type(raw).__name__}, not bytes")
            return bytes(raw).hex()
        except DigestUnavailableError as e:
            logger.error("%s Hash failed: digest unavailable: %s", LOG_TAG, e)
        except Exception as e:
            logger.error("%s Hash failed: %s", LOG_TAG, e)
        return DIGEST_UNAVAILABLE
