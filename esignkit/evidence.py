"""
Signature Evidence — the audit record for one electronic signature.

ESIGN Act requirements this record supports:
    - Clear consent to use electronic signatures
    - Timestamp of signature
    - Identification of signer
    - Audit trail

A record is created once per signature action, validated once, then
handed to the caller. It is frozen: nothing here mutates it after
capture. The origin address is an open slot filled downstream by a
trusted server-side collaborator (see with_origin_address).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .providers import UNKNOWN


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Stored in integrity_digest when no digest could be computed.
# Never a valid hex digest, so it cannot collide with real output.
DIGEST_UNAVAILABLE = UNKNOWN

MIN_SIGNATURE_LENGTH = 2

AUDIT_HEADER = "Signature Metadata (ESIGN Act Compliance)"
AUDIT_RULE = "=" * 42

ORIGIN_PENDING = "pending"


def _freeze(context: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(context))


@dataclass(frozen=True)
class SignatureEvidence:
    """
    Evidence captured for one signature event.

    integrity_digest binds signature_value to timestamp: changing
    either afterwards no longer matches the digest.

    environment_context and device_fingerprint are corroborating
    signals only. They are client-reported and low entropy.
    """
    timestamp: str
    signature_value: str
    consent_given: bool
    integrity_digest: str
    # Read-only mapping; left out of __hash__ (mappings are unhashable)
    environment_context: Mapping[str, str] = field(default_factory=dict, hash=False)
    device_fingerprint: str = ""
    origin_address: str = ""

    def __post_init__(self):
        object.__setattr__(self, "environment_context", _freeze(self.environment_context))

    @property
    def user_agent(self) -> str:
        return self.environment_context.get("user_agent", "")

    @property
    def screen_resolution(self) -> str:
        return self.environment_context.get("screen_resolution", "")

    @property
    def timezone(self) -> str:
        return self.environment_context.get("timezone", "")

    @property
    def has_verifiable_digest(self) -> bool:
        return bool(self.integrity_digest) and self.integrity_digest != DIGEST_UNAVAILABLE

    def with_origin_address(self, origin_address: str) -> SignatureEvidence:
        """Return a copy with the network origin filled in."""
        return dataclasses.replace(self, origin_address=origin_address)

    def to_dict(self) -> dict[str, Any]:
        """Wire form sent along with the form submission."""
        return {
            "timestamp": self.timestamp,
            "ipAddress": self.origin_address,
            "userAgent": self.user_agent,
            "screenResolution": self.screen_resolution,
            "timezone": self.timezone,
            "consentGiven": self.consent_given,
            "signatureValue": self.signature_value,
            "signatureHash": self.integrity_digest,
            "deviceFingerprint": self.device_fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SignatureEvidence:
        """Rebuild a record from its wire form. Missing keys become empty."""
        return cls(
            timestamp=str(data.get("timestamp") or ""),
            signature_value=str(data.get("signatureValue") or ""),
            consent_given=data.get("consentGiven") is True,
            integrity_digest=str(data.get("signatureHash") or ""),
            environment_context={
                "user_agent": str(data.get("userAgent") or ""),
                "screen_resolution": str(data.get("screenResolution") or ""),
                "timezone": str(data.get("timezone") or ""),
            },
            device_fingerprint=str(data.get("deviceFingerprint") or ""),
            origin_address=str(data.get("ipAddress") or ""),
        )


# =============================================================================
# VALIDATION
# =============================================================================

@dataclass(frozen=True)
class ValidationResult:
    """Completeness check outcome. errors keeps check order."""
    valid: bool
    errors: tuple[str, ...] = ()


def validate_evidence(evidence: SignatureEvidence) -> ValidationResult:
    """
    Check a record for completeness.

    Every check runs; failures are collected, not short-circuited.

    Note: the DIGEST_UNAVAILABLE sentinel counts as a present digest.
    Callers that rely on tamper detection must also check
    evidence.has_verifiable_digest.
    """
    errors: list[str] = []

    if not evidence.timestamp:
        errors.append("Timestamp missing")
    if not evidence.user_agent:
        errors.append("User agent missing")
    if not evidence.signature_value or len(evidence.signature_value) < MIN_SIGNATURE_LENGTH:
        errors.append("Signature value invalid")
    if not evidence.consent_given:
        errors.append("Consent not given")
    if not evidence.integrity_digest:
        errors.append("Signature hash missing")

    return ValidationResult(valid=not errors, errors=tuple(errors))


# =============================================================================
# AUDIT FORMATTING
# =============================================================================

def format_for_audit(evidence: SignatureEvidence) -> str:
    """Render the record as a fixed-order audit trail block."""
    lines = [
        AUDIT_HEADER,
        AUDIT_RULE,
        f"Signed By: {evidence.signature_value}",
        f"Timestamp: {evidence.timestamp}",
        f"Time Zone: {evidence.timezone}",
        f"IP Address: {evidence.origin_address or ORIGIN_PENDING}",
        f"Device: {evidence.screen_resolution}",
        f"User Agent: {evidence.user_agent}",
        f"Device Fingerprint: {evidence.device_fingerprint}",
        f"Signature Hash: {evidence.integrity_digest}",
        f"Consent Given: {'Yes' if evidence.consent_given else 'No'}",
    ]
    return "\n".join(lines)
