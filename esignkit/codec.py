"""
Sensitive Field Codec for esignkit.

Transport-layer obfuscation for sensitive PII (SSN, date of birth, ...).

This is NOT encryption. The transform is base64 over the percent-encoded
UTF-8 form of the value, which only keeps the raw value out of plaintext
while in transit. Real encryption happens server-side before storage.

Failure contract (non-negotiable):
    Nothing in this module raises to the caller.
    - encode/decode echo their input unchanged on failure and log an error
    - encode_result/decode_result report the same failure explicitly
    - identifier validation reports a reason string in the result
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Field-name fragments that mark a form field as sensitive
SENSITIVE_FIELDS: tuple[str, ...] = ("ssn", "socialSecurityNumber", "dateOfBirth")

IDENTIFIER_LENGTH = 9

# Characters encodeURIComponent leaves alone (besides alphanumerics and _.-~)
URI_COMPONENT_SAFE = "!*'()"

LOG_TAG = "[CLIENT_ENCRYPTION]"

ERROR_REQUIRED = "SSN is required"
ERROR_LENGTH = f"SSN must be {IDENTIFIER_LENGTH} digits"
ERROR_FORMAT = "Invalid SSN format"

# ASCII digits only, "١٢٣" is not an identifier
_NON_DIGIT = re.compile(r"[^0-9]")
_REPEATED_DIGIT = re.compile(r"^([0-9])\1*$")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class TransformResult:
    """
    Outcome of an encode or decode call.

    When ok is False the transform did not apply and value is the
    caller's input, echoed back untouched.
    """
    value: str
    ok: bool = True
    error: Optional[str] = None


@dataclass(frozen=True)
class IdentifierResult:
    """Result of preparing a 9-digit identifier for transmission."""
    encoded: str
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.error is None


# =============================================================================
# FIELD CLASSIFICATION
# =============================================================================

def is_sensitive(field_name: str, names: Iterable[str] = SENSITIVE_FIELDS) -> bool:
    """Check whether a form field name refers to sensitive data."""
    lowered = (field_name or "").lower()
    return any(name.lower() in lowered for name in names)


def as_field_text(value: object) -> str:
    """Text form of a posted field value. None (not posted) is empty."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize_identifier(raw: str) -> str:
    """Remove formatting (dashes, spaces, ...) leaving only digits."""
    if not raw:
        return ""
    return _NON_DIGIT.sub("", raw)


# =============================================================================
# TRANSFORM
# =============================================================================

def encode_result(value: str) -> TransformResult:
    """
    Forward transform with an explicit outcome.

    "123-45-6789" -> "MTIzLTQ1LTY3ODk="
    """
    if not value:
        return TransformResult(value="")
    try:
        escaped = quote(value, safe=URI_COMPONENT_SAFE, errors="strict")
        encoded = base64.b64encode(escaped.encode("ascii")).decode("ascii")
    except (UnicodeError, TypeError, AttributeError) as e:
        logger.error("%s Failed to encode data for transmission: %s", LOG_TAG, e)
        return TransformResult(value=value, ok=False, error=str(e))
    return TransformResult(value=encoded)


def decode_result(encoded: str) -> TransformResult:
    """Inverse of encode_result."""
    if not encoded:
        return TransformResult(value="")
    try:
        escaped = base64.b64decode(encoded.encode("ascii"), validate=True).decode("ascii")
        if _BAD_ESCAPE.search(escaped):
            raise ValueError("malformed percent escape")
        decoded = unquote(escaped, errors="strict")
    except (binascii.Error, UnicodeError, ValueError, TypeError, AttributeError) as e:
        logger.error("%s Failed to decode data: %s", LOG_TAG, e)
        return TransformResult(value=encoded, ok=False, error=str(e))
    return TransformResult(value=decoded)


def encode(value: str) -> str:
    """
    Encode a value for transmission.

    Returns the input unchanged if the transform fails; compare the
    result with the input (or use encode_result) to detect that.
    """
    return encode_result(value).value


def decode(encoded: str) -> str:
    """Decode a transmitted value. Returns the input unchanged on failure."""
    return decode_result(encoded).value


# =============================================================================
# IDENTIFIER PIPELINE
# =============================================================================

def prepare_identifier_for_transmission(raw: str) -> IdentifierResult:
    """
    Validate and encode a 9-digit identifier (SSN).

    1. Reject empty input
    2. Strip formatting
    3. Reject wrong length
    4. Reject a single repeated digit (000000000, 111111111, ...)
    5. Encode for transport
    """
    if not raw:
        return IdentifierResult(encoded="", error=ERROR_REQUIRED)

    cleaned = normalize_identifier(raw)

    if len(cleaned) != IDENTIFIER_LENGTH:
        return IdentifierResult(encoded="", error=ERROR_LENGTH)

    if _REPEATED_DIGIT.match(cleaned):
        return IdentifierResult(encoded="", error=ERROR_FORMAT)

    return IdentifierResult(encoded=encode(cleaned))


# =============================================================================
# CODEC
# =============================================================================

class SensitiveFieldCodec:
    """
    Bundles classification and transform for a form submission.

    The sensitive-name set is fixed at construction and only read
    afterwards, so one codec can be shared freely.
    """

    def __init__(self, sensitive_fields: Iterable[str] = SENSITIVE_FIELDS):
        self.sensitive_fields: tuple[str, ...] = tuple(sensitive_fields)

    def is_sensitive(self, field_name: str) -> bool:
        return is_sensitive(field_name, self.sensitive_fields)

    @staticmethod
    def normalize_identifier(raw: str) -> str:
        return normalize_identifier(raw)

    @staticmethod
    def encode(value: str) -> str:
        return encode(value)

    @staticmethod
    def decode(encoded: str) -> str:
        return decode(encoded)

    @staticmethod
    def encode_result(value: str) -> TransformResult:
        return encode_result(value)

    @staticmethod
    def decode_result(encoded: str) -> TransformResult:
        return decode_result(encoded)

    @staticmethod
    def prepare_identifier_for_transmission(raw: str) -> IdentifierResult:
        return prepare_identifier_for_transmission(raw)

    def encode_sensitive_fields(self, fields: Mapping[str, object]) -> dict[str, object]:
        """
        Return a copy of the form fields with every sensitive value
        encoded. Sensitive numbers are encoded as their text, so nothing
        sensitive leaves in plaintext. Non-sensitive values pass through.
        """
        prepared: dict[str, object] = {}
        for name, value in fields.items():
            if self.is_sensitive(name):
                prepared[name] = self.encode(as_field_text(value))
            else:
                prepared[name] = value
        return prepared
