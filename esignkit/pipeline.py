"""
Submission Pipeline for esignkit.

Ties the two components together the way a form-submission workflow
uses them:

    1. Validate and encode identifier fields (SSN-like)
    2. Encode every other sensitive field
    3. Capture signature evidence
    4. Validate the evidence and render its audit text

The components stay independent; this module is just one caller.
Nothing raises. Whether to block the submission is read off
SubmissionResult.accepted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .codec import SensitiveFieldCodec, as_field_text
from .evidence import SignatureEvidence, ValidationResult
from .recorder import SignatureEvidenceRecorder

logger = logging.getLogger(__name__)

# Field-name fragments that get the 9-digit identifier pipeline
IDENTIFIER_FIELDS: tuple[str, ...] = ("ssn", "socialSecurityNumber")

_NAME_TOKEN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


# =============================================================================
# SUBMISSION RESULT
# =============================================================================

@dataclass
class SubmissionResult:
    """
    Everything the caller needs to transmit (or re-prompt).

    field_errors maps a field name to the reason it was rejected.
    """
    fields: dict[str, object]
    evidence: SignatureEvidence
    validation: ValidationResult
    audit_text: str
    field_errors: dict[str, str] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return not self.field_errors and self.validation.valid

    def to_payload(self) -> dict[str, object]:
        """Body for the submission request."""
        return {
            "fields": dict(self.fields),
            "signatureMetadata": self.evidence.to_dict(),
        }


def _name_tokens(field_name: str) -> list[str]:
    """Split camelCase / snake_case / kebab-case names into lowercase words."""
    return [token.lower() for token in _NAME_TOKEN.findall(field_name)]


def _is_identifier_field(field_name: str) -> bool:
    """
    Match whole words only: "applicantSSN" and "ssn_value" are
    identifiers, "businessName" is not.
    """
    tokens = _name_tokens(field_name)
    for name in IDENTIFIER_FIELDS:
        words = _name_tokens(name)
        for start in range(len(tokens) - len(words) + 1):
            if tokens[start:start + len(words)] == words:
                return True
    return False


# =============================================================================
# PIPELINE EXECUTION
# =============================================================================

async def prepare_submission(
    fields: Mapping[str, object],
    signature_value: str,
    recorder: Optional[SignatureEvidenceRecorder] = None,
    codec: Optional[SensitiveFieldCodec] = None,
) -> SubmissionResult:
    """
    Prepare a form submission carrying an electronic signature.

    Args:
        fields: Raw form fields keyed by field name
        signature_value: The typed signature (signer's name)
        recorder: Evidence recorder (default collaborators if None)
        codec: Sensitive field codec (default field set if None)

    Returns:
        SubmissionResult with encoded fields, evidence and audit text
    """
    recorder = recorder or SignatureEvidenceRecorder()
    codec = codec or SensitiveFieldCodec()

    prepared: dict[str, object] = {}
    field_errors: dict[str, str] = {}

    # ==========================================================================
    # STAGE 1: Sensitive fields
    # ==========================================================================
    for name, value in fields.items():
        if not codec.is_sensitive(name):
            prepared[name] = value
            continue

        text = as_field_text(value)
        if _is_identifier_field(name):
            result = codec.prepare_identifier_for_transmission(text)
            if result.error is not None:
                field_errors[name] = result.error
            prepared[name] = result.encoded
        else:
            prepared[name] = codec.encode(text)

    # ==========================================================================
    # STAGE 2: Signature evidence
    # ==========================================================================
    evidence = await recorder.capture(signature_value)
    validation = recorder.validate(evidence)

    if field_errors:
        logger.info("Submission has rejected fields: %s", sorted(field_errors))
    if not validation.valid:
        logger.info("Signature evidence incomplete: %s", "; ".join(validation.errors))

    return SubmissionResult(
        fields=prepared,
        evidence=evidence,
        validation=validation,
        audit_text=recorder.format_for_audit(evidence),
        field_errors=field_errors,
    )
