# esignkit
# Pre-submission obfuscation and e-signature evidence capture

"""
Two independent components for a form-submission workflow:

    SensitiveFieldCodec        — obfuscates sensitive fields for transport
    SignatureEvidenceRecorder  — captures, validates and renders the
                                 evidence for one electronic signature

The codec is obfuscation only, not encryption.
"""

import logging

from .codec import (
    IdentifierResult,
    SensitiveFieldCodec,
    TransformResult,
    decode,
    encode,
    is_sensitive,
    normalize_identifier,
    prepare_identifier_for_transmission,
)
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
    EsignkitError,
    Sha256DigestProvider,
    StaticEnvironmentProvider,
    SystemEnvironmentProvider,
)
from .pipeline import SubmissionResult, prepare_submission
from .recorder import SignatureEvidenceRecorder

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
