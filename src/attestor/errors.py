"""Exception taxonomy.

Cryptographic mismatches are never raised: the verifier reports them as a
VerificationOutcome. What is raised here is malformed input (format), state
transitions a session refuses, and key material that cannot be loaded.
"""
from __future__ import annotations


class AttestorError(Exception):
    """Base class for all attestor errors."""


class RecordFormatError(AttestorError, ValueError):
    """Record fields are missing, mistyped or mis-shaped."""


class UnsupportedSchemaVersion(RecordFormatError):
    """Record declares a schema version this build does not understand."""


class KeyMaterialError(AttestorError, ValueError):
    """Signing key material could not be parsed as an Ed25519 private key."""


class AcknowledgmentsIncomplete(AttestorError):
    """At least one required presence acknowledgment is false."""

    def __init__(self, message: str = "All acknowledgment flags must be true"):
        super().__init__(message)


class DuplicateItem(AttestorError):
    """An item with the same id already exists in a store."""


class SessionError(AttestorError):
    code = "SESSION_ERROR"

    def __init__(self, session_id: str, message: str | None = None):
        self.session_id = session_id
        super().__init__(message or f"{self.code}: {session_id}")


class SessionNotFound(SessionError):
    code = "SESSION_NOT_FOUND"


class SessionAlreadyApproved(SessionError):
    code = "SESSION_ALREADY_APPROVED"


class SessionExpired(SessionError):
    code = "SESSION_EXPIRED"


__all__ = [
    "AttestorError",
    "RecordFormatError",
    "UnsupportedSchemaVersion",
    "KeyMaterialError",
    "AcknowledgmentsIncomplete",
    "DuplicateItem",
    "SessionError",
    "SessionNotFound",
    "SessionAlreadyApproved",
    "SessionExpired",
]
