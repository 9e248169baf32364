"""Independent verification of attestation records.

A third party needs only the document bytes, the record and this algorithm:
  1. format check            -> invalid_signature_format (integrity unknown)
  2. document digest check   -> document_altered (integrity altered, both digests)
  3. payload reconstruction from the record's own fields
  4. Ed25519 check           -> signature_not_authentic (integrity unknown)
  5. presence binding, only when the caller supplies the full presence record
                             -> presence_not_bound
The document check runs before the signature check so callers can tell a
changed document from a key or signature problem. Cryptographic failure is a
normal return value; nothing here raises for it.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel

from ..crypto.signer import verify_signature
from ..errors import RecordFormatError
from ..hashing import hash_document
from ..obs.prom import observe_verification
from ..presence import PresenceRecord, hash_presence
from ..utils.ct import ct_eq
from ..utils.logging import get_logger
from .codec import RecordInput, deserialize
from .model import AttestationRecord
from .payload import build_payload

log = get_logger()


class VerificationError(str, Enum):
    INVALID_FORMAT = "invalid_signature_format"
    DOCUMENT_ALTERED = "document_altered"
    NOT_AUTHENTIC = "signature_not_authentic"
    PRESENCE_NOT_BOUND = "presence_not_bound"


class VerificationOutcome(BaseModel):
    valid: bool
    document_integrity: Literal["intact", "altered", "unknown"]
    error: Optional[VerificationError] = None
    message: Optional[str] = None
    # diagnostics for document_altered
    computed_digest: Optional[str] = None
    expected_digest: Optional[str] = None
    # populated on success
    approver_ref: Optional[str] = None
    approver_label: Optional[str] = None
    event_time: Optional[int] = None
    assisted_flag: Optional[bool] = None

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def _fail(error: VerificationError, integrity: str, **extra) -> VerificationOutcome:
    out = VerificationOutcome(valid=False, error=error, document_integrity=integrity, **extra)
    observe_verification(False, error.value)
    log.info(f"verification failed reason={error.value}")
    return out


def _presence_bound(record: AttestationRecord, presence: PresenceRecord) -> bool:
    if presence.id != record.presence_ref:
        return False
    if not ct_eq(hash_presence(presence), record.presence_digest):
        return False
    return presence.challenge_completed and presence.acknowledgments.all_true()


def verify(
    document: bytes,
    record: RecordInput,
    presence: Optional[PresenceRecord] = None,
) -> VerificationOutcome:
    try:
        rec = deserialize(record)
    except RecordFormatError as e:
        return _fail(VerificationError.INVALID_FORMAT, "unknown", message=str(e))

    computed = hash_document(document)
    if not ct_eq(computed, rec.document_digest):
        return _fail(
            VerificationError.DOCUMENT_ALTERED,
            "altered",
            computed_digest=computed,
            expected_digest=rec.document_digest,
        )

    try:
        payload = build_payload(rec)
    except (ValueError, TypeError) as e:
        # e.g. text that cannot be encoded as UTF-8
        return _fail(VerificationError.INVALID_FORMAT, "unknown", message=f"payload: {e.__class__.__name__}")

    if not verify_signature(payload, rec.signature_bytes, rec.signing_public_key):
        return _fail(VerificationError.NOT_AUTHENTIC, "unknown")

    if presence is not None and not _presence_bound(rec, presence):
        return _fail(VerificationError.PRESENCE_NOT_BOUND, "intact")

    observe_verification(True, None)
    return VerificationOutcome(
        valid=True,
        document_integrity="intact",
        approver_ref=rec.approver_ref,
        approver_label=rec.approver_label,
        event_time=rec.event_time,
        assisted_flag=rec.assisted_flag,
    )


__all__ = ["VerificationError", "VerificationOutcome", "verify"]
