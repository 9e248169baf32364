"""Attestation record factory.

The signing key attests that this service witnessed and recorded the approval
event; it does not represent the approver. Key custody is the caller's job:
the key is always passed in, never read from ambient state here.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..crypto.signer import KeyMaterial, b64, derive_public_key, load_private_key, sign
from ..hashing import hash_document, hash_intent
from ..obs.prom import observe_record_issued
from ..presence import PresenceRecord, hash_presence
from ..utils.clock import now_ms
from ..utils.logging import get_logger
from .model import AttestationFields, AttestationRecord, validate_model
from .payload import build_payload

log = get_logger()


def create_record(
    fields: Union[AttestationFields, Mapping[str, Any]],
    private_key: KeyMaterial,
) -> AttestationRecord:
    """Sign ``fields`` and return the complete record.

    Raises RecordFormatError when fields are missing or malformed and
    KeyMaterialError when the key cannot be loaded.
    """
    f = validate_model(AttestationFields, fields)
    sk = load_private_key(private_key)
    payload = build_payload(f)
    record = AttestationRecord(
        **f.model_dump(),
        signature_bytes=b64(sign(payload, sk)),
        signing_public_key=b64(derive_public_key(sk)),
    )
    observe_record_issued()
    log.info(f"attestation issued doc={f.document_digest[:16]} presence={f.presence_ref}")
    return record


def issue_record(
    document: bytes,
    intent_text: str,
    approver_ref: str,
    approver_label: str,
    presence: PresenceRecord,
    private_key: KeyMaterial,
    assisted_flag: bool = False,
    event_time: Optional[int] = None,
) -> AttestationRecord:
    """Hash the raw inputs and sign them in one step."""
    canonical_intent, intent_digest = hash_intent(intent_text)
    return create_record(
        {
            "document_digest": hash_document(document),
            "intent_digest": intent_digest,
            "intent_text": canonical_intent,
            "approver_ref": approver_ref,
            "approver_label": approver_label,
            "event_time": now_ms() if event_time is None else event_time,
            "presence_ref": presence.id,
            "presence_digest": hash_presence(presence),
            "assisted_flag": assisted_flag,
        },
        private_key,
    )


__all__ = ["create_record", "issue_record"]
