"""Presence records: evidence a human actively confirmed intent.

A presence record is created once, never mutated, and bound into the
attestation record by digest only. Stronger presence evidence may replace the
challenge later, but its digest must keep flowing into the signed payload.
"""
from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .crypto.canonical_json import encode_ordered
from .errors import AcknowledgmentsIncomplete
from .hashing import digest
from .utils.clock import now_ms


class Acknowledgments(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    understands_approval: bool
    is_authorized: bool
    acting_knowingly: bool

    def all_true(self) -> bool:
        return self.understands_approval and self.is_authorized and self.acting_knowingly


class PresenceRecord(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)
    challenge_completed: bool
    challenge_completed_at: int
    acknowledgments: Acknowledgments
    acknowledged_at: int


def validate_acknowledgments(acks: Acknowledgments) -> bool:
    if not acks.understands_approval:
        raise AcknowledgmentsIncomplete("Approver must understand what they are approving")
    if not acks.is_authorized:
        raise AcknowledgmentsIncomplete("Approver must be authorized to approve")
    if not acks.acting_knowingly:
        raise AcknowledgmentsIncomplete("Approver must be acting knowingly and voluntarily")
    return True


def create_presence_record(
    session_id: str,
    challenge_completed_at: int,
    acknowledgments: Acknowledgments,
    challenge_completed: bool = True,
    now: Optional[int] = None,
) -> PresenceRecord:
    validate_acknowledgments(acknowledgments)
    return PresenceRecord(
        id=str(uuid.uuid4()),
        session_id=session_id,
        challenge_completed=challenge_completed,
        challenge_completed_at=challenge_completed_at,
        acknowledgments=acknowledgments,
        acknowledged_at=now_ms() if now is None else now,
    )


def presence_payload(record: PresenceRecord) -> bytes:
    acks = record.acknowledgments
    return encode_ordered((
        ("id", record.id),
        ("sid", record.session_id),
        ("cc", record.challenge_completed),
        ("cca", record.challenge_completed_at),
        ("ack", (
            ("ua", acks.understands_approval),
            ("ia", acks.is_authorized),
            ("ak", acks.acting_knowingly),
        )),
        ("aa", record.acknowledged_at),
    ))


def hash_presence(record: PresenceRecord) -> str:
    return digest(presence_payload(record))


__all__ = [
    "Acknowledgments",
    "PresenceRecord",
    "validate_acknowledgments",
    "create_presence_record",
    "presence_payload",
    "hash_presence",
]
