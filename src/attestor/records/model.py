"""Attestation record models.

One internal structure, two wire spellings: long field names (below) and the
short codes in ``SIGNED_FIELDS`` / ``PROOF_FIELDS``. The short codes are also
the keys of the signed payload, so their order is part of schema "1.0" and
must never change.
"""
from __future__ import annotations

from typing import Any, Literal, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..crypto.digest import DIGEST_HEX_RE
from ..errors import RecordFormatError

SCHEMA_VERSION = "1.0"
DIGEST_PATTERN = DIGEST_HEX_RE.pattern

# (long name, short code) in payload order
SIGNED_FIELDS = (
    ("version", "v"),
    ("document_digest", "dh"),
    ("intent_digest", "ih"),
    ("intent_text", "it"),
    ("approver_ref", "ai"),
    ("approver_label", "an"),
    ("event_time", "ts"),
    ("presence_ref", "pp"),
    ("presence_digest", "pph"),
    ("assisted_flag", "af"),
)
# outputs of signing; never part of the payload
PROOF_FIELDS = (
    ("signature_bytes", "sg"),
    ("signing_public_key", "pk"),
)
WIRE_FIELDS = SIGNED_FIELDS + PROOF_FIELDS
SHORT_TO_LONG = {short: long for long, short in WIRE_FIELDS}


class AttestationFields(BaseModel):
    """The signed field set of an attestation record."""

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    version: Literal["1.0"] = SCHEMA_VERSION
    document_digest: str = Field(pattern=DIGEST_PATTERN)
    intent_digest: str = Field(pattern=DIGEST_PATTERN)
    intent_text: str = Field(min_length=1)
    # system-asserted identity; not independently verified
    approver_ref: str = Field(min_length=1)
    approver_label: str = Field(min_length=1)
    event_time: int = Field(gt=0)
    presence_ref: str = Field(min_length=1)
    presence_digest: str = Field(pattern=DIGEST_PATTERN)
    assisted_flag: bool = False

    @property
    def schema_version(self) -> str:
        return self.version


class AttestationRecord(AttestationFields):
    """Signed, self-contained attestation. Signature and key are base64 of raw bytes."""

    signature_bytes: str = Field(min_length=1)
    signing_public_key: str = Field(min_length=1)


M = TypeVar("M", bound=BaseModel)


def describe_validation_error(err: ValidationError) -> str:
    # locations and messages only; input values stay out of error text
    parts = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "record"
        parts.append(f"{loc}: {e.get('msg')}")
    return "; ".join(parts)


def validate_model(model: Type[M], data: Any) -> M:
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if not isinstance(data, Mapping):
        raise RecordFormatError(f"expected an object, got {type(data).__name__}")
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise RecordFormatError(describe_validation_error(e)) from e


__all__ = [
    "SCHEMA_VERSION",
    "SIGNED_FIELDS",
    "PROOF_FIELDS",
    "WIRE_FIELDS",
    "SHORT_TO_LONG",
    "AttestationFields",
    "AttestationRecord",
    "validate_model",
]
