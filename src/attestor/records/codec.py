"""Compact transfer encoding for attestation records.

``serialize`` always writes the short codes in wire order. ``deserialize``
accepts either spelling, since both appear at the system boundary; an object
carrying ``v`` but not ``version`` is read as the short form.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Union

from ..crypto.canonical_json import encode_ordered
from ..errors import RecordFormatError, UnsupportedSchemaVersion
from .model import (
    SCHEMA_VERSION,
    SHORT_TO_LONG,
    WIRE_FIELDS,
    AttestationRecord,
    validate_model,
)

RecordInput = Union[AttestationRecord, Mapping[str, Any], str, bytes]


def serialize(record: AttestationRecord) -> str:
    return encode_ordered((code, getattr(record, name)) for name, code in WIRE_FIELDS).decode("utf-8")


def to_long_form(record: AttestationRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name, _ in WIRE_FIELDS}


def _expand_short(obj: Mapping[str, Any]) -> Dict[str, Any]:
    return {SHORT_TO_LONG.get(k, k): v for k, v in obj.items()}


def deserialize(data: RecordInput) -> AttestationRecord:
    if isinstance(data, AttestationRecord):
        # model_copy(update=...) skips validation, so instances are checked again
        data = data.model_dump(warnings=False)
    if isinstance(data, (str, bytes, bytearray)):
        try:
            obj = json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            raise RecordFormatError("record is not valid JSON") from e
    else:
        obj = data
    if not isinstance(obj, Mapping):
        raise RecordFormatError("record must be a JSON object")
    if "v" in obj and "version" not in obj:
        obj = _expand_short(obj)
    if "version" not in obj:
        raise RecordFormatError("version: Field required")
    version = obj["version"]
    if version != SCHEMA_VERSION or not isinstance(version, str):
        raise UnsupportedSchemaVersion(f"unsupported schema version {version!r}")
    return validate_model(AttestationRecord, obj)


__all__ = ["serialize", "deserialize", "to_long_form", "RecordInput"]
