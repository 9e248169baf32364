"""Signable payload construction.

Field order is fixed for schema "1.0":
  v, dh, ih, it, ai, an, ts, pp, pph, af
Signing and verification both call ``build_payload`` so they reconstruct the
same bytes from the same field values.
"""
from __future__ import annotations

from typing import Any, Mapping, Union

from ..crypto.canonical_json import encode_ordered
from .model import SIGNED_FIELDS, AttestationFields, validate_model


def build_payload(fields: Union[AttestationFields, Mapping[str, Any]]) -> bytes:
    f = fields if isinstance(fields, AttestationFields) else validate_model(AttestationFields, fields)
    return encode_ordered((code, getattr(f, name)) for name, code in SIGNED_FIELDS)


__all__ = ["build_payload"]
