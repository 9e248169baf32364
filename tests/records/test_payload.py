import json

import pytest

from attestor.errors import RecordFormatError
from attestor.records.create import create_record
from attestor.records.payload import build_payload

from conftest import PRIV

DH = "a" * 64
IH = "b" * 64
PPH = "c" * 64

FIELDS = {
    "version": "1.0",
    "document_digest": DH,
    "intent_digest": IH,
    "intent_text": "Approve X",
    "approver_ref": "user-1",
    "approver_label": "Ada",
    "event_time": 1700000000000,
    "presence_ref": "proof-1",
    "presence_digest": PPH,
    "assisted_flag": False,
}


def test_payload_exact_bytes():
    expected = (
        '{"v":"1.0","dh":"%s","ih":"%s","it":"Approve X","ai":"user-1","an":"Ada",'
        '"ts":1700000000000,"pp":"proof-1","pph":"%s","af":false}' % (DH, IH, PPH)
    ).encode()
    assert build_payload(FIELDS) == expected


def test_payload_deterministic_and_order_fixed():
    a = build_payload(FIELDS)
    reordered = dict(reversed(list(FIELDS.items())))
    assert build_payload(reordered) == a
    keys = list(json.loads(a).keys())
    assert keys == ["v", "dh", "ih", "it", "ai", "an", "ts", "pp", "pph", "af"]


def test_payload_excludes_signature_and_key():
    record = create_record(FIELDS, PRIV)
    assert build_payload(record) == build_payload(FIELDS)
    assert b'"sg"' not in build_payload(record)
    assert b'"pk"' not in build_payload(record)


def test_payload_version_defaults_to_1_0():
    no_version = {k: v for k, v in FIELDS.items() if k != "version"}
    assert build_payload(no_version) == build_payload(FIELDS)


def test_non_ascii_intent_is_utf8_literal():
    raw = build_payload({**FIELDS, "intent_text": "Genehmige Übergabe"})
    assert "Genehmige Übergabe".encode("utf-8") in raw


@pytest.mark.parametrize(
    "field,value",
    [
        ("document_digest", "A" * 64),
        ("intent_digest", "b" * 63),
        ("event_time", 0),
        ("event_time", 1.5),
        ("event_time", True),
        ("assisted_flag", "false"),
        ("intent_text", ""),
        ("version", "2.0"),
    ],
)
def test_payload_rejects_malformed_fields(field, value):
    with pytest.raises(RecordFormatError):
        build_payload({**FIELDS, field: value})
