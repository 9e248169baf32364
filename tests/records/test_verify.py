import base64
import json

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from attestor.crypto.signer import generate_private_key
from attestor.records.codec import deserialize, serialize, to_long_form
from attestor.records.create import create_record
from attestor.records.verify import VerificationError, verify

from conftest import PRIV


def _record(fields_for, document=b"hello", **overrides):
    return create_record(fields_for(document, **overrides), PRIV)


def test_hello_scenario(fields_for):
    rec = _record(fields_for, b"hello")
    restored = deserialize(serialize(rec))

    ok = verify(b"hello", restored)
    assert ok.valid is True
    assert ok.document_integrity == "intact"
    assert ok.approver_ref == "user-123"
    assert ok.approver_label == "Test User"
    assert ok.event_time == rec.event_time
    assert ok.assisted_flag is False
    assert ok.error is None

    altered = verify(b"hullo", restored)
    assert altered.valid is False
    assert altered.error == "document_altered"
    assert altered.document_integrity == "altered"
    assert altered.expected_digest == rec.document_digest
    assert altered.computed_digest != rec.document_digest

    shifted = restored.model_copy(update={"event_time": restored.event_time + 1})
    forged = verify(b"hello", shifted)
    assert forged.valid is False
    assert forged.error == VerificationError.NOT_AUTHENTIC
    assert forged.document_integrity == "unknown"


def test_verify_accepts_compact_and_long_json(fields_for):
    rec = _record(fields_for)
    assert verify(b"hello", serialize(rec)).valid
    assert verify(b"hello", json.dumps(to_long_form(rec))).valid
    assert verify(b"hello", to_long_form(rec)).valid


@pytest.mark.parametrize(
    "field,value",
    [
        ("intent_text", "Approve Y"),
        ("intent_digest", "0" * 64),
        ("approver_ref", "user-124"),
        ("approver_label", "Mallory"),
        ("event_time", 1_700_000_000_999),
        ("presence_ref", "other-proof"),
        ("presence_digest", "f" * 64),
        ("assisted_flag", True),
    ],
)
def test_any_signed_field_change_breaks_signature(fields_for, field, value):
    rec = _record(fields_for)
    tampered = rec.model_copy(update={field: value})
    out = verify(b"hello", tampered)
    assert out.valid is False
    assert out.error == "signature_not_authentic"


def test_document_digest_change_reports_altered(fields_for):
    rec = _record(fields_for)
    out = verify(b"hello", rec.model_copy(update={"document_digest": "0" * 64}))
    assert out.error == "document_altered"
    assert out.computed_digest == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def test_document_checked_before_signature(fields_for):
    rec = _record(fields_for)
    both = rec.model_copy(update={"approver_label": "Mallory"})
    assert verify(b"hullo", both).error == "document_altered"


def test_swapped_public_key_not_authentic(fields_for):
    from attestor.crypto.signer import b64, derive_public_key

    rec = _record(fields_for)
    other = b64(derive_public_key(generate_private_key()))
    out = verify(b"hello", rec.model_copy(update={"signing_public_key": other}))
    assert out.error == "signature_not_authentic"
    assert out.message is None


def test_resigned_by_other_key_is_valid_but_different_key(fields_for):
    # a record re-signed by another key is internally consistent; trust in the
    # key itself is the relying party's decision
    rec = create_record(fields_for(b"hello"), generate_private_key())
    assert verify(b"hello", rec).valid


def test_corrupted_signature_not_authentic(fields_for):
    rec = _record(fields_for)
    sig = bytearray(base64.b64decode(rec.signature_bytes))
    sig[0] ^= 0x01
    out = verify(b"hello", rec.model_copy(update={"signature_bytes": base64.b64encode(bytes(sig)).decode()}))
    assert out.error == "signature_not_authentic"
    garbage = verify(b"hello", rec.model_copy(update={"signature_bytes": "not-base64"}))
    assert garbage.error == "signature_not_authentic"


@pytest.mark.parametrize(
    "mutate",
    [
        lambda o: o.pop("dh"),
        lambda o: o.update(dh="ABC"),
        lambda o: o.update(dh="A" * 64),
        lambda o: o.update(ts=-5),
        lambda o: o.update(ts="1700000000000"),
        lambda o: o.update(af="false"),
        lambda o: o.update(an=""),
        lambda o: o.update(sg=""),
        lambda o: o.update(v="9.9"),
    ],
)
def test_format_errors(fields_for, mutate):
    obj = json.loads(serialize(_record(fields_for)))
    mutate(obj)
    out = verify(b"hello", obj)
    assert out.valid is False
    assert out.error == "invalid_signature_format"
    assert out.document_integrity == "unknown"
    assert out.message


@pytest.mark.parametrize(
    "update",
    [
        {"document_digest": None},
        {"event_time": "abc"},
        {"presence_digest": 42},
        {"signing_public_key": None},
    ],
)
def test_unvalidated_copies_are_format_errors(fields_for, update):
    rec = _record(fields_for).model_copy(update=update)
    out = verify(b"hello", rec)
    assert out.valid is False
    assert out.error == "invalid_signature_format"
    assert out.document_integrity == "unknown"


@pytest.mark.parametrize("bad", ["{not json", "[]", "null", 17])
def test_unparseable_record(bad):
    out = verify(b"hello", bad)
    assert out.error == "invalid_signature_format"


def test_presence_binding_optional_check(fields_for, presence):
    rec = _record(fields_for)
    assert verify(b"hello", rec, presence=presence).valid
    other = presence.model_copy(update={"acknowledged_at": presence.acknowledged_at + 1})
    out = verify(b"hello", rec, presence=other)
    assert out.valid is False
    assert out.error == "presence_not_bound"
    assert out.document_integrity == "intact"


def test_outcome_json_dict(fields_for):
    out = verify(b"hullo", _record(fields_for)).to_json_dict()
    assert out["valid"] is False
    assert out["error"] == "document_altered"
    assert "approver_ref" not in out


@settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(st.binary(min_size=1, max_size=128), st.data())
def test_any_byte_flip_fails(fields_for, document, data):
    rec = _record(fields_for, document)
    assert verify(document, rec).valid
    idx = data.draw(st.integers(min_value=0, max_value=len(document) - 1))
    mask = data.draw(st.integers(min_value=1, max_value=255))
    flipped = bytearray(document)
    flipped[idx] ^= mask
    out = verify(bytes(flipped), rec)
    assert out.valid is False
    assert out.error == "document_altered"
