import base64

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives import serialization

from attestor.hashing import hash_document, hash_intent
from attestor.presence import Acknowledgments, create_presence_record, hash_presence

# Deterministic Ed25519 test vector
PRIV = bytes(range(1, 33))
_sk = Ed25519PrivateKey.from_private_bytes(PRIV)
PUB = _sk.public_key().public_bytes(
    encoding=serialization.Encoding.Raw,
    format=serialization.PublicFormat.Raw,
)
PRIV_B64 = base64.b64encode(PRIV).decode()
PUB_B64 = base64.b64encode(PUB).decode()

ALL_ACKS = Acknowledgments(understands_approval=True, is_authorized=True, acting_knowingly=True)


@pytest.fixture
def presence():
    return create_presence_record("session-1", 1_700_000_000_000, ALL_ACKS, now=1_700_000_000_500)


@pytest.fixture
def fields_for(presence):
    def _make(document: bytes, intent: str = "Approve X", **overrides):
        canonical, intent_digest = hash_intent(intent)
        f = {
            "document_digest": hash_document(document),
            "intent_digest": intent_digest,
            "intent_text": canonical,
            "approver_ref": "user-123",
            "approver_label": "Test User",
            "event_time": 1_700_000_001_000,
            "presence_ref": presence.id,
            "presence_digest": hash_presence(presence),
            "assisted_flag": False,
        }
        f.update(overrides)
        return f
    return _make
