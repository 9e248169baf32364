"""Ed25519 signing helpers for attestation payloads.

Ed25519 is deterministic (RFC 8032): the same key and message always give the
same 64-byte signature, with no dependence on a random nonce.

Accepted private key material for ``load_private_key``:
  - an ``Ed25519PrivateKey`` instance
  - 32 raw seed bytes
  - base64 text of the 32 raw seed bytes
  - a PKCS8 PEM (bytes or str)

Public keys and signatures travel as standard base64 of the raw bytes.
"""
from __future__ import annotations

import base64
import binascii
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from ..errors import KeyMaterialError

SIGNATURE_LEN = 64
PUBLIC_KEY_LEN = 32

KeyMaterial = Union[ed25519.Ed25519PrivateKey, bytes, str]


def generate_private_key() -> ed25519.Ed25519PrivateKey:
    """Ephemeral key for bootstrap and tests; not part of the trust design."""
    return ed25519.Ed25519PrivateKey.generate()


def load_private_key(material: KeyMaterial) -> ed25519.Ed25519PrivateKey:
    if isinstance(material, ed25519.Ed25519PrivateKey):
        return material
    if isinstance(material, str):
        material = material.strip().encode()
    if not isinstance(material, (bytes, bytearray)):
        raise KeyMaterialError(f"unsupported key material type: {type(material).__name__}")
    raw = bytes(material)
    if raw.startswith(b"-----BEGIN"):
        try:
            sk = serialization.load_pem_private_key(raw, password=None)
        except (ValueError, TypeError) as e:
            raise KeyMaterialError("invalid PEM private key") from e
        if not isinstance(sk, ed25519.Ed25519PrivateKey):
            raise KeyMaterialError("PEM key is not Ed25519")
        return sk
    if len(raw) != 32:
        try:
            raw = base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError) as e:
            raise KeyMaterialError("private key must be 32 raw bytes, base64 or PEM") from e
    if len(raw) != 32:
        raise KeyMaterialError("Ed25519 private key must be 32 bytes")
    return ed25519.Ed25519PrivateKey.from_private_bytes(raw)


def private_key_bytes(private_key: KeyMaterial) -> bytes:
    sk = load_private_key(private_key)
    return sk.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def derive_public_key(private_key: KeyMaterial) -> bytes:
    sk = load_private_key(private_key)
    return sk.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def sign(payload: bytes, private_key: KeyMaterial) -> bytes:
    sk = load_private_key(private_key)
    return sk.sign(payload)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def verify_signature(payload: bytes, signature_b64: str, public_key_b64: str) -> bool:
    """True only for a valid signature. Never raises; callers learn nothing about why."""
    try:
        sig = base64.b64decode(signature_b64, validate=True)
        pub = base64.b64decode(public_key_b64, validate=True)
        if len(sig) != SIGNATURE_LEN or len(pub) != PUBLIC_KEY_LEN:
            return False
        ed25519.Ed25519PublicKey.from_public_bytes(pub).verify(sig, payload)
        return True
    except InvalidSignature:
        return False
    except Exception:
        return False


__all__ = [
    "generate_private_key",
    "load_private_key",
    "private_key_bytes",
    "derive_public_key",
    "sign",
    "b64",
    "verify_signature",
]
