import os
import threading

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ..config import SIGNING_KEY_PATH
from ..utils.logging import get_logger
from .signer import generate_private_key, load_private_key

log = get_logger()

_EPHEMERAL_LOCK = threading.Lock()
_ephemeral_key: Ed25519PrivateKey | None = None


def ensure_signing_key(path: str) -> None:
    if os.path.exists(path):
        return
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    key = Ed25519PrivateKey.generate()
    with open(path, "wb") as f:
        f.write(key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        ))
    log.info(f"generated signing key at {path}")


def _ephemeral() -> Ed25519PrivateKey:
    global _ephemeral_key
    with _EPHEMERAL_LOCK:
        if _ephemeral_key is None:
            log.warning("no signing key configured; using an ephemeral key (not for production)")
            _ephemeral_key = generate_private_key()
        return _ephemeral_key


def load_signing_key() -> Ed25519PrivateKey:
    """Resolve the service signing key: env base64, then PEM file, then ephemeral."""
    env_key = os.getenv("SIGNING_PRIVATE_KEY")
    if env_key:
        return load_private_key(env_key)
    path = os.getenv("SIGNING_KEY_PATH", SIGNING_KEY_PATH)
    if path and os.path.exists(path):
        with open(path, "rb") as f:
            return load_private_key(f.read())
    return _ephemeral()
