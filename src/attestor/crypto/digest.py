import hashlib
import re

DIGEST_HEX_RE = re.compile(r"^[0-9a-f]{64}$")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def is_digest(value) -> bool:
    return isinstance(value, str) and DIGEST_HEX_RE.fullmatch(value) is not None
