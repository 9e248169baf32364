"""Content fingerprints for documents and approval intent.

All digests are SHA-256 rendered as 64 lowercase hex characters. Intent text
is canonicalized before hashing so that the same approval wording typed on
different systems (CRLF vs LF, NFD vs NFC, doubled spaces) hashes the same.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Tuple

from .crypto.digest import sha256_hex

_LINE_BREAKS = re.compile(r"\r\n?")
# ECMAScript WhiteSpace and LineTerminator, minus "\n". Python's \s differs:
# it misses U+FEFF and adds U+001C..U+001F and U+0085.
INTENT_WHITESPACE = (
    "\t\v\f \u00a0\u1680"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
    + "\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_INLINE_WS = re.compile("[" + re.escape(INTENT_WHITESPACE) + "]+")


def digest(data: bytes) -> str:
    return sha256_hex(bytes(data))


def hash_document(data: bytes) -> str:
    return digest(data)


def hash_string(text: str) -> str:
    return digest(text.encode("utf-8"))


def canonicalize_intent(text: str) -> str:
    """NFC, then LF line endings, then single spaces, then trim. Order matters."""
    out = unicodedata.normalize("NFC", text)
    out = _LINE_BREAKS.sub("\n", out)
    out = _INLINE_WS.sub(" ", out)
    return out.strip(INTENT_WHITESPACE + "\n")


def hash_intent(text: str) -> Tuple[str, str]:
    """Return ``(canonical_text, digest)`` for raw intent text."""
    canonical = canonicalize_intent(text)
    return canonical, hash_string(canonical)


__all__ = ["INTENT_WHITESPACE", "digest", "hash_document", "hash_string", "canonicalize_intent", "hash_intent"]
