# Ordered compact JSON for signed structures. Key order comes from the caller's
# pair sequence, never from mapping traversal. Output matches JSON.stringify on an
# object literal built in the same order.
# NOTE: floats are rejected; number formatting differs across implementations.
import json
from typing import Any, Iterable, Tuple

Pairs = Iterable[Tuple[str, Any]]


def _encode_value(value: Any) -> str:
    if isinstance(value, float):
        raise ValueError("floats not allowed in signed structures")
    if value is None or isinstance(value, (bool, int, str)):
        # ensure_ascii=False keeps UTF-8 literal; control chars still get \u escapes
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)) and all(isinstance(p, tuple) and len(p) == 2 for p in value):
        return _encode_pairs(value)
    raise TypeError(f"unsupported value type in signed structure: {type(value).__name__}")


def _encode_pairs(pairs: Pairs) -> str:
    parts = []
    seen = set()
    for key, value in pairs:
        if not isinstance(key, str):
            raise TypeError("object keys must be strings")
        if key in seen:
            raise ValueError(f"duplicate key {key!r}")
        seen.add(key)
        parts.append(json.dumps(key, ensure_ascii=False) + ":" + _encode_value(value))
    return "{" + ",".join(parts) + "}"


def encode_ordered(pairs: Pairs) -> bytes:
    """Serialize ordered (key, value) pairs to compact UTF-8 JSON bytes.

    A value that is itself a sequence of 2-tuples is encoded as a nested object.
    """
    return _encode_pairs(pairs).encode("utf-8")
