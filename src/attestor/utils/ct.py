import hmac
from typing import Union


def ct_eq(a: Union[bytes, str], b: Union[bytes, str]) -> bool:
    """Constant-time equality for two byte strings or ASCII strings.

    Digests compared here are lowercase hex; non-ASCII text never matches.
    """
    if isinstance(a, str):
        if not a.isascii():
            return False
        a = a.encode("ascii")
    if isinstance(b, str):
        if not b.isascii():
            return False
        b = b.encode("ascii")
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)
