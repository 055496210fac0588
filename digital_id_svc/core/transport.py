"""
Transport encoding for Digital ID tokens.

The JSON payload is UTF-8 encoded, base64'd, and every character of the
base64 text is moved 3 code points up. The result is printable ASCII that
fits a QR symbol in byte mode. There is no key: this is obfuscation, anyone
can reverse it.
"""
from __future__ import annotations
import base64

SHIFT = 3

class TokenDecodeError(ValueError):
    """Raised when a string is not a shifted-base64 encoding of UTF-8 text."""

def shift_encode(text: str) -> str:
    b64 = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "".join(chr(ord(c) + SHIFT) for c in b64)

def shift_decode(token: str) -> str:
    try:
        unshifted = "".join(chr(ord(c) - SHIFT) for c in token)
        raw = base64.b64decode(unshifted, validate=True)
        return raw.decode("utf-8")
    except ValueError as exc:
        # chr() range, non-ascii input, bad padding and bad utf-8 all land here
        raise TokenDecodeError("not a Digital ID transport string") from exc
