from __future__ import annotations
import re
import secrets
import string

OFFLINE_CODE_ALPHABET = string.ascii_uppercase + string.digits
OFFLINE_CODE_LENGTH = 6

_OFFLINE_CODE_RE = re.compile(r"[A-Z0-9]{%d}" % OFFLINE_CODE_LENGTH)

def generate_offline_code() -> str:
    """Fallback code printed next to the QR for manual entry at checkpoints."""
    return "".join(secrets.choice(OFFLINE_CODE_ALPHABET) for _ in range(OFFLINE_CODE_LENGTH))

def validate_offline_code(code: str | None) -> bool:
    """Shape check only; nothing here knows which codes were issued."""
    if not code or len(code) != OFFLINE_CODE_LENGTH:
        return False
    return _OFFLINE_CODE_RE.fullmatch(code.upper()) is not None
