"""
Integrity tag for Digital ID payloads.

hash = hash * 31 + unit over the UTF-16 code units of the input, kept in
signed 32-bit range after each step, then abs() in base-36. Collisions are
expected; this only catches careless edits.
"""
from __future__ import annotations

BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

def _utf16_units(value: str):
    data = value.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)

def _to_int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n

def rolling_hash(value: str) -> int:
    h = 0
    for unit in _utf16_units(value):
        h = _to_int32((h << 5) - h + unit)
    return h

def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(BASE36[r])
    return "".join(reversed(digits))

def checksum(value: str) -> str:
    return _base36(abs(rolling_hash(value)))
