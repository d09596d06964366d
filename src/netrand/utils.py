import re
from typing import Optional

_HEX_LINE = re.compile(r"^[0-9A-F]+$")
_HEX_BYTE = re.compile(r"^[0-9A-Fa-f]{1,2}$")
_LEADING_INT = re.compile(r"^\s*(\d+)")

def parse_hex_pairs(text: str) -> bytes:
    """
    HotBits: el cuerpo viene en HTML; nos quedamos con los tokens que son sólo
    hex en mayúsculas y los partimos de dos en dos. Un nibble suelto al final se ignora.
    """
    out = bytearray()
    for tok in text.split():
        if not _HEX_LINE.match(tok):
            continue
        for i in range(0, len(tok) - 1, 2):
            out.append(int(tok[i:i+2], 16))
    return bytes(out)

def parse_hex_tokens(text: str) -> bytes:
    """random.org: un byte por token hex separado por espacios. Token raro -> ValueError."""
    out = bytearray()
    for tok in text.split():
        if not _HEX_BYTE.match(tok):
            raise ValueError(f"not a hex byte: {tok!r}")
        out.append(int(tok, 16))
    return bytes(out)

def parse_quota(text: str) -> Optional[int]:
    m = _LEADING_INT.match(text)
    if not m:
        return None
    return int(m.group(1))
