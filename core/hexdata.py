# PATH: core/hexdata.py
"""
Memo encoding for transaction call data.

Plain transfers may carry a text memo in their call data. Each UTF-16 code
unit is written as 4 hex digits, big-endian, behind a 0x prefix:

    "Hello" -> "0x00480065006c006c006f"
    "世界"  -> "0x4e16754c"

Characters outside the BMP are written as a surrogate pair (8 hex digits).
"""

import re
from typing import Optional

from core.constants import EMPTY_CALL_DATA

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def _strip_prefix(value: str) -> str:
    raw = value.strip()
    if raw.startswith(("0x", "0X")):
        raw = raw[2:]
    return raw


def str_to_hex(text: str) -> str:
    """Encode text as memo call data."""
    if not text:
        return EMPTY_CALL_DATA
    return "0x" + text.encode("utf-16-be").hex()


def hex_to_str(data: str) -> str:
    """
    Decode memo call data back to text.

    Raises:
        ValueError: if the payload is not a multiple of 4 hex digits,
            contains non-hex characters, or has unpaired surrogates
    """
    raw = _strip_prefix(data)
    if len(raw) % 4 != 0:
        raise ValueError("Memo hex length must be a multiple of 4")
    if not _HEX_RE.fullmatch(raw):
        raise ValueError(f"Memo contains non-hex characters: {data!r}")
    # UnicodeDecodeError is a ValueError subclass
    return bytes.fromhex(raw).decode("utf-16-be")


def is_valid_hex(data: Optional[str]) -> bool:
    """True if data is memo-shaped hex (optional 0x, length multiple of 4)."""
    if not data:
        return False
    raw = _strip_prefix(data)
    return len(raw) % 4 == 0 and bool(_HEX_RE.fullmatch(raw))


def hex_byte_length(text: str) -> int:
    """Byte length of text once encoded as memo call data."""
    if not text:
        return 0
    return (len(str_to_hex(text)) - 2) // 2


def decode_memo(data: Optional[str]) -> Optional[str]:
    """
    Best-effort memo extraction from call data.

    Returns None for empty data, undecodable data, or data that decodes to
    non-printable text (e.g. ABI-encoded contract calls).
    """
    if not data or _strip_prefix(data) == "":
        return None
    try:
        text = hex_to_str(data)
    except ValueError:
        return None
    if not all(ch.isprintable() or ch in "\n\t" for ch in text):
        return None
    return text
