"""
Text and byte conversions.

All text handled by the library is encoded as UTF-8. Byte content may be
given as bytes-like objects or as plain sequences of ints (0-255).
"""

from collections.abc import Iterable

ENCODING = "utf-8"


def text_to_bytes(text: str) -> bytes:
    """Encode text using the library encoding."""
    return text.encode(ENCODING)


def bytes_to_text(data: bytes) -> str:
    """Decode bytes using the library encoding."""
    return bytes(data).decode(ENCODING)


def to_bytes(data: bytes | bytearray | memoryview | Iterable[int]) -> bytes:
    """
    Normalize byte content to an immutable bytes object.

    Raises:
        ValueError: If a sequence element is outside 0..255.
        TypeError: If data is a str (use text_to_bytes instead) or an int.
    """
    if isinstance(data, str):
        raise TypeError("Expected bytes, got str - use text_to_bytes()")
    # bytes(5) would silently give five NUL bytes
    if isinstance(data, int):
        raise TypeError(f"Expected bytes, got int: {data!r}")
    if isinstance(data, bytes):
        return data
    return bytes(data)
