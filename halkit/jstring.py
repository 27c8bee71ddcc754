"""Conversions between UTF-16 code units and Java-style modified UTF-8.

UTF-16 strings are handled as sequences of integer code units (0..0xFFFF);
UTF-8 strings as bytes, which end at the first NUL byte.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from itertools import islice
from typing import AnyStr

REPLACEMENT_CHAR = 0xFFFD
UNICODE_UPPER_LIMIT = 0x10FFFD

# Masks for the leader byte of sequences of length 1, 2, 3 and 4.
_LEADER_MASKS = (0xFF, 0x1F, 0x0F, 0x07)


def _seq_length(lead: int) -> int:
    """Return 1-4, the sequence length announced by a leading byte."""
    return ((0xE5000000 >> ((lead >> 3) & 0x1E)) & 3) + 1


def _prefix(units: Sequence[int], n: int) -> Sequence[int]:
    if n < 0:
        raise ValueError("count must not be negative")
    if n > len(units):
        raise ValueError(f"count {n} exceeds the {len(units)} available code units")
    head = units[:n]
    for unit in head:
        if not 0 <= unit <= 0xFFFF:
            raise ValueError(f"not a UTF-16 code unit: {unit!r}")
    return head


def _encoded_length(unit: int) -> int:
    if unit > 0x07FF:
        return 3
    if unit > 0x7F or unit == 0:
        return 2
    return 1


def _encode_unit(unit: int) -> bytes:
    if unit > 0x07FF:
        return bytes(((unit >> 12) | 0xE0, ((unit >> 6) & 0x3F) | 0x80, (unit & 0x3F) | 0x80))
    if unit > 0x7F or unit == 0:
        # An embedded NUL becomes the two bytes C0 80.
        return bytes(((unit >> 6) | 0xC0, (unit & 0x3F) | 0x80))
    return bytes((unit,))


def strnlen16to8(units: Sequence[int], n: int) -> int:
    """Return the length in bytes of the modified UTF-8 form of the first n units."""
    return sum(map(_encoded_length, _prefix(units, n)))


def strncpy16to8(units: Sequence[int], n: int) -> bytes:
    """Encode the first n UTF-16 units as modified UTF-8.

    Each unit is encoded on its own, so surrogate pairs become two
    three-byte sequences and NUL becomes C0 80.
    """
    return b"".join(_encode_unit(unit) for unit in _prefix(units, n))


def strndup16to8(units: Sequence[int] | None, n: int) -> bytes | None:
    """Like strncpy16to8, but passes None through."""
    if units is None:
        return None
    return strncpy16to8(units, n)


def _terminated(data: bytes | bytearray | memoryview) -> bytes:
    raw = bytes(data)
    end = raw.find(0)
    return raw if end < 0 else raw[:end]


def _code_points(data: bytes) -> Iterator[int]:
    """Decode code points, yielding REPLACEMENT_CHAR for invalid sequences."""
    pos = 0
    size = len(data)
    while pos < size:
        lead = data[pos]
        pos += 1
        if lead & 0xC0 == 0x80:
            yield REPLACEMENT_CHAR
            continue
        # Invalid leaders 11111xxx are tolerated as four-byte sequences.
        length = _seq_length(lead)
        value = lead & _LEADER_MASKS[length - 1]
        for _ in range(length - 1):
            if pos >= size or data[pos] & 0xC0 != 0x80:
                # The offending byte is not consumed; it starts the next character.
                value = REPLACEMENT_CHAR
                break
            value = (value << 6) | (data[pos] & 0x3F)
            pos += 1
        yield value


def strlen8to16(data: bytes) -> int:
    """Return the number of UTF-16 units needed for a modified UTF-8 string."""
    length = 0
    expected = 0
    for byte in _terminated(data):
        if byte & 0xC0 == 0x80:
            expected -= 1
            if expected < 0:
                length += 1
        else:
            length += 1
            expected = _seq_length(byte) - 1
            if expected == 3:
                length += 1
    return length


def strcpy8to16(data: bytes) -> list[int]:
    """Decode modified UTF-8 up to the first NUL into UTF-16 code units."""
    units: list[int] = []
    for code_point in _code_points(_terminated(data)):
        if code_point <= 0xFFFF:
            units.append(code_point)
        elif code_point <= UNICODE_UPPER_LIMIT:
            offset = code_point - 0x10000
            units.extend((0xD800 | (offset >> 10), 0xDC00 | (offset & 0x3FF)))
        else:
            units.append(REPLACEMENT_CHAR)
    return units


def strdup8to16(data: bytes | None) -> list[int] | None:
    """Like strcpy8to16, but passes None through."""
    if data is None:
        return None
    return strcpy8to16(data)


def _until_nul(text: AnyStr) -> AnyStr:
    nul = "\0" if isinstance(text, str) else b"\0"
    return text.partition(nul)[0]


def starts_with(s: AnyStr, prefix: AnyStr) -> bool:
    """Tell whether s starts with prefix, both read as NUL-terminated strings."""
    return _until_nul(s).startswith(_until_nul(prefix))


def strncpy16(src: Iterable[int], n: int) -> list[int]:
    """Copy at most n UTF-16 units, stopping at a NUL.

    Each unit passes through an 8-bit character on the way, so only its
    low byte is kept, and a unit whose low byte is zero ends the copy.
    """
    if n < 0:
        raise ValueError("count must not be negative")
    copied: list[int] = []
    for unit in islice(src, n):
        value = unit & 0xFF
        if not value:
            break
        copied.append(value)
    return copied