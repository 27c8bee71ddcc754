"""Ordering of IEEE 754 binary128 values given as their 128-bit patterns."""

from __future__ import annotations

from enum import IntEnum

TYPE_WIDTH = 128
SIGNIFICAND_BITS = 112
EXPONENT_BITS = TYPE_WIDTH - SIGNIFICAND_BITS - 1

IMPLICIT_BIT = 1 << SIGNIFICAND_BITS
SIGNIFICAND_MASK = IMPLICIT_BIT - 1
SIGN_BIT = 1 << (SIGNIFICAND_BITS + EXPONENT_BITS)
ABS_MASK = SIGN_BIT - 1
EXPONENT_MASK = ABS_MASK ^ SIGNIFICAND_MASK
INF_REP = EXPONENT_MASK


class LeResult(IntEnum):
    """Outcome of a comparison; unordered shares the value of greater."""

    LESS = -1
    EQUAL = 0
    GREATER = 1
    UNORDERED = 1


def _to_signed(bits: int) -> int:
    if not 0 <= bits < 1 << TYPE_WIDTH:
        raise ValueError(f"not a {TYPE_WIDTH}-bit pattern: {bits!r}")
    return bits - (1 << TYPE_WIDTH) if bits & SIGN_BIT else bits


def lttf2(a_bits: int, b_bits: int) -> LeResult:
    """Compare two binary128 values given as unsigned 128-bit integers."""
    a_int = _to_signed(a_bits)
    b_int = _to_signed(b_bits)
    a_abs = a_int & ABS_MASK
    b_abs = b_int & ABS_MASK

    if a_abs > INF_REP or b_abs > INF_REP:
        return LeResult.UNORDERED

    if (a_abs | b_abs) == 0:
        return LeResult.EQUAL

    if (a_int & b_int) >= 0:
        # At least one is positive: signed-integer order matches float order.
        if a_int < b_int:
            return LeResult.LESS
        if a_int == b_int:
            return LeResult.EQUAL
        return LeResult.GREATER

    # Both negative: the integer order is reversed.
    if a_int > b_int:
        return LeResult.LESS
    if a_int == b_int:
        return LeResult.EQUAL
    return LeResult.GREATER