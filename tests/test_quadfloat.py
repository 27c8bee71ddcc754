import pytest

from halkit.quadfloat import INF_REP, SIGN_BIT, SIGNIFICAND_BITS, LeResult, lttf2

BIAS = (1 << 14) - 1


def quad(exponent, fraction=0, negative=False):
    bits = ((exponent + BIAS) << SIGNIFICAND_BITS) | fraction
    return bits | SIGN_BIT if negative else bits


ONE = quad(0)
TWO = quad(1)
ONE_AND_HALF = quad(0, 1 << (SIGNIFICAND_BITS - 1))
NEG_ONE = quad(0, negative=True)
NEG_TWO = quad(1, negative=True)
POS_ZERO = 0
NEG_ZERO = SIGN_BIT
POS_INF = INF_REP
NEG_INF = INF_REP | SIGN_BIT
NAN = INF_REP | 1

ORDERED = [NEG_INF, NEG_TWO, NEG_ONE, POS_ZERO, ONE, ONE_AND_HALF, TWO, POS_INF]


def test_zeros_compare_equal():
    assert lttf2(POS_ZERO, NEG_ZERO) is LeResult.EQUAL
    assert lttf2(NEG_ZERO, POS_ZERO) is LeResult.EQUAL


def test_positive_order():
    assert lttf2(ONE, TWO) is LeResult.LESS
    assert lttf2(TWO, ONE) is LeResult.GREATER
    assert lttf2(ONE, ONE) is LeResult.EQUAL


def test_negative_order_is_flipped():
    assert lttf2(NEG_ONE, NEG_TWO) is LeResult.GREATER
    assert lttf2(NEG_TWO, NEG_ONE) is LeResult.LESS
    assert lttf2(NEG_TWO, NEG_TWO) is LeResult.EQUAL


def test_mixed_signs():
    assert lttf2(NEG_ONE, ONE) is LeResult.LESS
    assert lttf2(ONE, NEG_ONE) is LeResult.GREATER


@pytest.mark.parametrize("other", [ONE, NEG_ONE, POS_ZERO, POS_INF, NAN])
def test_nan_is_unordered(other):
    assert lttf2(NAN, other) is LeResult.UNORDERED
    assert lttf2(other, NAN) is LeResult.UNORDERED


def test_unordered_shares_greater_value():
    assert lttf2(NAN, ONE) == LeResult.GREATER
    assert int(lttf2(NAN, ONE)) == 1
    assert int(lttf2(ONE, TWO)) == -1


@pytest.mark.parametrize("i", range(len(ORDERED)))
@pytest.mark.parametrize("j", range(len(ORDERED)))
def test_matches_position_in_sorted_list(i, j):
    result = lttf2(ORDERED[i], ORDERED[j])
    expected = (i > j) - (i < j)
    assert int(result) == expected


@pytest.mark.parametrize("bits", [-1, 1 << 128])
def test_out_of_range_pattern_rejected(bits):
    with pytest.raises(ValueError):
        lttf2(bits, ONE)