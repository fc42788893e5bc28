# tests/test_safeint.py
from __future__ import annotations

import pytest

from pisanotower.runtime import APPLY
from pisanotower.safeint import check_modulus, dot_mod, mul_mod, narrow, safe_bound, widen
from pisanotower.utility import RangeOverflowError

M61 = (1 << 61) - 1
NEAR_BOUND = (1 << 63) - 25


@pytest.mark.parametrize("m", [2, 7, 1000, M61, NEAR_BOUND], ids=lambda m: f"m={m}")
def test_mul_mod_is_exact(m):
    for x, y in [(0, m - 1), (1, m - 1), (m - 1, m - 1), (m // 2, m - 3), (m // 3, m // 7)]:
        x, y = x % m, y % m
        got = mul_mod(x, y, m)
        assert got == (x * y) % m
        assert type(got) is int


def test_dot_mod_accumulates_wide():
    m = NEAR_BOUND
    xs = [m - 1, m - 2]
    ys = [m - 3, m - 4]
    assert dot_mod(xs, ys, m) == (xs[0] * ys[0] + xs[1] * ys[1]) % m


def test_dot_mod_rejects_uneven_lengths():
    with pytest.raises(ValueError):
        dot_mod([1, 2], [1], 7)


def test_default_bound_is_64_bit_signed_range():
    assert safe_bound() == 1 << 63


def test_bound_follows_profile():
    APPLY({"LIMITS": {"SAFE_BOUND_BITS": 53}})
    assert safe_bound() == 1 << 53


def test_check_modulus():
    bound = 1 << 53
    assert check_modulus(bound - 1, bound) == bound - 1
    with pytest.raises(RangeOverflowError, match="2\\^53"):
        check_modulus(bound, bound)
    with pytest.raises(OverflowError):
        check_modulus(bound + 1, bound, "factor product")


def test_narrow_guards_the_range():
    assert narrow(widen(5), 7) == 5
    with pytest.raises(RangeOverflowError):
        narrow(widen(7), 7)
    with pytest.raises(RangeOverflowError):
        narrow(widen(-1), 7)
