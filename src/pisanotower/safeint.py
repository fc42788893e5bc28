# -----------------------------------------------------------------------------
#  Exact modular arithmetic under a safe integer bound
# -----------------------------------------------------------------------------
#
# Every modulus is kept below a configurable bound (2**63 by default, the
# native signed 64-bit range). Products of two residues can exceed that
# bound, so they are widened to gmpy2 bigints before the remainder is
# taken and narrowed back to int afterwards.

from __future__ import annotations

from collections.abc import Iterable

import gmpy2

from pisanotower.runtime import CFG
from pisanotower.utility import RangeOverflowError

DEFAULT_BOUND_BITS = 63


def safe_bound() -> int:
    """Exclusive upper bound for moduli, from LIMITS.SAFE_BOUND_BITS."""
    bits = int(CFG("LIMITS.SAFE_BOUND_BITS", DEFAULT_BOUND_BITS))
    if bits < 2:
        raise ValueError(f"LIMITS.SAFE_BOUND_BITS must be >= 2, got {bits}")
    return 1 << bits


def check_modulus(m: int, bound: int, what: str = "modulus") -> int:
    if m >= bound:
        raise RangeOverflowError(
            f"{what} {m} overflow: must be below 2^{bound.bit_length() - 1}."
        )
    return m


def widen(x: int) -> gmpy2.mpz:
    return gmpy2.mpz(x)


def narrow(x: gmpy2.mpz, bound: int) -> int:
    """Back to a plain int; the value must already be reduced below bound."""
    if x < 0 or x >= bound:
        raise RangeOverflowError(f"value {x} does not fit below {bound}")
    return int(x)


def mul_mod(x: int, y: int, m: int) -> int:
    """(x * y) mod m for 0 <= x, y < m, exact for any m."""
    return narrow(widen(x) * y % m, m)


def dot_mod(xs: Iterable[int], ys: Iterable[int], m: int) -> int:
    """sum(x_i * y_i) mod m, one mul_mod per term."""
    acc = 0
    for x, y in zip(xs, ys, strict=True):
        acc = (acc + mul_mod(x, y, m)) % m
    return acc
