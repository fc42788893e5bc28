# -----------------------------------------------------------------------------
#  Mixed-radix digit vectors over a factor chain
# -----------------------------------------------------------------------------
#
# A factor chain [c0, c1, ..., c_{k-1}] with product M represents x < M as
# digits d_i = (x // (c0 * ... * c_{i-1})) mod c_i. Arithmetic on digit
# vectors is done wide (gmpy2) and then "formalized": carries are pushed
# upward until 0 <= d_i < c_i again, and whatever carries out of the top
# digit is a multiple of M and is dropped.

from __future__ import annotations

from collections.abc import Sequence

import gmpy2

from pisanotower.safeint import narrow, widen

Vector = list[int]
Matrix = list[list[int]]


def chain_product(factors: Sequence[int]) -> int:
    m = 1
    for c in factors:
        m *= c
    return m


def place_values(factors: Sequence[int]) -> list[int]:
    """Weights W_i = c0 * ... * c_{i-1} (W_0 = 1)."""
    weights = [1]
    for c in factors[:-1]:
        weights.append(weights[-1] * c)
    return weights


def to_digits(x: int, factors: Sequence[int]) -> Vector:
    if not 0 <= x < chain_product(factors):
        raise ValueError(f"{x} is out of range for chain {list(factors)}")
    digits = []
    for c in factors:
        digits.append(x % c)
        x //= c
    return digits


def from_digits(digits: Sequence[int], factors: Sequence[int]) -> int:
    if len(digits) != len(factors):
        raise ValueError("digit vector and factor chain differ in length")
    return sum(int(d) * w for d, w in zip(digits, place_values(factors), strict=True))


def formalize(vec: Sequence, factors: Sequence[int]) -> Vector:
    """Carry every digit into range; the value is preserved mod the chain product."""
    out = [widen(v) for v in vec]
    last = len(out) - 1
    for i, c in enumerate(factors):
        if out[i] < 0:
            raise ValueError(f"negative digit {out[i]} at position {i}")
        if i < last:
            out[i + 1] += out[i] // c
        out[i] = narrow(out[i] % c, c)
    return out


def formalize_columns(mat: Sequence[Sequence], factors: Sequence[int]) -> Matrix:
    """Formalize each column of a square matrix as its own digit vector."""
    size = len(mat)
    cols = [formalize([mat[r][c] for r in range(size)], factors) for c in range(size)]
    return [[cols[c][r] for c in range(size)] for r in range(size)]


def mat_mul(a: Sequence[Sequence[int]], b: Sequence[Sequence[int]]) -> list[list[gmpy2.mpz]]:
    """Plain wide product; formalize the result before reusing it."""
    size = len(a)
    out = []
    for r in range(size):
        row = a[r]
        out.append([
            sum((widen(row[k]) * b[k][c] for k in range(size)), gmpy2.mpz(0))
            for c in range(size)
        ])
    return out


def mat_vec(a: Sequence[Sequence[int]], v: Sequence[int]) -> list[gmpy2.mpz]:
    return [sum((widen(x) * y for x, y in zip(row, v, strict=True)), gmpy2.mpz(0)) for row in a]


def identity(size: int) -> Matrix:
    return [[int(r == c) for c in range(size)] for r in range(size)]


def transition_matrix(residue: int, factors: Sequence[int]) -> Matrix:
    """
    Multiply-by-residue operator in the mixed-radix basis of `factors`.

    Column n holds the digits of `residue` read with radices c_n, c_{n+1}, ...
    and placed from row n downward, i.e. the digits of residue * W_n mod M.
    So T · digits(x) formalizes to digits(residue * x mod M).
    """
    size = len(factors)
    mat = [[0] * size for _ in range(size)]
    for n in range(size):
        cur = residue
        for i in range(n, size):
            mat[i][n] = cur % factors[i]
            cur //= factors[i]
    return mat
