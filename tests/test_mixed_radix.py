# tests/test_mixed_radix.py
"""Digit vectors over factor chains: decomposition, carrying, transition matrix."""

from __future__ import annotations

import pytest

from pisanotower.mixed_radix import (
    chain_product,
    formalize,
    formalize_columns,
    from_digits,
    mat_mul,
    mat_vec,
    place_values,
    to_digits,
    transition_matrix,
)

CHAINS = [[7], [6, 2], [2, 2, 2], [30, 2, 3, 5], [10, 2, 2, 5], [3, 3, 3, 3]]
CHAIN_IDS = ["x".join(map(str, c)) for c in CHAINS]


@pytest.mark.parametrize("factors", CHAINS, ids=CHAIN_IDS)
def test_decompose_then_reconstruct_is_identity(factors):
    m = chain_product(factors)
    for x in range(m):
        digits = to_digits(x, factors)
        assert all(0 <= d < c for d, c in zip(digits, factors))
        assert from_digits(digits, factors) == x


def test_place_values():
    assert place_values([30, 2, 3, 5]) == [1, 30, 60, 180]
    assert place_values([7]) == [1]


@pytest.mark.parametrize("x", [-1, 24, 100])
def test_to_digits_out_of_range(x):
    with pytest.raises(ValueError):
        to_digits(x, [6, 2, 2])


def test_formalize_carries_upward():
    # 7 = 1 + 0*2 + 1*6 over radices (2, 3, 5)
    assert formalize([7, 0, 0], [2, 3, 5]) == [1, 0, 1]


def test_formalize_drops_overflow_of_top_digit():
    # 7 * 6 = 42 == 12 (mod 30)
    digits = formalize([0, 0, 7], [2, 3, 5])
    assert digits == [0, 0, 2]
    assert from_digits(digits, [2, 3, 5]) == 42 % 30


def test_formalize_columns_keeps_each_column_value():
    factors = [4, 2]
    mat = [[9, 3], [5, 0]]
    out = formalize_columns(mat, factors)
    # column 0: 9 + 5*4 = 29 == 5 (mod 8); column 1: 3
    assert [out[0][0], out[1][0]] == to_digits(29 % 8, factors)
    assert [out[0][1], out[1][1]] == to_digits(3, factors)


@pytest.mark.parametrize("factors,residue", [
    ([6, 2, 2], 13),
    ([6, 2, 2], 5),
    ([2, 2, 2], 3),
    ([10, 2, 5], 41),
])
def test_transition_matrix_multiplies_by_residue(factors, residue):
    m = chain_product(factors)
    step = transition_matrix(residue, factors)
    for x in range(m):
        got = formalize(mat_vec(step, to_digits(x, factors)), factors)
        assert got == to_digits(residue * x % m, factors)


def test_transition_matrix_is_lower_triangular_with_unit_diagonal():
    factors = [6, 2, 3]
    step = transition_matrix(13, factors)  # 13 == 1 (mod 6)
    for i in range(3):
        assert step[i][i] == 1
        for j in range(i + 1, 3):
            assert step[i][j] == 0


def test_powers_of_transition_matrix_track_residue_powers():
    factors = [3, 3, 3]
    residue = 7
    m = chain_product(factors)
    step = transition_matrix(residue, factors)
    acc = [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    for t in range(1, 10):
        acc = formalize_columns(mat_mul(step, acc), factors)
        digits = formalize(mat_vec(acc, [1, 0, 0]), factors)
        assert from_digits(digits, factors) == pow(residue, t, m)
