# tests/test_factorization.py
from __future__ import annotations

import pytest

from pisanotower.utility import distinct_prime_factors, prime_factors, square_free_kernel

CASES = [
    # n, distinct, with multiplicity
    (1, [], []),
    (2, [2], [2]),
    (12, [2, 3], [2, 2, 3]),
    (97, [97], [97]),
    (360, [2, 3, 5], [2, 2, 2, 3, 3, 5]),
    (1024, [2], [2] * 10),
    (1001, [7, 11, 13], [7, 11, 13]),
]


@pytest.mark.parametrize("n,distinct,full", CASES, ids=[str(c[0]) for c in CASES])
def test_factorizations(n, distinct, full):
    assert distinct_prime_factors(n) == distinct
    assert prime_factors(n) == full


def test_product_of_factors_is_n():
    for n in range(1, 500):
        prod = 1
        for p in prime_factors(n):
            prod *= p
        assert prod == n


@pytest.mark.parametrize("n,kernel", [(1, 1), (12, 6), (360, 30), (1024, 2), (49, 7)])
def test_square_free_kernel(n, kernel):
    assert square_free_kernel(n) == kernel


@pytest.mark.parametrize("bad", [0, -4])
def test_non_positive_input_rejected(bad):
    with pytest.raises(ValueError):
        distinct_prime_factors(bad)
    with pytest.raises(ValueError):
        prime_factors(bad)
