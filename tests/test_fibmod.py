# tests/test_fibmod.py
from __future__ import annotations

import pytest

import pisanotower.safeint as safeint
from pisanotower.fibmod import FibonacciEvaluator
from pisanotower.utility import RangeOverflowError

# ---------- helpers -----------------------------------------------------------


def fib_exact(n: int) -> int:
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return a


# ---------- tests -------------------------------------------------------------

MODULI = [2, 7, 10, 16, 1000, (1 << 61) - 1, (1 << 63) - 25]


@pytest.fixture
def fib():
    return FibonacciEvaluator()


def test_first_values(fib):
    assert [fib(n, 10**6) for n in range(1, 11)] == [1, 1, 2, 3, 5, 8, 13, 21, 34, 55]


@pytest.mark.parametrize("m", MODULI, ids=lambda m: f"m={m}")
def test_matches_exact_fibonacci(fib, m):
    for n in range(0, 300):
        assert fib(n, m) == fib_exact(n) % m, f"F({n}) mod {m}"


def test_large_index(fib):
    n = 12_345
    assert fib(n, 1_000_000_007) == fib_exact(n) % 1_000_000_007


def test_concrete_value(fib):
    assert fib(10, 7) == 6


def test_zero_and_trivial_modulus(fib):
    assert fib(0, 7) == 0
    assert fib(1, 1) == 0
    assert fib(2, 1) == 0
    assert fib(50, 1) == 0


def test_matrix_power_layout(fib):
    m = 1000
    for e in range(1, 40):
        assert fib.matrix(e, m) == (
            (fib_exact(e - 1) % m, fib_exact(e) % m),
            (fib_exact(e) % m, fib_exact(e + 1) % m),
        )
    assert fib.matrix(0, m) == ((1, 0), (0, 1))


def test_cache_is_keyed_by_modulus(fib):
    fib(50, 7)
    fib(50, 11)
    assert set(fib.cache) == {7, 11}
    assert fib.cache[7] is not fib.cache[11]
    # F(50) goes through A^48
    assert 48 in fib.cache[7]
    assert fib.cache[7][48] != fib.cache[11][48]


def test_negative_index_rejected(fib):
    with pytest.raises(ValueError):
        fib(-1, 7)


def test_modulus_bound_enforced_without_caching():
    fib = FibonacciEvaluator(bound=1 << 10)
    assert fib(20, (1 << 10) - 1) == fib_exact(20) % ((1 << 10) - 1)
    with pytest.raises(RangeOverflowError):
        fib(20, 1 << 10)
    assert (1 << 10) not in fib.cache


def test_matrix_products_go_through_mul_mod(monkeypatch, fib):
    calls = []
    real = safeint.mul_mod

    def counting(x, y, m):
        calls.append(m)
        return real(x, y, m)

    monkeypatch.setattr(safeint, "mul_mod", counting)
    assert fib(10, 1000) == 55
    assert calls
    assert set(calls) == {1000}
