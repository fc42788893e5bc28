# -----------------------------------------------------------------------------
#  Fibonacci numbers modulo m via 2x2 matrix powers
# -----------------------------------------------------------------------------

from __future__ import annotations

from pisanotower.safeint import check_modulus, dot_mod, safe_bound

Matrix = tuple[tuple[int, int], tuple[int, int]]

# A = [[0, 1], [1, 1]];  A^k · (F1, F2) = (F(k+1), F(k+2))
FIB_STEP: Matrix = ((0, 1), (1, 1))
IDENTITY: Matrix = ((1, 0), (0, 1))


def mat_mul_mod(x: Matrix, y: Matrix, m: int) -> Matrix:
    """x · y with every entry reduced mod m; products accumulate wide."""
    cols = ((y[0][0], y[1][0]), (y[0][1], y[1][1]))
    return (
        (dot_mod(x[0], cols[0], m), dot_mod(x[0], cols[1], m)),
        (dot_mod(x[1], cols[0], m), dot_mod(x[1], cols[1], m)),
    )


class FibonacciEvaluator:
    """
    F(n) mod m with F(1) = F(2) = 1.

    Matrix powers are memoized per modulus: cache[m][e] = A^e mod m. The
    cache only ever grows; entries are pure functions of (m, e).
    """

    def __init__(self, *, bound: int | None = None):
        self.bound = safe_bound() if bound is None else bound
        self.cache: dict[int, dict[int, Matrix]] = {}

    def _cache_for(self, m: int) -> dict[int, Matrix]:
        fcache = self.cache.get(m)
        if fcache is None:
            fcache = {1: tuple(tuple(v % m for v in row) for row in FIB_STEP)}
            self.cache[m] = fcache
        return fcache

    def matrix(self, e: int, m: int) -> Matrix:
        """A^e mod m by splitting e into two halves."""
        if e < 0:
            raise ValueError(f"negative matrix exponent {e}")
        if m < 1:
            raise ValueError(f"modulus must be >= 1, got {m}")
        check_modulus(m, self.bound)
        if e == 0:
            return tuple(tuple(v % m for v in row) for row in IDENTITY)
        return self._power(e, m, self._cache_for(m))

    def _power(self, e: int, m: int, fcache: dict[int, Matrix]) -> Matrix:
        hit = fcache.get(e)
        if hit is not None:
            return hit

        prev = fcache.get(e - 1)
        if prev is not None:
            result = mat_mul_mod(fcache[1], prev, m)
        else:
            e1 = e // 2
            e2 = e - e1
            r1 = self._power(e1, m, fcache)
            r2 = self._power(e2, m, fcache)
            result = mat_mul_mod(r1, r2, m)

        fcache[e] = result
        return result

    def fib(self, n: int, m: int) -> int:
        if n < 0:
            raise ValueError(f"Fibonacci index must be >= 0, got {n}")
        if m < 1:
            raise ValueError(f"modulus must be >= 1, got {m}")
        check_modulus(m, self.bound)
        if n == 0:
            return 0
        if n in (1, 2):
            return 1 % m
        a = self.matrix(n - 2, m)
        # second row of A^(n-2) · (1, 1)
        return (a[1][0] + a[1][1]) % m

    __call__ = fib
