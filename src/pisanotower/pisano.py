# -----------------------------------------------------------------------------
#  Pisano periods: brute force for primes, mixed-radix extension for the rest
# -----------------------------------------------------------------------------

from __future__ import annotations

from sympy import lcm

from pisanotower.fibmod import FibonacciEvaluator
from pisanotower.mixed_radix import (
    formalize,
    formalize_columns,
    from_digits,
    identity,
    mat_mul,
    mat_vec,
    transition_matrix,
)
from pisanotower.progress import Progress
from pisanotower.runtime import CFG
from pisanotower.runtime import current as _rt_current
from pisanotower.safeint import check_modulus
from pisanotower.utility import (
    PeriodSearchExhaustion,
    debug,
    distinct_prime_factors,
    prime_factors,
    square_free_kernel,
)

# pi(n) <= 6n for every n
DEFAULT_NAIVE_STEP_FACTOR = 6
# Redraw the progress bar every this many steps
_PROGRESS_CHUNK = 1 << 20


class PeriodFinder:
    """
    Pisano period of any modulus below the safe bound.

    Primes are brute-forced. A composite m starts from the period of its
    square-free kernel K (lcm of the prime periods) and folds in the
    remaining prime factors of m / K one at a time, see extend().
    """

    def __init__(self, fib: FibonacciEvaluator, *, bound: int | None = None):
        self.fib = fib
        self.bound = fib.bound if bound is None else bound
        self.cache: dict[int, int] = {}

    # ---- brute force -------------------------------------------------------

    def naive(self, p: int) -> int:
        """
        Walk (F_{i-1}, F_i) mod p from (1, 1) until (1, 1) comes back.
        Linear in the period, so only used for primes.
        """
        hit = self.cache.get(p)
        if hit is not None:
            return hit
        if p < 1:
            raise ValueError(f"modulus must be >= 1, got {p}")
        check_modulus(p, self.bound)
        if p == 1:
            self.cache[1] = 1
            return 1

        factor = int(CFG("PERIOD.NAIVE_STEP_FACTOR", DEFAULT_NAIVE_STEP_FACTOR))
        limit = factor * p + 2
        progress = Progress(limit, enabled=_rt_current().show_progress and limit > _PROGRESS_CHUNK)

        a = b = 1
        try:
            for i in range(3, limit + 1):
                fi = (a + b) % p
                if b == 1 and fi == 1:
                    period = i - 2
                    self.cache[p] = period
                    debug(f"naive period({p}) = {period}")
                    return period
                a, b = b, fi
                if i % _PROGRESS_CHUNK == 0:
                    progress.update(i, f"period({p})")
        finally:
            progress.done()

        raise PeriodSearchExhaustion(f"period for mod {p} not found within {limit} steps.")

    # ---- general moduli --------------------------------------------------------

    def period(self, m: int) -> int:
        hit = self.cache.get(m)
        if hit is not None:
            return hit
        if m < 1:
            raise ValueError(f"modulus must be >= 1, got {m}")
        check_modulus(m, self.bound)

        primes = distinct_prime_factors(m)
        if m == 1 or primes == [m]:
            return self.naive(m)

        kernel = square_free_kernel(m)
        first = int(lcm([self.naive(p) for p in primes]))
        chain = [kernel, *prime_factors(m // kernel)]
        residue = self.fib(first + 1, m)

        result = self.extend(m, first, residue, chain)

        if CFG("PERIOD.VERIFY", True) and (self.fib(result, m), self.fib(result + 1, m)) != (0, 1):
            raise PeriodSearchExhaustion(f"merged period {result} for mod {m} failed verification.")

        self.cache[m] = result
        return result

    def extend(self, m: int, period: int, residue: int, chain: list[int]) -> int:
        """
        Fold the factor chain into one modulus.

        `period` is the period of chain[0] and `residue` = F(period + 1) mod m.
        Each round finds the smallest t with F(t*period + 1) == 1 modulo
        chain[0] * chain[1], multiplies the period by t and fuses the two
        lowest factors. The chain shrinks by one per round; its product
        stays m.
        """
        factors = list(chain)
        while len(factors) > 1:
            t, digits = self.search_multiplier(residue, factors)
            merged = from_digits(digits, factors) % m
            period *= t
            exact = self.fib(period + 1, m)
            if merged != exact:
                # residue**t only tracks F(t*period + 1) modulo the two lowest factors
                debug(f"mod {m}: residue {merged} resynced to {exact} at period {period}")
            residue = exact
            fused = check_modulus(factors[0] * factors[1], self.bound, "factor product")
            factors = [fused, *factors[2:]]
            debug(f"mod {m}: x{t} -> period {period}, chain {factors}")
        return period

    def search_multiplier(self, residue: int, factors: list[int]) -> tuple[int, list[int]]:
        """
        Smallest t >= 1 with residue**t == 1 (mod factors[0] * factors[1]),
        found by repeated application of the transition matrix. Returns t and
        the formalized digits of residue**t mod the chain product.
        """
        step = transition_matrix(residue, factors)
        acc = identity(len(factors))
        start = [1] + [0] * (len(factors) - 1)

        cap = 2 * factors[1]
        for t in range(1, cap + 1):
            acc = formalize_columns(mat_mul(step, acc), factors)
            digits = formalize(mat_vec(acc, start), factors)
            if digits[0] == 1 and digits[1] == 0:
                return t, digits

        raise PeriodSearchExhaustion(
            f"no closure after {cap} rounds for chain {factors} (residue {residue})."
        )
