# -----------------------------------------------------------------------------
#  F(F(...F(a)...)) mod m
# -----------------------------------------------------------------------------

from __future__ import annotations

from pisanotower.fibmod import FibonacciEvaluator
from pisanotower.pisano import PeriodFinder
from pisanotower.safeint import check_modulus, safe_bound
from pisanotower.utility import UserInputError, debug


class TowerSolver:
    """
    Owns the Fibonacci-matrix and Pisano-period caches for one process.

    F(x) mod m only depends on x mod pi(m), so the exponent needed at level L
    is the level L-1 tower taken mod pi(m).
    """

    def __init__(self, *, bound: int | None = None):
        self.bound = safe_bound() if bound is None else bound
        self.fib = FibonacciEvaluator(bound=self.bound)
        self.periods = PeriodFinder(self.fib, bound=self.bound)

    def F(self, n: int, m: int) -> int:
        return self.fib(n, m)

    def period(self, m: int) -> int:
        return self.periods.period(m)

    def solve(self, a: int, level: int, m: int) -> int:
        if a < 0:
            raise UserInputError(f"a must be >= 0, got {a}")
        if level < 1:
            raise UserInputError(f"level must be >= 1, got {level}")
        if m < 1:
            raise UserInputError(f"modulus must be >= 1, got {m}")
        check_modulus(m, self.bound)

        # moduli[k] is the modulus used at level k + 1
        moduli = [m]
        for lvl in range(level, 1, -1):
            p = self.period(moduli[-1])
            debug(f"Level {lvl} period: {p}")
            moduli.append(p)
        moduli.reverse()

        value = self.F(a, moduli[0])
        for lvl, mod in enumerate(moduli[1:], start=2):
            debug(f"Level {lvl} inner F mod period: {value}")
            value = self.F(value, mod)
            debug(f"Level {lvl} result: {value}")
        return value
