# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import sys
from functools import lru_cache

from colorama import Fore, Style
from sympy import factorint

from pisanotower.runtime import current as _rt_current


class TowerError(Exception):
    """Base class for every error a single request can fail with."""


class UserInputError(TowerError):
    pass


class InputFormatError(UserInputError):
    """Request line with the wrong token count or a non-integer token."""


class RangeOverflowError(TowerError, OverflowError):
    """A modulus or fused factor product reached the safe integer bound."""


class PeriodSearchExhaustion(TowerError, RuntimeError):
    """A period search ran past its step cap or produced an invalid period."""


# --- Diagnostics --------------------------------------------------------------

def debug(msg: str) -> None:
    """Trace line on stderr, only when the runtime debug flag is on."""
    if _rt_current().debug:
        print(f"{Fore.CYAN}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


# --- Prime factorization --------------------------------------------------------

@lru_cache(maxsize=4096)
def _factor_items(n: int) -> tuple[tuple[int, int], ...]:
    return tuple(sorted(factorint(n).items()))


def _check_positive(n: int) -> None:
    if n < 1:
        raise ValueError(f"factorization needs a positive integer, got {n}")


def distinct_prime_factors(n: int) -> list[int]:
    """Ascending distinct primes dividing n (empty for n == 1)."""
    _check_positive(n)
    return [p for p, _ in _factor_items(n)]


def prime_factors(n: int) -> list[int]:
    """Ascending prime factors of n with multiplicity, e.g. 12 -> [2, 2, 3]."""
    _check_positive(n)
    out: list[int] = []
    for p, e in _factor_items(n):
        out.extend([p] * e)
    return out


def square_free_kernel(n: int) -> int:
    """rad(n): product of the distinct primes of n."""
    k = 1
    for p in distinct_prime_factors(n):
        k *= p
    return k
