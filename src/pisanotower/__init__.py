from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("pisanotower")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings
from .fibmod import FibonacciEvaluator
from .pisano import PeriodFinder
from .runtime import APPLY, CFG
from .tower import TowerSolver
from .utility import (
    InputFormatError,
    PeriodSearchExhaustion,
    RangeOverflowError,
    TowerError,
    UserInputError,
)
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "FibonacciEvaluator",
    "InputFormatError",
    "PeriodFinder",
    "PeriodSearchExhaustion",
    "RangeOverflowError",
    "TowerError",
    "TowerSolver",
    "UserInputError",
    "__version__",
    "has_profile",
    "load_settings",
    "workspace_dir"
]
