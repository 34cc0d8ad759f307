"""
PPLab Core - Foundation modules shared by difficulty and performance calculation.

This module contains the fundamental components:
- constants: Enums and model constants
- errors: Exception hierarchy
- numerics: erf, inverse erf and Brent root finding
- config: Application configuration management
- models: Value objects crossing module boundaries
- utils: Logging setup and timing helpers
"""

from pplab.core.constants import HitObjectKind, HitResult, Mod
from pplab.core.errors import (
    DifficultyCalculationError,
    InvalidHitObjectError,
    InvalidScoreError,
    NonConvergenceError,
    PPLabError,
    RootFindingError,
    RootNotBracketedError,
)
from pplab.core.models import (
    DifficultyAttributes,
    PerformanceAttributes,
    ScoreStatistics,
    calculate_accuracy,
    parse_mods,
)

__all__ = [
    # Enums
    "HitObjectKind",
    "HitResult",
    "Mod",
    # Errors
    "DifficultyCalculationError",
    "InvalidHitObjectError",
    "InvalidScoreError",
    "NonConvergenceError",
    "PPLabError",
    "RootFindingError",
    "RootNotBracketedError",
    # Models
    "DifficultyAttributes",
    "PerformanceAttributes",
    "ScoreStatistics",
    "calculate_accuracy",
    "parse_mods",
]
