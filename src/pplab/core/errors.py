"""
PPLab error types.

Every error raised on purpose by the rating pipeline derives from PPLabError.
Input errors also derive from ValueError and numerical failures from
RuntimeError so callers can catch them with the builtin types.
"""


class PPLabError(Exception):
    """Base class for rating pipeline errors."""


class InvalidHitObjectError(PPLabError, ValueError):
    """Raised when a hit object or difficulty sample violates its invariants."""


class InvalidScoreError(PPLabError, ValueError):
    """Raised when score statistics are malformed."""


class RootFindingError(PPLabError, RuntimeError):
    """Raised when a bracketed root search cannot produce a root."""


class RootNotBracketedError(RootFindingError):
    """Raised when the function has the same sign at both bounds."""


class NonConvergenceError(RootFindingError):
    """Raised when the root search exhausts its iteration budget."""


class DifficultyCalculationError(PPLabError, RuntimeError):
    """Raised when a map's difficulty cannot be computed."""

    def __init__(self, message: str, object_index: int | None = None):
        super().__init__(message)
        self.object_index = object_index
