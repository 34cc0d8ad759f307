"""
Numerical primitives shared by the difficulty and performance models.

Wraps scipy's special functions and Brent root finder so the rest of the
package deals in plain floats and PPLab errors.
"""

import logging
from collections.abc import Callable

from scipy import optimize, special

from pplab.core.constants import ROOT_MAX_ITERATIONS, SKILL_ROOT_TOLERANCE
from pplab.core.errors import NonConvergenceError, RootNotBracketedError

logger = logging.getLogger(__name__)


def erf(x: float) -> float:
    """Gauss error function."""
    return float(special.erf(x))


def erfinv(x: float) -> float:
    """Inverse of the Gauss error function on (-1, 1)."""
    return float(special.erfinv(x))


def find_root(
    func: Callable[[float], float],
    lower: float,
    upper: float,
    tolerance: float = SKILL_ROOT_TOLERANCE,
    max_iterations: int = ROOT_MAX_ITERATIONS,
) -> float:
    """
    Find a root of func on [lower, upper] with Brent's method.

    Args:
        func: Continuous function with a sign change on the interval
        lower: Lower bound of the bracket
        upper: Upper bound of the bracket
        tolerance: Absolute tolerance on the root
        max_iterations: Iteration budget

    Returns:
        The root as a float

    Raises:
        RootNotBracketedError: func(lower) and func(upper) share a sign
        NonConvergenceError: the iteration budget ran out
    """
    try:
        root, result = optimize.brentq(
            func,
            lower,
            upper,
            xtol=tolerance,
            maxiter=max_iterations,
            full_output=True,
            disp=False,
        )
    except ValueError as exc:
        raise RootNotBracketedError(
            f"Root is not bracketed by [{lower}, {upper}]: {exc}"
        ) from exc

    if not result.converged:
        raise NonConvergenceError(
            f"Brent's method did not converge on [{lower}, {upper}] "
            f"after {result.iterations} iterations ({result.flag})"
        )

    logger.debug(f"Found root {root} on [{lower}, {upper}] in {result.iterations} iterations")
    return float(root)
