"""
Cursor kinematics between two hit objects.

The cursor is modeled as following the unique quintic that starts at 0,
ends at the jump distance and has prescribed velocities at both ends.
Solving it for a given displacement tells how long the cursor spends
inside a circle while entering or leaving it.
"""

from pplab.core.constants import KINEMATIC_ROOT_TOLERANCE, ROOT_MAX_ITERATIONS
from pplab.core.errors import InvalidHitObjectError
from pplab.core.numerics import find_root


def position_function(
    distance: float,
    delta_time: float,
    initial_velocity: float,
    final_velocity: float,
    t: float,
) -> float:
    """
    Cursor displacement at time t.

    Returns 0 at t = 0 and distance at t = delta_time. The cursor moves with
    initial_velocity at t = 0 and final_velocity at t = delta_time.

    Args:
        distance: How far the cursor moves
        delta_time: How much time the cursor has to move (must be > 0)
        initial_velocity: Velocity at t = 0
        final_velocity: Velocity at t = delta_time
        t: Any time between 0 and delta_time

    Returns:
        The cursor's position at time t
    """
    if delta_time <= 0:
        raise InvalidHitObjectError(f"delta_time must be positive, got {delta_time}")

    c1 = (10 * distance - delta_time * (4 * final_velocity + 6 * initial_velocity)) / delta_time**3
    c2 = (15 * distance - delta_time * (7 * final_velocity + 8 * initial_velocity)) / delta_time**4
    c3 = (6 * distance - delta_time * (3 * final_velocity + 3 * initial_velocity)) / delta_time**5
    return initial_velocity * t + c1 * t**3 - c2 * t**4 + c3 * t**5


def crossing_time(
    distance: float,
    delta_time: float,
    target: float,
    tolerance: float = KINEMATIC_ROOT_TOLERANCE,
    max_iterations: int = ROOT_MAX_ITERATIONS,
) -> float:
    """
    Time at which a cursor starting and stopping at rest reaches target.

    The trajectory is monotonic on [0, delta_time], so any target strictly
    between 0 and distance has exactly one crossing.

    Raises:
        RootFindingError: target is outside the travelled range or the
            search did not converge
    """

    def displacement_minus_target(t: float) -> float:
        return position_function(distance, delta_time, 0, 0, t) - target

    return find_root(
        displacement_minus_target,
        0,
        delta_time,
        tolerance=tolerance,
        max_iterations=max_iterations,
    )
