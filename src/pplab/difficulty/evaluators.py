"""
Per-object aim difficulty.

The aim difficulty of an object is the sum of two terms, both for a player
with an aim deviation of 1:
- velocity: how fast the cursor must travel to reach the object
- coordination: how little time the cursor spends inside the object, taken
  as the reciprocal of an equivalent half hit window
"""

from pplab.core.config import SkillConfig, SolverConfig
from pplab.difficulty.kinematics import crossing_time
from pplab.difficulty.preprocessing import DifficultyObjectSequence, HitObjectSample


def evaluate_difficulty_of(
    current: HitObjectSample,
    objects: DifficultyObjectSequence,
    skill_config: SkillConfig | None = None,
    solver_config: SolverConfig | None = None,
) -> float:
    """
    Evaluate the aim difficulty of the current object.

    Args:
        current: The object to rate
        objects: The sequence current belongs to, for neighbor lookup
        skill_config: Terminal note time
        solver_config: Root finding tolerance

    Returns:
        Non-negative difficulty; 0 for spinners

    Raises:
        RootFindingError: a crossing time could not be solved
    """
    if current.is_spinner:
        return 0.0

    return aim_difficulty_of(current) + coordination_difficulty_of(
        current, objects, skill_config, solver_config
    )


def aim_difficulty_of(current: HitObjectSample) -> float:
    """Aim difficulty is proportional to velocity."""
    return current.minimum_jump_distance / current.strain_time


def coordination_difficulty_of(
    current: HitObjectSample,
    objects: DifficultyObjectSequence,
    skill_config: SkillConfig | None = None,
    solver_config: SolverConfig | None = None,
) -> float:
    """
    Reciprocal of half of the time the cursor spends inside the current object.

    If the time spent in the object is t, that is roughly the same as a hit
    window of +/- t / 2.
    """
    if current.is_spinner:
        return 0.0

    skill_config = skill_config or SkillConfig()
    solver_config = solver_config or SolverConfig()

    time_in_current_note = time_entering(current, solver_config)

    next_obj = objects.next(current)
    if next_obj is not None:
        time_in_current_note += time_leaving(next_obj, solver_config)
    else:
        time_in_current_note += skill_config.terminal_note_time

    hit_window = time_in_current_note / 2
    return 1 / hit_window


def time_entering(current: HitObjectSample, solver_config: SolverConfig | None = None) -> float:
    """
    Time the cursor spends inside current while moving in from the previous object.

    The cursor enters the note when it is one radius away from its center,
    i.e. when the trajectory reaches lazy_jump_distance - 1. Objects that
    overlap the previous one by half or more are inside for the whole strain time.
    """
    if current.lazy_jump_distance <= 1:
        return current.strain_time

    solver_config = solver_config or SolverConfig()
    entry_time = crossing_time(
        current.lazy_jump_distance,
        current.strain_time,
        current.lazy_jump_distance - 1,
        tolerance=solver_config.kinematic_tolerance,
        max_iterations=solver_config.max_iterations,
    )
    return current.strain_time - entry_time


def time_leaving(next_obj: HitObjectSample, solver_config: SolverConfig | None = None) -> float:
    """
    Time the cursor spends inside the previous object while moving towards next_obj.

    The cursor leaves once the trajectory towards next_obj is one radius long.
    """
    if next_obj.lazy_jump_distance <= 1:
        return next_obj.strain_time

    solver_config = solver_config or SolverConfig()
    return crossing_time(
        next_obj.lazy_jump_distance,
        next_obj.strain_time,
        1,
        tolerance=solver_config.kinematic_tolerance,
        max_iterations=solver_config.max_iterations,
    )
