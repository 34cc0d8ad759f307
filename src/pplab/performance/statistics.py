"""
Statistical estimates derived from a score.

This module provides:
- Effective miss count: reported misses blended with a combo-based guess
- Deviation: estimated timing standard deviation from the judgement counts
- Miss penalty: how much misses lower the skill a play demonstrates
- Combo scaling: achieved combo relative to the maximum
"""

import math

from pplab.core.constants import (
    GREAT_HIT_WINDOW_BASE,
    GREAT_HIT_WINDOW_PER_OD,
    SLIDER_COMBO_LENIENCY,
)
from pplab.core.models import DifficultyAttributes, ScoreStatistics
from pplab.core.numerics import erfinv


def calculate_effective_miss_count(
    score: ScoreStatistics, attributes: DifficultyAttributes
) -> float:
    """
    Guess the number of misses plus slider breaks from the combo.

    Args:
        score: The play's statistics
        attributes: Difficulty of the map

    Returns:
        At least the reported miss count, at most the number of judged objects
    """
    combo_based_miss_count = 0.0

    if attributes.slider_count > 0:
        full_combo_threshold = attributes.max_combo - SLIDER_COMBO_LENIENCY * attributes.slider_count
        if score.max_combo < full_combo_threshold:
            combo_based_miss_count = full_combo_threshold / max(1.0, score.max_combo)

    # Derived from combo so it can exceed the judged objects, which breaks later calculations
    combo_based_miss_count = min(max(combo_based_miss_count, 0.0), score.total_hits)

    return max(float(score.count_miss), combo_based_miss_count)


def calculate_deviation(score: ScoreStatistics, attributes: DifficultyAttributes) -> float | None:
    """
    Estimate the player's timing deviation (ms) from the hit circle judgements.

    Hit circles are assumed to account for every non-great judgement, and the
    great probability gets a +1 in the denominator so a perfect play still
    has a finite estimate.

    Returns:
        None without hit circles, +inf when no hit circle can have been a great
    """
    if attributes.hit_circle_count == 0:
        return None

    great_hit_window = GREAT_HIT_WINDOW_BASE - GREAT_HIT_WINDOW_PER_OD * attributes.overall_difficulty
    great_probability = (
        attributes.hit_circle_count - score.count_ok - score.count_meh - score.count_miss
    ) / (attributes.hit_circle_count + 1.0)

    if great_probability <= 0:
        return math.inf

    return great_hit_window / (math.sqrt(2) * erfinv(great_probability))


def _miss_skill_factor(miss_count: float, total_hits: int) -> float:
    """
    s(n, m): skill, in units of d * sqrt(2), of a player expected to miss m of
    n equally difficult objects.

    The expected order statistic of the hit probability follows a Beta(n - m,
    m + 1) distribution; this is the fourth-order Taylor expansion of erfinv
    around its mean using the Beta central moments.
    """
    n = total_hits
    a = n - miss_count
    b = miss_count + 1

    # Limit of the expansion as every object is missed
    if a <= 0:
        return 0.0

    y = erfinv((n - miss_count) / (n + 1))
    # Derivatives of erfinv
    y1 = math.exp(y * y) * math.sqrt(math.pi) / 2
    y2 = 2 * y * y1 * y1
    y3 = 2 * y1 * (y * y2 + (2 * (y * y) + 1) * (y1 * y1))
    y4 = 2 * y1 * (y * y3 + (6 * (y * y) + 3) * y1 * y2 + (4 * (y * y * y) + 6 * y) * (y1 * y1 * y1))

    # Central moments of the Beta distribution
    u2 = a * b / ((a + b) * (a + b) * (a + b + 1))
    u3 = 2 * (b - a) * a * b / ((a + b + 2) * (a + b) ** 3 * (a + b + 1))
    u4 = (3 + 6 * ((a - b) * (a + b + 1) - a * b * (a + b + 2)) / (a * b * (a + b + 2) * (a + b + 3))) * (
        u2 * u2
    )

    return math.sqrt(2) * (y + 0.5 * y2 * u2 + y3 * u3 / 6.0 + y4 * u4 / 24.0)


def calculate_miss_penalty(miss_count: float, total_hits: int) -> float:
    """
    Ratio between the m-miss difficulty and the full combo difficulty of a map.

    Imagine a map with n objects of equal difficulty d. d * sqrt(2) * s(n, 0)
    is its full combo difficulty and d * sqrt(2) * s(n, m) its m-miss
    difficulty, so scaling the full combo difficulty by s(n, m) / s(n, 0)
    gives the difficulty of the play.

    Args:
        miss_count: Effective miss count m
        total_hits: Judged objects n

    Returns:
        1 without misses, lower with more misses, 0 without judged objects
    """
    if total_hits == 0:
        return 0.0

    return _miss_skill_factor(miss_count, total_hits) / _miss_skill_factor(0, total_hits)


def combo_scaling_factor(score: ScoreStatistics, attributes: DifficultyAttributes) -> float:
    """(combo / max combo) ** 0.8, capped at 1; 1 when the map has no combo."""
    if attributes.max_combo <= 0:
        return 1.0

    return min(score.max_combo**0.8 / attributes.max_combo**0.8, 1.0)
