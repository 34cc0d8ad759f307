"""
Performance Calculator

Maps a map's DifficultyAttributes and a play's ScoreStatistics to a
performance value, split into aim, speed, accuracy and flashlight
contributions.

Every contribution is scaled by how precisely the player timed their hits,
using a timing deviation inferred from the hit circle judgements.

Usage:
    calculator = PerformanceCalculator()
    performance = calculator.calculate(score, attributes)
    print(performance.total)
"""

import logging
import math
from dataclasses import dataclass

from pplab.core.config import PPLabConfig
from pplab.core.constants import (
    ACCURACY_BASE,
    ACCURACY_DEVIATION_SCALE,
    AIM_DEVIATION_SCALE,
    HIDDEN_ACCURACY_BONUS,
    HIDDEN_AR_BONUS,
    SPEED_DEVIATION_SCALE,
    STAR_RATING_EXPONENT,
    Mod,
)
from pplab.core.models import DifficultyAttributes, PerformanceAttributes, ScoreStatistics
from pplab.core.numerics import erf
from pplab.performance.statistics import (
    calculate_deviation,
    calculate_effective_miss_count,
    calculate_miss_penalty,
    combo_scaling_factor,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ScoreContext:
    """Values derived once per calculation and shared by every contribution."""

    score: ScoreStatistics
    attributes: DifficultyAttributes
    effective_miss_count: float
    deviation: float | None

    @property
    def total_hits(self) -> int:
        return self.score.total_hits

    @property
    def total_successful_hits(self) -> int:
        return self.score.total_successful_hits


def _hidden_ar_bonus(approach_rate: float) -> float:
    # More reward for lower AR with hidden; nerfs high AR and buffs low AR
    return 1.0 + HIDDEN_AR_BONUS * (12.0 - approach_rate)


class PerformanceCalculator:
    """
    Computes PerformanceAttributes for plays.

    Holds no per-play state, so one instance can rate many scores, also
    from several threads.
    """

    def __init__(self, config: PPLabConfig | None = None):
        self.config = config or PPLabConfig()

    def calculate(
        self, score: ScoreStatistics, attributes: DifficultyAttributes
    ) -> PerformanceAttributes:
        """
        Rate a play.

        Args:
            score: Statistics of the play
            attributes: Difficulty of the map the play was on

        Returns:
            PerformanceAttributes with every contribution and the total
        """
        context = _ScoreContext(
            score=score,
            attributes=attributes,
            effective_miss_count=calculate_effective_miss_count(score, attributes),
            deviation=calculate_deviation(score, attributes),
        )

        aim_value = self.compute_aim_value(context)
        speed_value = self.compute_speed_value(context)
        accuracy_value = self.compute_accuracy_value(context)
        flashlight_value = self.compute_flashlight_value(context)
        total_value = self.config.performance.multiplier * (
            aim_value + speed_value + accuracy_value + flashlight_value
        )

        logger.debug(
            f"Performance: aim={aim_value:.3f} speed={speed_value:.3f} "
            f"accuracy={accuracy_value:.3f} flashlight={flashlight_value:.3f} "
            f"effective_misses={context.effective_miss_count:.2f} deviation={context.deviation}"
        )

        return PerformanceAttributes(
            aim=aim_value,
            speed=speed_value,
            accuracy=accuracy_value,
            flashlight=flashlight_value,
            effective_miss_count=context.effective_miss_count,
            total=total_value,
            deviation=context.deviation,
        )

    def compute_aim_value(self, context: _ScoreContext) -> float:
        score, attributes = context.score, context.attributes
        aim_difficulty = attributes.aim_difficulty

        if context.total_successful_hits == 0:
            return 0.0

        # Penalize misses. Approximates the skill level shown by assuming all
        # objects have equal hit probabilities.
        if context.effective_miss_count > 0:
            # Star rating is difficulty ** STAR_RATING_EXPONENT, so the penalty is too
            miss_penalty = calculate_miss_penalty(context.effective_miss_count, context.total_hits)
            aim_difficulty *= miss_penalty**STAR_RATING_EXPONENT

        aim_value = aim_difficulty**3

        # Slider-only plays carry no timing information
        if attributes.hit_circle_count - score.count_miss == 0:
            return aim_value

        deviation = context.deviation
        if deviation is None:
            return aim_value
        if math.isinf(deviation):
            return 0.0

        if score.has_mod(Mod.HIDDEN):
            aim_value *= _hidden_ar_bonus(attributes.approach_rate)

        aim_value *= erf(AIM_DEVIATION_SCALE / (math.sqrt(2) * deviation))

        return aim_value

    def compute_speed_value(self, context: _ScoreContext) -> float:
        score, attributes = context.score, context.attributes

        if score.has_mod(Mod.RELAX):
            return 0.0

        if context.total_successful_hits == 0:
            return 0.0

        speed_value = attributes.speed_difficulty**3

        deviation = context.deviation
        if deviation is None:
            return speed_value
        if math.isinf(deviation):
            return 0.0

        if score.has_mod(Mod.HIDDEN):
            speed_value *= _hidden_ar_bonus(attributes.approach_rate)

        speed_value *= erf(SPEED_DEVIATION_SCALE / (math.sqrt(2) * deviation))

        return speed_value

    def compute_accuracy_value(self, context: _ScoreContext) -> float:
        score, attributes = context.score, context.attributes

        if score.has_mod(Mod.RELAX):
            return 0.0

        if attributes.hit_circle_count == 0 or context.total_successful_hits == 0:
            return 0.0

        deviation = context.deviation
        if deviation is None:
            return 0.0

        accuracy_value = ACCURACY_BASE * (ACCURACY_DEVIATION_SCALE / deviation) ** 2

        if score.has_mod(Mod.HIDDEN):
            accuracy_value *= HIDDEN_ACCURACY_BONUS

        return accuracy_value

    def compute_flashlight_value(self, context: _ScoreContext) -> float:
        score, attributes = context.score, context.attributes

        if not score.has_mod(Mod.FLASHLIGHT):
            return 0.0

        raw_flashlight = attributes.flashlight_difficulty

        if score.has_mod(Mod.TOUCH_DEVICE):
            raw_flashlight = raw_flashlight**0.8

        flashlight_value = raw_flashlight**2.0 * 25.0

        total_hits = context.total_hits
        miss_count = context.effective_miss_count

        # Penalize misses relative to the object count, with a 3% reduction for any miss
        if miss_count > 0:
            flashlight_value *= 0.97 * (1 - (miss_count / total_hits) ** 0.775) ** (
                miss_count**0.875
            )

        flashlight_value *= combo_scaling_factor(score, attributes)

        # Shorter maps have a higher share of objects at low combo radii
        flashlight_value *= (
            0.7
            + 0.1 * min(1.0, total_hits / 200.0)
            + (0.2 * min(1.0, (total_hits - 200) / 200.0) if total_hits > 200 else 0.0)
        )

        # Scale slightly with accuracy, and with the accuracy difficulty of the map
        flashlight_value *= 0.5 + score.accuracy / 2.0
        flashlight_value *= 0.98 + attributes.overall_difficulty**2 / 2500

        return flashlight_value
