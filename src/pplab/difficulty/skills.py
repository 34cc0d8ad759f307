"""
Skills - reduce per-object difficulties of a map into one rating per dimension.

Every skill shares the same two-step contract: process() each sample of a map
in order, then read difficulty_value() once. Aim rates a map by the skill
level at which a player full combos it with a fixed probability.
"""

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np
from scipy import special

from pplab.core.config import SkillConfig, SolverConfig
from pplab.core.errors import RootFindingError
from pplab.core.numerics import erf, erfinv, find_root
from pplab.difficulty.evaluators import evaluate_difficulty_of
from pplab.difficulty.preprocessing import DifficultyObjectSequence, HitObjectSample

logger = logging.getLogger(__name__)


class Skill(ABC):
    """A skill dimension accumulated over the objects of one map."""

    name: str = "skill"

    @abstractmethod
    def process(self, current: HitObjectSample, objects: DifficultyObjectSequence) -> None:
        """Record the difficulty of current."""

    @abstractmethod
    def difficulty_value(self) -> float:
        """Rating of everything processed so far."""


# =============================================================================
# Probability model
# =============================================================================


def hit_probability(difficulty: float, skill: float) -> float:
    """
    Probability that a player of the given skill hits an object of the given difficulty.

    Args:
        difficulty: Difficulty of the object
        skill: The player's skill level

    Returns:
        Probability of successfully hitting the object
    """
    if difficulty == 0:
        return 1.0

    if skill == 0:
        return 0.0

    return erf(skill / (math.sqrt(2) * difficulty))


def fc_probability(skill: float, difficulties: Sequence[float] | np.ndarray) -> float:
    """
    Probability of hitting every object of a map at the given skill level.

    Args:
        skill: The player's skill level
        difficulties: Per-object difficulties

    Returns:
        Product of the per-object hit probabilities
    """
    values = np.asarray(difficulties, dtype=float)
    hard = values[values > 0]
    if hard.size == 0:
        return 1.0
    if skill == 0:
        return 0.0

    return float(np.prod(special.erf(skill / (math.sqrt(2) * hard))))


# =============================================================================
# Aim
# =============================================================================


class Aim(Skill):
    """
    The skill required to correctly aim at every object in the map with a
    uniform circle size and normalized distances.
    """

    name = "aim"

    def __init__(
        self,
        skill_config: SkillConfig | None = None,
        solver_config: SolverConfig | None = None,
    ):
        self.skill_config = skill_config or SkillConfig()
        self.solver_config = solver_config or SolverConfig()
        self._difficulties: list[float] = []

    @property
    def difficulties(self) -> tuple[float, ...]:
        return tuple(self._difficulties)

    def process(self, current: HitObjectSample, objects: DifficultyObjectSequence) -> None:
        self._difficulties.append(
            evaluate_difficulty_of(current, objects, self.skill_config, self.solver_config)
        )

    def difficulty_value(self) -> float:
        if sum(self._difficulties) == 0:
            return 0.0

        return self.skill_level()

    def skill_level(self) -> float:
        """
        The skill level at which the probability of full combo'ing the map
        equals the configured threshold. This skill level is the map's aim
        difficulty.

        Returns 0 when the root cannot be found, which only happens for
        degenerate maps.
        """
        threshold = self.skill_config.fc_probability_threshold
        difficulties = np.asarray(self._difficulties, dtype=float)
        max_difficulty = float(difficulties.max())

        def fc_probability_minus_threshold(skill: float) -> float:
            return fc_probability(skill, difficulties) - threshold

        # Skill at which the hardest note alone is hit with the threshold probability
        lower_bound = erfinv(threshold) * max_difficulty * math.sqrt(2)

        # Skill at which a map where every note is as hard as the hardest one
        # is full combo'd with the threshold probability
        upper_bound = erfinv(threshold ** (1.0 / len(difficulties))) * max_difficulty * math.sqrt(2)

        try:
            return find_root(
                fc_probability_minus_threshold,
                lower_bound,
                upper_bound,
                tolerance=self.solver_config.skill_tolerance,
                max_iterations=self.solver_config.max_iterations,
            )
        except RootFindingError as exc:
            logger.warning(f"Aim skill level did not converge, rating as 0: {exc}")
            return 0.0
