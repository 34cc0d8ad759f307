"""
Difficulty Calculator

Drives preprocessing and every registered skill over a map and collects the
results into DifficultyAttributes. Skills are created fresh for every map
through factories, so a calculator can be reused and shared.

Usage:
    calculator = DifficultyCalculator()
    attributes = calculator.calculate(beatmap)
    print(attributes.aim_difficulty)
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager

import pandas as pd

from pplab.core.config import PPLabConfig
from pplab.core.constants import HitObjectKind
from pplab.core.errors import DifficultyCalculationError, RootFindingError
from pplab.core.models import DifficultyAttributes
from pplab.core.utils import PerformanceMonitor, timed
from pplab.difficulty.evaluators import aim_difficulty_of, coordination_difficulty_of
from pplab.difficulty.preprocessing import (
    Beatmap,
    DifficultyObjectSequence,
    HitObjectSample,
    create_difficulty_objects,
)
from pplab.difficulty.skills import Aim, Skill

logger = logging.getLogger(__name__)

SkillFactory = Callable[[PPLabConfig], Skill]

# Dimensions reported in DifficultyAttributes
SKILL_DIMENSIONS = ("aim", "speed", "flashlight")


@contextmanager
def _evaluating(skill_name: str, current: HitObjectSample) -> Iterator[None]:
    """Report a failed root search as a map-level error naming the object."""
    try:
        yield
    except RootFindingError as exc:
        raise DifficultyCalculationError(
            f"Could not evaluate {skill_name} difficulty of object {current.index} "
            f"at {current.start_time:.0f}ms: {exc}",
            object_index=current.index,
        ) from exc


def _aim_factory(config: PPLabConfig) -> Skill:
    return Aim(config.skill, config.solver)


DEFAULT_SKILLS: dict[str, SkillFactory] = {"aim": _aim_factory}

BREAKDOWN_COLUMNS = [
    "index",
    "start_time",
    "kind",
    "strain_time",
    "lazy_jump_distance",
    "minimum_jump_distance",
    "velocity",
    "coordination",
    "difficulty",
]


class DifficultyCalculator:
    """
    Computes DifficultyAttributes for maps.

    Args:
        config: Settings for preprocessing, solving and skills (defaults if omitted)
        skills: Factories keyed by dimension name ("aim", "speed", "flashlight").
            A dimension without a factory is rated 0.
    """

    def __init__(
        self,
        config: PPLabConfig | None = None,
        skills: Mapping[str, SkillFactory] | None = None,
    ):
        self.config = config or PPLabConfig()
        self.skill_factories: dict[str, SkillFactory] = dict(
            DEFAULT_SKILLS if skills is None else skills
        )

        unknown = set(self.skill_factories) - set(SKILL_DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown skill dimensions: {sorted(unknown)}")

    def create_difficulty_objects(
        self, beatmap: Beatmap, clock_rate: float = 1.0
    ) -> DifficultyObjectSequence:
        return create_difficulty_objects(
            beatmap.hit_objects,
            beatmap.difficulty.circle_size,
            clock_rate=clock_rate,
            config=self.config.preprocessing,
        )

    def calculate(self, beatmap: Beatmap, clock_rate: float = 1.0) -> DifficultyAttributes:
        """
        Rate a map.

        Args:
            beatmap: The map, with mods already applied to its settings
            clock_rate: Playback rate

        Returns:
            DifficultyAttributes for the map

        Raises:
            DifficultyCalculationError: an object could not be evaluated
        """
        objects = self.create_difficulty_objects(beatmap, clock_rate)
        skills = {name: factory(self.config) for name, factory in self.skill_factories.items()}

        with PerformanceMonitor(f"difficulty of {len(beatmap.hit_objects)} objects"):
            for current in objects:
                for skill in skills.values():
                    with _evaluating(skill.name, current):
                        skill.process(current, objects)

            values = {
                name: skills[name].difficulty_value() if name in skills else 0.0
                for name in SKILL_DIMENSIONS
            }

        attributes = DifficultyAttributes(
            aim_difficulty=values["aim"],
            speed_difficulty=values["speed"],
            flashlight_difficulty=values["flashlight"],
            overall_difficulty=beatmap.difficulty.overall_difficulty,
            approach_rate=beatmap.difficulty.approach_rate,
            hit_circle_count=beatmap.count(HitObjectKind.CIRCLE),
            slider_count=beatmap.count(HitObjectKind.SLIDER),
            spinner_count=beatmap.count(HitObjectKind.SPINNER),
            max_combo=beatmap.max_combo,
        )
        logger.debug(f"Difficulty attributes: {attributes}")
        return attributes

    @timed
    def breakdown(self, beatmap: Beatmap, clock_rate: float = 1.0) -> pd.DataFrame:
        """
        Per-object aim difficulty table, one row per difficulty sample.

        Columns: index, start_time, kind, strain_time, lazy_jump_distance,
        minimum_jump_distance, velocity, coordination, difficulty.

        Raises:
            DifficultyCalculationError: an object could not be evaluated
        """
        objects = self.create_difficulty_objects(beatmap, clock_rate)

        rows = []
        for current in objects:
            if current.is_spinner:
                velocity = coordination = 0.0
            else:
                velocity = aim_difficulty_of(current)
                with _evaluating(Aim.name, current):
                    coordination = coordination_difficulty_of(
                        current, objects, self.config.skill, self.config.solver
                    )
            rows.append(
                {
                    "index": current.index,
                    "start_time": current.start_time,
                    "kind": str(current.kind),
                    "strain_time": current.strain_time,
                    "lazy_jump_distance": current.lazy_jump_distance,
                    "minimum_jump_distance": current.minimum_jump_distance,
                    "velocity": velocity,
                    "coordination": coordination,
                    "difficulty": velocity + coordination,
                }
            )

        return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)
