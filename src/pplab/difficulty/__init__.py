"""
PPLab Difficulty - rating maps independently of any score.

- preprocessing: hit objects to normalized difficulty samples
- kinematics: cursor trajectory between two objects
- evaluators: per-object aim difficulty
- skills: reduction of per-object difficulties into a skill level
- calculator: DifficultyAttributes for a whole map
"""

from pplab.difficulty.calculator import DifficultyCalculator
from pplab.difficulty.preprocessing import (
    Beatmap,
    BeatmapDifficulty,
    DifficultyObjectSequence,
    HitObject,
    HitObjectSample,
    create_difficulty_objects,
)
from pplab.difficulty.skills import Aim, Skill, fc_probability, hit_probability

__all__ = [
    "Aim",
    "Beatmap",
    "BeatmapDifficulty",
    "DifficultyCalculator",
    "DifficultyObjectSequence",
    "HitObject",
    "HitObjectSample",
    "Skill",
    "create_difficulty_objects",
    "fc_probability",
    "hit_probability",
]
