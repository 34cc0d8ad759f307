"""
PPLab - Difficulty and performance ratings for osu! standard

Rates a map by the aim skill needed to full combo it with even odds, and rates
a play by combining that difficulty with a timing deviation estimated from
its judgements.

Usage:
    from pplab import (
        Beatmap, DifficultyCalculator, PerformanceCalculator, ScoreStatistics, configure_logging
    )

    configure_logging()

    attributes = DifficultyCalculator().calculate(beatmap)
    score = ScoreStatistics.from_counts(max_combo=512, count_great=480, count_ok=12, mods="HD")
    print(PerformanceCalculator().calculate(score, attributes).total)
"""

__version__ = "0.1.0"
__author__ = "PPLab Contributors"


def __getattr__(name):
    """Lazy import so importing pplab does not load scipy and pandas."""
    # Difficulty
    if name == "DifficultyCalculator":
        from pplab.difficulty.calculator import DifficultyCalculator
        return DifficultyCalculator
    elif name in ("Beatmap", "BeatmapDifficulty", "HitObject", "HitObjectSample"):
        from pplab.difficulty import preprocessing
        return getattr(preprocessing, name)
    # Performance
    elif name == "PerformanceCalculator":
        from pplab.performance.calculator import PerformanceCalculator
        return PerformanceCalculator
    # Models
    elif name in (
        "DifficultyAttributes",
        "PerformanceAttributes",
        "ScoreStatistics",
        "parse_mods",
    ):
        from pplab.core import models
        return getattr(models, name)
    elif name in ("HitObjectKind", "Mod"):
        from pplab.core import constants
        return getattr(constants, name)
    # Configuration
    elif name in ("PPLabConfig", "load_config"):
        from pplab.core import config
        return getattr(config, name)
    elif name == "configure_logging":
        from pplab.core.utils import configure_logging
        return configure_logging
    raise AttributeError(f"module 'pplab' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Difficulty
    "Beatmap",
    "BeatmapDifficulty",
    "DifficultyCalculator",
    "HitObject",
    "HitObjectSample",
    # Performance
    "PerformanceCalculator",
    # Models
    "DifficultyAttributes",
    "HitObjectKind",
    "Mod",
    "PerformanceAttributes",
    "ScoreStatistics",
    "parse_mods",
    # Configuration
    "PPLabConfig",
    "configure_logging",
    "load_config",
]
