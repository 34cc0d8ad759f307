"""
PPLab Performance - rating plays against a map's difficulty.

- statistics: effective miss count, deviation, miss penalty, combo scaling
- calculator: PerformanceAttributes for a score
"""

from pplab.performance.calculator import PerformanceCalculator
from pplab.performance.statistics import (
    calculate_deviation,
    calculate_effective_miss_count,
    calculate_miss_penalty,
    combo_scaling_factor,
)

__all__ = [
    "PerformanceCalculator",
    "calculate_deviation",
    "calculate_effective_miss_count",
    "calculate_miss_penalty",
    "combo_scaling_factor",
]
