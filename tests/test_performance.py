"""
Tests for score statistics estimates and PerformanceCalculator.
"""

import math

import pytest

from pplab.core.config import PerformanceConfig, PPLabConfig
from pplab.core.constants import STAR_RATING_EXPONENT
from pplab.core.models import DifficultyAttributes, ScoreStatistics
from pplab.core.numerics import erf, erfinv
from pplab.performance import (
    PerformanceCalculator,
    calculate_deviation,
    calculate_effective_miss_count,
    calculate_miss_penalty,
    combo_scaling_factor,
)


def make_attributes(**overrides):
    values = dict(
        aim_difficulty=2.0,
        speed_difficulty=1.5,
        flashlight_difficulty=1.0,
        overall_difficulty=9.0,
        approach_rate=9.5,
        hit_circle_count=400,
        slider_count=100,
        max_combo=700,
    )
    values.update(overrides)
    return DifficultyAttributes(**values)


@pytest.fixture
def attributes():
    return make_attributes()


@pytest.fixture
def perfect_score():
    return ScoreStatistics.from_counts(max_combo=700, count_great=500)


@pytest.fixture
def calculator():
    return PerformanceCalculator(PPLabConfig())


def perfect_deviation():
    # OD 9 great window is 26ms; 400 of 400 circles hit great
    return 26.0 / (math.sqrt(2) * erfinv(400 / 401))


class TestEffectiveMissCount:
    """Tests for calculate_effective_miss_count."""

    def test_full_combo(self, attributes, perfect_score):
        """A full combo has no effective misses."""
        assert calculate_effective_miss_count(perfect_score, attributes) == 0.0

    def test_slider_breaks_from_combo(self):
        """A combo well below the maximum implies slider breaks."""
        attributes = make_attributes(max_combo=500, slider_count=100)
        score = ScoreStatistics.from_counts(max_combo=245, count_great=299, count_miss=1)
        # Full combo threshold is 500 - 0.1 * 100 = 490
        assert calculate_effective_miss_count(score, attributes) == pytest.approx(2.0)

    def test_reported_misses_are_a_floor(self):
        """Never fewer effective misses than reported misses."""
        attributes = make_attributes(max_combo=500, slider_count=100)
        score = ScoreStatistics.from_counts(max_combo=245, count_great=297, count_miss=3)
        assert calculate_effective_miss_count(score, attributes) == 3.0

    def test_capped_at_total_hits(self):
        """The combo-based estimate cannot exceed the judged objects."""
        attributes = make_attributes(max_combo=500, slider_count=100)
        score = ScoreStatistics.from_counts(max_combo=0, count_great=40, count_miss=10)
        assert calculate_effective_miss_count(score, attributes) == 50.0

    def test_no_sliders(self):
        """Without sliders only reported misses count."""
        attributes = make_attributes(slider_count=0, max_combo=400)
        score = ScoreStatistics.from_counts(max_combo=100, count_great=398, count_miss=2)
        assert calculate_effective_miss_count(score, attributes) == 2.0


class TestDeviation:
    """Tests for calculate_deviation."""

    def test_perfect_play_is_finite(self, attributes, perfect_score):
        """All greats still give a finite deviation."""
        assert calculate_deviation(perfect_score, attributes) == pytest.approx(perfect_deviation())

    def test_worse_judgements_raise_deviation(self, attributes, perfect_score):
        """Fewer greats mean a larger deviation."""
        sloppy = ScoreStatistics.from_counts(max_combo=700, count_great=450, count_ok=45, count_meh=5)
        assert calculate_deviation(sloppy, attributes) > calculate_deviation(perfect_score, attributes)

    def test_no_hit_circles(self, perfect_score):
        """Slider-only maps carry no timing information."""
        assert calculate_deviation(perfect_score, make_attributes(hit_circle_count=0)) is None

    def test_no_possible_greats(self):
        """When every hit circle is accounted for by non-greats the deviation is infinite."""
        attributes = make_attributes(hit_circle_count=10, slider_count=0, max_combo=10)
        score = ScoreStatistics.from_counts(max_combo=10, count_ok=10)
        assert calculate_deviation(score, attributes) == math.inf


class TestMissPenalty:
    """Tests for calculate_miss_penalty."""

    def test_no_misses(self):
        """Without misses the penalty is 1."""
        assert calculate_miss_penalty(0, 500) == pytest.approx(1.0)

    def test_decreases_with_misses(self):
        """Every additional miss lowers the penalty."""
        penalties = [calculate_miss_penalty(m, 500) for m in (0, 1, 2, 5, 20)]
        assert penalties == sorted(penalties, reverse=True)
        assert all(0 < p <= 1 for p in penalties)

    def test_fractional_misses(self):
        """Effective miss counts need not be whole."""
        assert calculate_miss_penalty(1, 500) > calculate_miss_penalty(1.5, 500) > calculate_miss_penalty(2, 500)

    def test_no_objects(self):
        """A play without judged objects shows no skill."""
        assert calculate_miss_penalty(0, 0) == 0.0

    def test_everything_missed(self):
        """Missing every object shows no skill."""
        assert calculate_miss_penalty(50, 50) == 0.0


class TestComboScaling:
    """Tests for combo_scaling_factor."""

    def test_full_combo(self, attributes, perfect_score):
        assert combo_scaling_factor(perfect_score, attributes) == 1.0

    def test_partial_combo(self, attributes):
        score = ScoreStatistics.from_counts(max_combo=350, count_great=500)
        assert combo_scaling_factor(score, attributes) == pytest.approx(0.5**0.8)

    def test_no_combo_on_map(self, perfect_score):
        assert combo_scaling_factor(perfect_score, make_attributes(max_combo=0)) == 1.0


class TestPerformanceCalculator:
    """Tests for PerformanceCalculator.calculate."""

    def test_perfect_play(self, calculator, attributes, perfect_score):
        """Each contribution follows the deviation-scaled formulas."""
        deviation = perfect_deviation()
        result = calculator.calculate(perfect_score, attributes)

        assert result.effective_miss_count == 0.0
        assert result.deviation == pytest.approx(deviation)
        assert result.aim == pytest.approx(2.0**3 * erf(50 / (math.sqrt(2) * deviation)))
        assert result.speed == pytest.approx(1.5**3 * erf(20 / (math.sqrt(2) * deviation)))
        assert result.accuracy == pytest.approx(90 * (7.5 / deviation) ** 2)
        assert result.flashlight == 0.0

    def test_total_is_sum(self, calculator, attributes, perfect_score):
        """The total is the sum of the contributions."""
        result = calculator.calculate(perfect_score, attributes)
        assert result.total == pytest.approx(
            result.aim + result.speed + result.accuracy + result.flashlight
        )

    def test_multiplier(self, attributes, perfect_score):
        """The configured multiplier scales the total only."""
        plain = PerformanceCalculator(PPLabConfig()).calculate(perfect_score, attributes)
        doubled = PerformanceCalculator(
            PPLabConfig(performance=PerformanceConfig(multiplier=2.0))
        ).calculate(perfect_score, attributes)

        assert doubled.aim == pytest.approx(plain.aim)
        assert doubled.total == pytest.approx(2 * plain.total)

    def test_misses_lower_aim(self, calculator, attributes, perfect_score):
        """Misses scale the aim difficulty by the miss penalty."""
        score = ScoreStatistics.from_counts(max_combo=300, count_great=495, count_miss=5)
        result = calculator.calculate(score, attributes)

        deviation = 26.0 / (math.sqrt(2) * erfinv(395 / 401))
        penalty = calculate_miss_penalty(5, 500)
        expected = (2.0 * penalty**STAR_RATING_EXPONENT) ** 3 * erf(50 / (math.sqrt(2) * deviation))

        assert result.effective_miss_count == 5.0
        assert result.aim == pytest.approx(expected)
        assert result.aim < calculator.calculate(perfect_score, attributes).aim

    def test_nothing_hit(self, calculator, attributes):
        """A play without successful hits is worth nothing."""
        score = ScoreStatistics.from_counts(max_combo=0, count_miss=500)
        result = calculator.calculate(score, attributes)
        assert result.aim == 0.0
        assert result.speed == 0.0
        assert result.accuracy == 0.0
        assert result.total == 0.0

    def test_infinite_deviation(self, calculator):
        """No greats possible means no aim, speed or accuracy value."""
        attributes = make_attributes(hit_circle_count=10, slider_count=0, max_combo=10)
        score = ScoreStatistics.from_counts(max_combo=10, count_ok=10)
        result = calculator.calculate(score, attributes)

        assert result.deviation == math.inf
        assert result.aim == 0.0
        assert result.speed == 0.0
        assert result.accuracy == 0.0

    def test_slider_only_map(self, calculator):
        """Without hit circles aim and speed are raw and accuracy is 0."""
        attributes = make_attributes(hit_circle_count=0, slider_count=100, max_combo=300)
        score = ScoreStatistics.from_counts(max_combo=300, count_great=100)
        result = calculator.calculate(score, attributes)

        assert result.deviation is None
        assert result.aim == pytest.approx(8.0)
        assert result.speed == pytest.approx(1.5**3)
        assert result.accuracy == 0.0

    def test_hidden_bonus(self, calculator, attributes):
        """Hidden rewards low approach rates and boosts accuracy."""
        plain = calculator.calculate(
            ScoreStatistics.from_counts(max_combo=700, count_great=500), attributes
        )
        hidden = calculator.calculate(
            ScoreStatistics.from_counts(max_combo=700, count_great=500, mods="HD"), attributes
        )

        assert hidden.aim / plain.aim == pytest.approx(1 + 0.04 * (12 - 9.5))
        assert hidden.speed / plain.speed == pytest.approx(1 + 0.04 * (12 - 9.5))
        assert hidden.accuracy / plain.accuracy == pytest.approx(1.08)

    def test_relax(self, calculator, attributes):
        """Relax plays get no speed or accuracy value."""
        score = ScoreStatistics.from_counts(max_combo=700, count_great=500, mods="RX")
        result = calculator.calculate(score, attributes)
        assert result.speed == 0.0
        assert result.accuracy == 0.0
        assert result.aim > 0

    def test_flashlight(self, calculator, attributes):
        """Flashlight value for a full combo on a long map."""
        score = ScoreStatistics.from_counts(max_combo=700, count_great=500, mods="FL")
        result = calculator.calculate(score, attributes)
        # Length factor is 1 past 400 objects; OD 9 adds 81 / 2500
        assert result.flashlight == pytest.approx(25.0 * (0.98 + 81 / 2500))

    def test_flashlight_short_map(self, calculator):
        """Short maps get less flashlight value."""
        attributes = make_attributes(hit_circle_count=100, slider_count=0, max_combo=100)
        score = ScoreStatistics.from_counts(max_combo=100, count_great=100, mods="FL")
        result = calculator.calculate(score, attributes)
        assert result.flashlight == pytest.approx(25.0 * 0.75 * (0.98 + 81 / 2500))

    def test_flashlight_touch_device(self, calculator):
        """Touch device lowers the raw flashlight difficulty."""
        attributes = make_attributes(flashlight_difficulty=2.0)
        plain = calculator.calculate(
            ScoreStatistics.from_counts(max_combo=700, count_great=500, mods="FL"), attributes
        )
        touch = calculator.calculate(
            ScoreStatistics.from_counts(max_combo=700, count_great=500, mods="FLTD"), attributes
        )
        assert touch.flashlight / plain.flashlight == pytest.approx(2.0**1.6 / 2.0**2)

    def test_flashlight_miss_penalty(self, calculator, attributes):
        """Misses cost 3% plus a share that grows with the miss ratio."""
        score = ScoreStatistics.from_counts(max_combo=700, count_great=495, count_miss=5, mods="FL")
        result = calculator.calculate(score, attributes)

        miss_penalty = 0.97 * (1 - (5 / 500) ** 0.775) ** (5**0.875)
        expected = 25.0 * miss_penalty * (0.5 + 0.99 / 2) * (0.98 + 81 / 2500)
        assert result.effective_miss_count == 5.0
        assert result.flashlight == pytest.approx(expected)
        assert result.flashlight == pytest.approx(21.733, abs=1e-2)

    def test_flashlight_combo_scaling(self, calculator):
        """A half combo scales flashlight by 0.5 ** 0.8."""
        attributes = make_attributes(hit_circle_count=500, slider_count=0, max_combo=500)
        score = ScoreStatistics.from_counts(max_combo=250, count_great=500, mods="FL")
        result = calculator.calculate(score, attributes)

        assert result.effective_miss_count == 0.0
        assert result.flashlight == pytest.approx(25.0 * 0.5**0.8 * (0.98 + 81 / 2500))
        assert result.flashlight == pytest.approx(14.537, abs=1e-2)

    def test_every_hit_circle_missed(self, calculator):
        """With only sliders hit, aim is the miss-penalized cube without deviation scaling."""
        attributes = make_attributes(hit_circle_count=10, slider_count=90, max_combo=300)
        score = ScoreStatistics.from_counts(max_combo=300, count_great=90, count_miss=10)
        result = calculator.calculate(score, attributes)

        penalty = calculate_miss_penalty(10, 100)
        assert result.deviation == math.inf
        assert result.effective_miss_count == 10.0
        assert 0 < penalty < 1
        assert result.aim == pytest.approx((2.0 * penalty**STAR_RATING_EXPONENT) ** 3)
        assert result.speed == 0.0
        assert result.accuracy == 0.0

    def test_calculator_is_stateless(self, calculator, attributes, perfect_score):
        """Rating another play in between does not change a result."""
        first = calculator.calculate(perfect_score, attributes)
        calculator.calculate(ScoreStatistics.from_counts(max_combo=10, count_miss=500), attributes)
        assert calculator.calculate(perfect_score, attributes) == first


class TestScenarios:
    """End-to-end plays on small maps."""

    def test_single_circle_map(self, calculator):
        """One great on one circle gives a great probability of 1/2."""
        attributes = make_attributes(
            overall_difficulty=5.0, hit_circle_count=1, slider_count=0, max_combo=1
        )
        score = ScoreStatistics.from_counts(max_combo=1, count_great=1)
        result = calculator.calculate(score, attributes)

        assert result.deviation == pytest.approx(50.0 / (math.sqrt(2) * erfinv(0.5)))
        assert 0 < result.accuracy < math.inf

    @pytest.mark.parametrize("mods", ["RX", "RXHD", "RXFLHR"])
    def test_relax_has_no_speed_or_accuracy(self, calculator, attributes, mods):
        score = ScoreStatistics.from_counts(max_combo=650, count_great=480, count_ok=20, mods=mods)
        result = calculator.calculate(score, attributes)
        assert result.speed == 0.0
        assert result.accuracy == 0.0

    @pytest.mark.parametrize("misses", [0, 3, 40])
    def test_no_sliders_counts_reported_misses(self, calculator, misses):
        attributes = make_attributes(slider_count=0, max_combo=400)
        score = ScoreStatistics.from_counts(
            max_combo=10, count_great=400 - misses, count_miss=misses
        )
        assert calculator.calculate(score, attributes).effective_miss_count == misses

    @pytest.mark.parametrize("mods", ["", "HD", "HDHRDT", "RX"])
    def test_flashlight_requires_mod(self, calculator, mods):
        attributes = make_attributes(flashlight_difficulty=5.0)
        score = ScoreStatistics.from_counts(max_combo=700, count_great=500, mods=mods)
        assert calculator.calculate(score, attributes).flashlight == 0.0
