"""
PPLab Constants

Defines hit object kinds, judgement results, modifiers and the numeric
constants of the difficulty and performance models.
"""

from enum import StrEnum


class HitObjectKind(StrEnum):
    """Kinds of gameplay objects."""

    CIRCLE = "circle"
    SLIDER = "slider"
    SPINNER = "spinner"


class HitResult(StrEnum):
    """Judgement categories a hit object can receive."""

    GREAT = "great"  # 300
    OK = "ok"  # 100
    MEH = "meh"  # 50
    MISS = "miss"


HIT_RESULT_POINTS = {
    HitResult.GREAT: 300,
    HitResult.OK: 100,
    HitResult.MEH: 50,
    HitResult.MISS: 0,
}


class Mod(StrEnum):
    """
    Gameplay modifiers, keyed by their two-letter acronym.

    Only their presence is queried here; how a mod changes the map
    (clock rate, circle size) is applied before difficulty calculation.
    """

    NO_FAIL = "NF"
    EASY = "EZ"
    TOUCH_DEVICE = "TD"
    HIDDEN = "HD"
    HARD_ROCK = "HR"
    SUDDEN_DEATH = "SD"
    DOUBLE_TIME = "DT"
    RELAX = "RX"
    HALF_TIME = "HT"
    NIGHTCORE = "NC"
    FLASHLIGHT = "FL"
    SPUN_OUT = "SO"
    AUTOPILOT = "AP"
    PERFECT = "PF"


# Playfield geometry
# Circle radius in osu!pixels is 54.4 - 4.48 * CS
CIRCLE_RADIUS_BASE = 54.4
CIRCLE_RADIUS_PER_CS = 4.48
# Radius under which small circles get a distance buff
CIRCLE_SIZE_BUFF_THRESHOLD = 30.0

# Slider follow circle radii, in circle radii
MAXIMUM_SLIDER_RADIUS = 2.4
ASSUMED_SLIDER_RADIUS = 1.8

# Timing
MIN_DELTA_TIME = 25.0  # ms, floor for strain time
TERMINAL_NOTE_TIME = 200.0  # ms spent in the last object while "leaving" it

# Root finding
KINEMATIC_ROOT_TOLERANCE = 1e-4
SKILL_ROOT_TOLERANCE = 1e-8
ROOT_MAX_ITERATIONS = 100

# Probability that a player of the rated skill full combos the map
FC_PROBABILITY_THRESHOLD = 0.5

# Star rating is difficulty ** this, so the miss penalty uses it too
STAR_RATING_EXPONENT = 0.829842642

# Performance model
GREAT_HIT_WINDOW_BASE = 80.0
GREAT_HIT_WINDOW_PER_OD = 6.0
AIM_DEVIATION_SCALE = 50.0
SPEED_DEVIATION_SCALE = 20.0
HIDDEN_AR_BONUS = 0.04
HIDDEN_ACCURACY_BONUS = 1.08
ACCURACY_BASE = 90.0
ACCURACY_DEVIATION_SCALE = 7.5
SLIDER_COMBO_LENIENCY = 0.1
PERFORMANCE_MULTIPLIER = 1.0
