"""
Data Models for PPLab

Value objects that cross the boundary between difficulty calculation,
score collection and performance calculation:
- DifficultyAttributes: one per map, independent of any score
- ScoreStatistics: one per graded play
- PerformanceAttributes: one per (map, score) calculation

All of them are frozen; a calculation never modifies its inputs.
"""

from dataclasses import dataclass, field

from pplab.core.constants import HIT_RESULT_POINTS, HitResult, Mod
from pplab.core.errors import InvalidScoreError


def parse_mods(acronyms: str) -> frozenset[Mod]:
    """
    Parse a concatenated acronym string such as "HDDT" into a set of mods.

    Args:
        acronyms: Two-letter mod acronyms, optionally separated by
            spaces, commas or plus signs. Empty string means no mods.

    Returns:
        Frozen set of Mod members

    Raises:
        ValueError: An acronym is not a known mod
    """
    cleaned = "".join(ch for ch in acronyms.upper() if ch.isalpha())
    if cleaned in ("", "NM", "NOMOD"):
        return frozenset()
    if len(cleaned) % 2 != 0:
        raise ValueError(f"Mod string has a dangling character: {acronyms!r}")

    mods = set()
    for i in range(0, len(cleaned), 2):
        acronym = cleaned[i : i + 2]
        try:
            mods.add(Mod(acronym))
        except ValueError:
            raise ValueError(f"Unknown mod acronym: {acronym}") from None
    return frozenset(mods)


def calculate_accuracy(count_great: int, count_ok: int, count_meh: int, count_miss: int) -> float:
    """Accuracy in [0, 1] from judgement counts; 0 when nothing was judged."""
    total = count_great + count_ok + count_meh + count_miss
    if total == 0:
        return 0.0

    points = (
        HIT_RESULT_POINTS[HitResult.GREAT] * count_great
        + HIT_RESULT_POINTS[HitResult.OK] * count_ok
        + HIT_RESULT_POINTS[HitResult.MEH] * count_meh
    )
    return points / (HIT_RESULT_POINTS[HitResult.GREAT] * total)


# =============================================================================
# Difficulty
# =============================================================================


@dataclass(frozen=True)
class DifficultyAttributes:
    """Aggregated difficulty of a map."""

    aim_difficulty: float
    speed_difficulty: float
    flashlight_difficulty: float
    overall_difficulty: float  # accuracy proxy
    approach_rate: float
    hit_circle_count: int
    slider_count: int
    max_combo: int
    spinner_count: int = 0

    @property
    def object_count(self) -> int:
        return self.hit_circle_count + self.slider_count + self.spinner_count


# =============================================================================
# Score
# =============================================================================


@dataclass(frozen=True)
class ScoreStatistics:
    """Judgement statistics and active mods of one play."""

    accuracy: float
    max_combo: int
    count_great: int = 0
    count_ok: int = 0
    count_meh: int = 0
    count_miss: int = 0
    mods: frozenset[Mod] = field(default_factory=frozenset)

    def __post_init__(self):
        counts = {
            "max_combo": self.max_combo,
            "count_great": self.count_great,
            "count_ok": self.count_ok,
            "count_meh": self.count_meh,
            "count_miss": self.count_miss,
        }
        for name, value in counts.items():
            if value < 0:
                raise InvalidScoreError(f"{name} must be non-negative, got {value}")

        if not 0.0 <= self.accuracy <= 1.0:
            raise InvalidScoreError(f"accuracy must be within [0, 1], got {self.accuracy}")

        # Accept any iterable of mods or acronyms
        object.__setattr__(self, "mods", frozenset(Mod(m) for m in self.mods))

    @classmethod
    def from_counts(
        cls,
        max_combo: int,
        count_great: int = 0,
        count_ok: int = 0,
        count_meh: int = 0,
        count_miss: int = 0,
        mods: frozenset[Mod] | str = frozenset(),
        accuracy: float | None = None,
    ) -> "ScoreStatistics":
        """
        Build statistics from judgement counts.

        Accuracy is derived from the counts unless given explicitly, and mods
        may be passed as an acronym string ("HDFL").
        """
        if isinstance(mods, str):
            mods = parse_mods(mods)
        if accuracy is None:
            accuracy = calculate_accuracy(count_great, count_ok, count_meh, count_miss)

        return cls(
            accuracy=accuracy,
            max_combo=max_combo,
            count_great=count_great,
            count_ok=count_ok,
            count_meh=count_meh,
            count_miss=count_miss,
            mods=mods,
        )

    def has_mod(self, mod: Mod) -> bool:
        """Whether the given mod was active during the play."""
        return mod in self.mods

    @property
    def total_hits(self) -> int:
        return self.count_great + self.count_ok + self.count_meh + self.count_miss

    @property
    def total_successful_hits(self) -> int:
        return self.count_great + self.count_ok + self.count_meh


# =============================================================================
# Performance
# =============================================================================


@dataclass(frozen=True)
class PerformanceAttributes:
    """Performance value of a play, split by skill dimension."""

    aim: float
    speed: float
    accuracy: float
    flashlight: float
    effective_miss_count: float
    total: float
    deviation: float | None = None  # estimated timing deviation in ms
