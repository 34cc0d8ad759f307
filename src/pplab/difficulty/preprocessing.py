"""
Difficulty preprocessing.

Turns a parsed beatmap's hit objects into an immutable, indexable sequence
of HitObjectSample with strain times and jump distances normalized to the
circle radius, so every map is rated as if it used the same circle size.

The first hit object has nothing to jump from and produces no sample.
"""

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from pplab.core.config import PreprocessingConfig
from pplab.core.constants import (
    CIRCLE_RADIUS_BASE,
    CIRCLE_RADIUS_PER_CS,
    CIRCLE_SIZE_BUFF_THRESHOLD,
    HitObjectKind,
)
from pplab.core.errors import InvalidHitObjectError

logger = logging.getLogger(__name__)


# =============================================================================
# Input objects
# =============================================================================


@dataclass(frozen=True)
class HitObject:
    """A parsed gameplay object in playfield coordinates (osu!pixels, ms)."""

    start_time: float
    position: tuple[float, float]
    kind: HitObjectKind = HitObjectKind.CIRCLE
    # Where a lazily-played slider leaves the cursor
    end_position: tuple[float, float] | None = None
    # Where the slider tail actually is
    tail_position: tuple[float, float] | None = None
    # Ticks, repeats and tail of a slider
    nested_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, "kind", HitObjectKind(self.kind))
        if self.nested_count < 0:
            raise InvalidHitObjectError(f"nested_count must be non-negative, got {self.nested_count}")

    @property
    def lazy_end_position(self) -> tuple[float, float]:
        return self.position if self.end_position is None else self.end_position

    @property
    def tail(self) -> tuple[float, float]:
        return self.lazy_end_position if self.tail_position is None else self.tail_position


@dataclass(frozen=True)
class BeatmapDifficulty:
    """Difficulty settings of a map, after mods were applied."""

    circle_size: float = 5.0
    overall_difficulty: float = 5.0
    approach_rate: float = 5.0


@dataclass(frozen=True)
class Beatmap:
    """Hit objects of a map in time order plus its difficulty settings."""

    hit_objects: tuple[HitObject, ...]
    difficulty: BeatmapDifficulty = field(default_factory=BeatmapDifficulty)

    def __post_init__(self):
        object.__setattr__(self, "hit_objects", tuple(self.hit_objects))

    def count(self, kind: HitObjectKind) -> int:
        return sum(1 for obj in self.hit_objects if obj.kind == kind)

    @property
    def max_combo(self) -> int:
        """Combo of a perfect play: one per object plus one per slider nested object."""
        return sum(
            1 + (obj.nested_count if obj.kind == HitObjectKind.SLIDER else 0)
            for obj in self.hit_objects
        )


# =============================================================================
# Difficulty samples
# =============================================================================


@dataclass(frozen=True)
class HitObjectSample:
    """
    One hit object as seen by the difficulty evaluators.

    Distances are in circle radii: a lazy jump distance of 1 means the
    previous cursor position lies on the edge of this object.
    """

    index: int
    kind: HitObjectKind
    start_time: float
    delta_time: float
    strain_time: float
    lazy_jump_distance: float = 0.0
    minimum_jump_distance: float = 0.0

    def __post_init__(self):
        if not self.strain_time > 0:
            raise InvalidHitObjectError(
                f"Object {self.index}: strain_time must be positive, got {self.strain_time}"
            )
        if self.lazy_jump_distance < 0:
            raise InvalidHitObjectError(
                f"Object {self.index}: lazy_jump_distance must be non-negative, "
                f"got {self.lazy_jump_distance}"
            )
        if self.minimum_jump_distance < 0:
            raise InvalidHitObjectError(
                f"Object {self.index}: minimum_jump_distance must be non-negative, "
                f"got {self.minimum_jump_distance}"
            )

    @property
    def is_spinner(self) -> bool:
        return self.kind == HitObjectKind.SPINNER


class DifficultyObjectSequence(Sequence[HitObjectSample]):
    """
    Read-only sequence of samples with bounds-checked neighbor lookup.

    Samples must be stored in order with sample.index equal to its position.
    """

    def __init__(self, samples: Sequence[HitObjectSample] = ()):
        self._samples = tuple(samples)
        for position, sample in enumerate(self._samples):
            if sample.index != position:
                raise InvalidHitObjectError(
                    f"Sample at position {position} has index {sample.index}"
                )

    def __getitem__(self, index):
        return self._samples[index]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[HitObjectSample]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return f"DifficultyObjectSequence({len(self._samples)} samples)"

    def _at(self, index: int) -> HitObjectSample | None:
        if 0 <= index < len(self._samples):
            return self._samples[index]
        return None

    def next(self, current: HitObjectSample, offset: int = 0) -> HitObjectSample | None:
        """The sample offset + 1 positions after current, or None past the end."""
        return self._at(current.index + offset + 1)

    def previous(self, current: HitObjectSample, offset: int = 0) -> HitObjectSample | None:
        """The sample offset + 1 positions before current, or None before the start."""
        return self._at(current.index - (offset + 1))


# =============================================================================
# Preprocessing
# =============================================================================


def circle_radius(circle_size: float) -> float:
    """Circle radius in osu!pixels for a circle size."""
    return CIRCLE_RADIUS_BASE - CIRCLE_RADIUS_PER_CS * circle_size


def scaling_factor(circle_size: float) -> float:
    """Factor converting osu!pixels into circle radii, with the small circle buff."""
    radius = circle_radius(circle_size)
    if radius <= 0:
        raise InvalidHitObjectError(f"Circle size {circle_size} gives a non-positive radius")

    factor = 1.0 / radius
    if radius < CIRCLE_SIZE_BUFF_THRESHOLD:
        factor *= 1.0 + min(CIRCLE_SIZE_BUFF_THRESHOLD - radius, 5.0) / 50.0
    return factor


def _distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def create_difficulty_objects(
    hit_objects: Sequence[HitObject],
    circle_size: float,
    clock_rate: float = 1.0,
    config: PreprocessingConfig | None = None,
) -> DifficultyObjectSequence:
    """
    Build difficulty samples for every hit object after the first.

    Args:
        hit_objects: Objects ordered by start time
        circle_size: Circle size of the map, after mods
        clock_rate: Playback rate (1.5 for double time)
        config: Preprocessing settings

    Returns:
        DifficultyObjectSequence with len(hit_objects) - 1 samples
    """
    config = config or PreprocessingConfig()
    if clock_rate <= 0:
        raise InvalidHitObjectError(f"clock_rate must be positive, got {clock_rate}")

    scale = scaling_factor(circle_size)
    samples: list[HitObjectSample] = []

    for i in range(1, len(hit_objects)):
        last = hit_objects[i - 1]
        current = hit_objects[i]

        if current.start_time < last.start_time:
            raise InvalidHitObjectError(
                f"Hit objects are not in time order at object {i}: "
                f"{current.start_time} < {last.start_time}"
            )

        delta_time = (current.start_time - last.start_time) / clock_rate
        strain_time = max(delta_time, config.min_delta_time)

        lazy_jump_distance = 0.0
        minimum_jump_distance = 0.0

        if current.kind != HitObjectKind.SPINNER and last.kind != HitObjectKind.SPINNER:
            lazy_jump_distance = _distance(current.position, last.lazy_end_position) * scale
            minimum_jump_distance = lazy_jump_distance

            if last.kind == HitObjectKind.SLIDER:
                # A player may leave the slider early anywhere inside the follow circle
                tail_jump_distance = _distance(last.tail, current.position) * scale
                minimum_jump_distance = max(
                    0.0,
                    min(
                        lazy_jump_distance
                        - (config.maximum_slider_radius - config.assumed_slider_radius),
                        tail_jump_distance - config.maximum_slider_radius,
                    ),
                )

        samples.append(
            HitObjectSample(
                index=i - 1,
                kind=current.kind,
                start_time=current.start_time / clock_rate,
                delta_time=delta_time,
                strain_time=strain_time,
                lazy_jump_distance=lazy_jump_distance,
                minimum_jump_distance=minimum_jump_distance,
            )
        )

    logger.debug(f"Created {len(samples)} difficulty samples from {len(hit_objects)} hit objects")
    return DifficultyObjectSequence(samples)
