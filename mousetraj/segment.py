"""Temporal segmentation of samples into activity periods."""

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property

import numpy as np
from jaxtyping import Float

from mousetraj.records import Sample


@dataclass(frozen=True)
class Period:
    """A maximal run of samples with no gap reaching the threshold."""

    index: int
    """Chronological position among all periods, from 0."""

    samples: tuple[Sample, ...]
    """Samples in timestamp order (never empty)."""

    @property
    def start(self) -> float:
        return self.samples[0].timestamp

    @property
    def end(self) -> float:
        return self.samples[-1].timestamp

    @property
    def duration(self) -> float:
        return self.end - self.start

    @cached_property
    def times(self) -> Float[np.ndarray, " n"]:
        return np.array([s.timestamp for s in self.samples], dtype=np.float64)

    @cached_property
    def positions(self) -> Float[np.ndarray, "n 2"]:
        return np.array(
            [(s.x, s.y) for s in self.samples], dtype=np.float64
        ).reshape(-1, 2)


def segment_periods(
    samples: Sequence[Sample],
    gap_threshold: float,
) -> list[Period]:
    """Split time-sorted samples wherever consecutive gaps reach a threshold.

    Consecutive samples less than ``gap_threshold`` apart share a
    period; a gap of ``gap_threshold`` or more starts a new one.

    Args:
        samples: Samples sorted by timestamp.
        gap_threshold: Gap in seconds that separates periods.

    Returns:
        Periods in chronological order; empty when ``samples`` is.

    Raises:
        ValueError: If ``gap_threshold`` is not positive.

    """
    if gap_threshold <= 0:
        msg = f"gap_threshold must be positive, got {gap_threshold}"
        raise ValueError(msg)

    periods: list[Period] = []
    current: list[Sample] = []
    for sample in samples:
        if current and sample.timestamp - current[-1].timestamp >= gap_threshold:
            periods.append(Period(len(periods), tuple(current)))
            current = []
        current.append(sample)
    if current:
        periods.append(Period(len(periods), tuple(current)))
    return periods
