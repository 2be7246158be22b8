"""Frame pacing and cursor interpolation within a period."""

import math
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from beartype import beartype
from jaxtyping import Float, jaxtyped

from mousetraj.config import DurationMode, MouseVideoConfig
from mousetraj.projection import NormalizedPeriod

# Absorbs float noise such as 2.0000000000000004 frames
_COUNT_EPS = 1e-9
# Floor for the sample-time matching tolerance, in seconds
_TIME_EPS = 1e-9


@dataclass(frozen=True)
class Frame:
    """Everything needed to draw one video frame."""

    period_index: int
    frame_index: int
    local_time: float
    """Seconds since the period's first sample, in recorded time."""

    cursor_pos: tuple[float, float]
    """Interpolated cursor position in canvas pixels."""

    trail: Float[np.ndarray, "k 2"]
    """Canvas positions of the samples at or before ``local_time``."""


def video_duration(
    period_duration: float, config: MouseVideoConfig
) -> float:
    """Seconds of video spent on a period of the given recorded duration."""
    if period_duration <= 0:
        return 0.0
    if config.duration_mode is DurationMode.FIXED:
        return config.period_duration
    return period_duration / config.playback_speed


def frame_count(duration: float, fps: float) -> int:
    """Number of frames for ``duration`` seconds of video, at least one."""
    if duration <= 0:
        return 1
    return max(1, math.ceil(duration * fps - _COUNT_EPS))


def frame_times(
    period_duration: float, config: MouseVideoConfig
) -> Float[np.ndarray, " m"]:
    """Recorded-time offsets (from period start) of every frame.

    Each frame shows the state at the end of its ``1/fps`` interval of
    video time, so the last frame always lands on the last sample.
    """
    span = video_duration(period_duration, config)
    n = frame_count(span, config.fps)
    if span <= 0:
        return np.zeros(1, dtype=np.float64)
    video_t = np.minimum(np.arange(1, n + 1, dtype=np.float64) / config.fps, span)
    offsets = video_t * (period_duration / span)
    offsets[-1] = period_duration
    return offsets


@jaxtyped(typechecker=beartype)
def position_at(
    times: Float[np.ndarray, " n"],
    positions: Float[np.ndarray, "n 2"],
    t: float,
    tol: float = 0.0,
) -> tuple[float, float]:
    """Linearly interpolate a position between the bracketing samples.

    Times outside the sample range clamp to the first or last
    position. At a sample timestamp the sample's own position is
    returned (the last one when timestamps tie).

    Args:
        times: Sorted sample timestamps with shape (n,).
        positions: Positions with shape (n, 2).
        t: Query time on the same clock as ``times``.
        tol: Samples up to ``tol`` after ``t`` count as reached.

    Returns:
        Interpolated (x, y).

    """
    idx = int(np.searchsorted(times, t + tol, side="right"))
    if idx == 0:
        return float(positions[0, 0]), float(positions[0, 1])
    if idx >= len(times):
        return float(positions[-1, 0]), float(positions[-1, 1])

    t0, t1 = times[idx - 1], times[idx]
    alpha = min(max((t - t0) / (t1 - t0), 0.0), 1.0)
    p = positions[idx - 1] + alpha * (positions[idx] - positions[idx - 1])
    return float(p[0]), float(p[1])


def time_tolerance(times: Float[np.ndarray, " n"]) -> float:
    """Matching tolerance for frame times against sample timestamps.

    Epoch-second timestamps carry rounding of a few 1e-7 s, so a frame
    that falls on a sample in exact arithmetic can land an ulp short.
    """
    magnitude = float(np.max(np.abs(times))) if len(times) else 0.0
    return max(_TIME_EPS, 4.0 * float(np.spacing(magnitude)))


def schedule_frames(
    normalized: NormalizedPeriod, config: MouseVideoConfig
) -> Iterator[Frame]:
    """Lazily yield the frames of one period in order.

    Args:
        normalized: Period with its canvas positions.
        config: Pacing configuration (``fps``, ``duration_mode``,
            ``period_duration``, ``playback_speed``).

    Yields:
        Frames with monotonically growing trails.

    """
    period = normalized.period
    # Period-local clock; the last local time equals period.duration
    local_times = period.times - period.start
    tol = time_tolerance(period.times)
    canvas = normalized.canvas_positions

    offsets = frame_times(period.duration, config)
    for k, offset in enumerate(offsets):
        t = float(offset)
        n_visible = int(np.searchsorted(local_times, t + tol, side="right"))
        yield Frame(
            period_index=period.index,
            frame_index=k,
            local_time=t,
            cursor_pos=position_at(local_times, canvas, t, tol),
            trail=canvas[:n_visible].copy(),
        )
