"""End-to-end pipeline: bytes -> periods -> frames -> video."""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from difflogtest import get_logger

from mousetraj.config import MouseVideoConfig
from mousetraj.errors import NoTrajectoryData
from mousetraj.projection import NormalizedPeriod, normalize_period
from mousetraj.records import parse_samples
from mousetraj.renderer import render_frames
from mousetraj.retrieval import ByteSource
from mousetraj.schedule import (
    Frame,
    frame_count,
    schedule_frames,
    video_duration,
)
from mousetraj.segment import segment_periods
from mousetraj.video import FfmpegSink, FrameSink, VideoAssembler

logger = get_logger()


@dataclass(frozen=True)
class RenderSummary:
    """What a completed run produced."""

    output_path: Path
    n_samples: int
    n_periods: int
    n_frames: int


def load_periods(
    data: bytes, config: MouseVideoConfig
) -> list[NormalizedPeriod]:
    """Parse, segment and normalize a CSV payload.

    Raises:
        ParseError: If the payload is malformed or has no data rows.
        NoTrajectoryData: If segmentation yields no periods.

    """
    samples = parse_samples(data, config.timestamp_unit)
    periods = segment_periods(samples, config.gap_threshold)
    if not periods:
        msg = "no trajectory periods found"
        raise NoTrajectoryData(msg)
    logger.info(
        f"Parsed {len(samples)} samples into {len(periods)} periods "
        f"(gap >= {config.gap_threshold:g}s)"
    )
    return [normalize_period(period, config) for period in periods]


def iter_frames(
    periods: list[NormalizedPeriod], config: MouseVideoConfig
) -> Iterator[Frame]:
    """All frames of all periods in chronological order."""
    for normalized in periods:
        yield from schedule_frames(normalized, config)


def render_video(
    data: bytes,
    output_path: str | Path,
    config: MouseVideoConfig | None = None,
    sink: FrameSink | None = None,
) -> RenderSummary:
    """Render a CSV payload of pointer samples to a video file.

    Nothing is written unless parsing and segmentation succeed, and
    the output only appears once the encoder has finalized.

    Args:
        data: Raw CSV bytes.
        output_path: Destination video path.
        config: Configuration (uses defaults if None).
        sink: Frame sink (an ffmpeg encoder if None).

    Returns:
        Summary of the written video.

    """
    if config is None:
        config = MouseVideoConfig()
    if sink is None:
        sink = FfmpegSink(crf=config.crf)

    periods = load_periods(data, config)
    n_samples = sum(len(p.period.samples) for p in periods)
    total = sum(
        frame_count(video_duration(p.period.duration, config), config.fps)
        for p in periods
    )
    logger.info(f"Rendering {total} frames to {output_path}")

    with VideoAssembler(
        output_path, config.width, config.height, config.fps, sink
    ) as assembler:
        for normalized in logger.track(periods, description="Rendering periods"):
            for frame, bitmap in render_frames(
                schedule_frames(normalized, config),
                config,
                workers=config.render_workers,
            ):
                assembler.write_frame(
                    bitmap, (frame.period_index, frame.frame_index)
                )

    return RenderSummary(
        output_path=Path(output_path),
        n_samples=n_samples,
        n_periods=len(periods),
        n_frames=assembler.frames_written,
    )


def run(
    key: str,
    source: ByteSource,
    output_path: str | Path,
    config: MouseVideoConfig | None = None,
    sink: FrameSink | None = None,
) -> RenderSummary:
    """Fetch ``key`` from ``source`` and render it to ``output_path``."""
    data = source.fetch(key)
    return render_video(data, output_path, config, sink)
