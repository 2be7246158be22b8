"""Command-line entrypoint for mousetraj."""

import argparse
import sys
from importlib import metadata
from pathlib import Path

from difflogtest import get_logger
from pydantic import ValidationError

from mousetraj.config import DurationMode, MouseVideoConfig, TimestampUnit
from mousetraj.errors import MouseTrajError
from mousetraj.pipeline import run
from mousetraj.retrieval import (
    ByteSource,
    ChainedSource,
    LocalDirectorySource,
    S3Source,
)

logger = get_logger()

# CLI flag destination -> MouseVideoConfig field
_CONFIG_FLAGS = {
    "fps": "fps",
    "width": "width",
    "height": "height",
    "gap": "gap_threshold",
    "timestamp_unit": "timestamp_unit",
    "duration_mode": "duration_mode",
    "period_duration": "period_duration",
    "speed": "playback_speed",
    "margin_ratio": "margin_ratio",
    "min_span": "min_span",
    "uniform_aspect": "uniform_aspect",
    "flip_y": "flip_y",
    "workers": "render_workers",
    "crf": "crf",
    "title": "title",
}


def _package_version() -> str:
    try:
        return metadata.version("mousetraj")
    except metadata.PackageNotFoundError:
        return "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mousetraj",
        description=(
            "Render recorded mouse-pointer trajectories (timestamp,x,y CSV) "
            "to a video, one animated segment per activity period."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "key",
        help="Input key: a CSV path, or a name looked up as "
        "<input-dir>/<key>.csv and then in the S3 bucket.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"mousetraj {_package_version()}",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output video path (default: <output-dir>/<key>_traj.mp4).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data"),
        help="Directory for the default output path.",
    )
    parser.add_argument(
        "-i",
        "--input-dir",
        type=Path,
        default=Path("input"),
        help="Local directory searched before the object store.",
    )
    parser.add_argument(
        "--bucket",
        default=None,
        help="S3 bucket to fetch from when the key is not found locally.",
    )
    parser.add_argument(
        "--key-template",
        default="{key}.csv",
        help="S3 object key template; {key} is replaced by the input key.",
    )
    parser.add_argument(
        "--region", default=None, help="AWS region for the S3 client."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with MouseVideoConfig fields; flags override it.",
    )
    parser.add_argument("--fps", type=float, default=None, help="Frame rate.")
    parser.add_argument("--width", type=int, default=None, help="Canvas width.")
    parser.add_argument(
        "--height", type=int, default=None, help="Canvas height."
    )
    parser.add_argument(
        "--gap",
        type=float,
        default=None,
        help="Gap threshold in seconds that starts a new period.",
    )
    parser.add_argument(
        "--timestamp-unit",
        choices=[unit.value for unit in TimestampUnit],
        default=None,
        help="Unit of the timestamp column.",
    )
    parser.add_argument(
        "--duration-mode",
        choices=[mode.value for mode in DurationMode],
        default=None,
        help="Per-period video duration: recorded time or fixed.",
    )
    parser.add_argument(
        "--period-duration",
        type=float,
        default=None,
        help="Seconds of video per period in fixed mode.",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Playback speed-up in real_time mode.",
    )
    parser.add_argument(
        "--margin-ratio",
        type=float,
        default=None,
        help="Bounding-box padding per side as a fraction of the span.",
    )
    parser.add_argument(
        "--min-span",
        type=float,
        default=None,
        help="Minimum bounding-box span per axis in input units.",
    )
    parser.add_argument(
        "--uniform-aspect",
        action="store_true",
        default=None,
        help="Scale both axes equally.",
    )
    parser.add_argument(
        "--flip-y",
        action="store_true",
        default=None,
        help="Treat y as pointing up.",
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Render threads."
    )
    parser.add_argument(
        "--crf", type=int, default=None, help="H.264 constant rate factor."
    )
    parser.add_argument(
        "--title",
        default=None,
        help="Caption drawn on every frame (default: the key's stem; "
        "pass an empty string to hide it).",
    )
    return parser


def build_config(args: argparse.Namespace) -> MouseVideoConfig:
    """Load ``--config`` (if any) and apply flag overrides."""
    data: dict = {}
    if args.config is not None:
        data = MouseVideoConfig.model_validate_json(
            args.config.read_text()
        ).model_dump()
    for flag, field in _CONFIG_FLAGS.items():
        value = getattr(args, flag)
        if value is not None:
            data[field] = value
    if data.get("title") is None:
        data["title"] = Path(args.key).stem
    return MouseVideoConfig.model_validate(data)


def build_source(args: argparse.Namespace) -> ByteSource:
    sources: list[ByteSource] = [LocalDirectorySource(args.input_dir)]
    if args.bucket:
        sources.append(
            S3Source(args.bucket, args.key_template, region=args.region)
        )
    return ChainedSource(sources)


def default_output(args: argparse.Namespace) -> Path:
    if args.output is not None:
        return args.output
    return args.output_dir / f"{Path(args.key).stem}_traj.mp4"


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = build_config(args)
    except (ValidationError, OSError) as exc:
        logger.error(f"error [config]: {exc}")
        return 1

    try:
        summary = run(args.key, build_source(args), default_output(args), config)
    except MouseTrajError as exc:
        logger.error(f"error [{exc.stage}]: {exc}")
        return 1

    logger.info(
        f"{summary.n_periods} periods, {summary.n_frames} frames "
        f"-> {summary.output_path}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
