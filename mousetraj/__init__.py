"""Mouse trajectory video renderer using NumPy + OpenCV."""

from mousetraj.config import DurationMode, MouseVideoConfig, TimestampUnit
from mousetraj.errors import (
    AccessDenied,
    EmptyInput,
    EncodingFailure,
    MalformedRecord,
    MouseTrajError,
    NetworkError,
    NoTrajectoryData,
    NotFound,
    ParseError,
    RetrievalError,
)
from mousetraj.pipeline import RenderSummary, render_video, run

__all__ = [
    "AccessDenied",
    "DurationMode",
    "EmptyInput",
    "EncodingFailure",
    "MalformedRecord",
    "MouseTrajError",
    "MouseVideoConfig",
    "NetworkError",
    "NoTrajectoryData",
    "NotFound",
    "ParseError",
    "RenderSummary",
    "RetrievalError",
    "TimestampUnit",
    "render_video",
    "run",
]
