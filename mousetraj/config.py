"""Configuration for mouse trajectory videos."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TimestampUnit(str, Enum):
    """Unit of the CSV timestamp column."""

    SECONDS = "s"
    """Epoch seconds (fractions allowed)."""

    MILLISECONDS = "ms"
    """Epoch milliseconds."""

    @property
    def seconds_per_unit(self) -> float:
        """Multiplier converting a raw timestamp to seconds."""
        return 1.0 if self is TimestampUnit.SECONDS else 1e-3


class DurationMode(str, Enum):
    """How long each period plays in the output video."""

    REAL_TIME = "real_time"
    """Period lasts its recorded duration divided by playback speed."""

    FIXED = "fixed"
    """Every period lasts ``period_duration`` seconds of video."""


class MouseVideoConfig(BaseModel):
    """Segmentation, pacing and rendering configuration."""

    model_config = ConfigDict(extra="forbid")

    gap_threshold: float = Field(default=5.0, gt=0)
    """Gap in seconds at which a new period starts."""

    timestamp_unit: TimestampUnit = TimestampUnit.SECONDS
    """Unit of the timestamp column in the input CSV."""

    fps: float = Field(default=25.0, gt=0)
    """Output video frame rate."""

    duration_mode: DurationMode = DurationMode.REAL_TIME
    """Period duration policy."""

    period_duration: float = Field(default=5.0, gt=0)
    """Video seconds per period in FIXED mode."""

    playback_speed: float = Field(default=1.0, gt=0)
    """Speed-up factor applied in REAL_TIME mode."""

    width: int = Field(default=600, gt=0)
    """Output frame width in pixels."""

    height: int = Field(default=450, gt=0)
    """Output frame height in pixels."""

    margin_ratio: float = Field(default=0.1, ge=0)
    """Fraction of the bounding-box span padded on each side."""

    min_span: float = Field(default=1.0, gt=0)
    """Smallest bounding-box span per axis, in raw units."""

    uniform_aspect: bool = False
    """Use one scale for both axes instead of stretching each."""

    flip_y: bool = False
    """Flip the y axis (for y-up coordinate sources)."""

    background_rgb: tuple[int, int, int] = (255, 255, 255)
    """Background color as (R, G, B) 0-255."""

    trail_color_rgb: tuple[int, int, int] = (0, 0, 0)
    """Color of the trail polyline."""

    trail_thickness: int = Field(default=2, gt=0)
    """Line thickness for the trail."""

    marker_radius: int = Field(default=6, gt=0)
    """Radius of the cursor marker."""

    marker_color_rgb: tuple[int, int, int] = (220, 40, 40)
    """Fill color of the cursor marker."""

    marker_edge_color_rgb: tuple[int, int, int] = (0, 0, 0)
    """Edge color of the cursor marker."""

    marker_edge_thickness: int = Field(default=1, ge=0)
    """Edge thickness of the cursor marker, 0 disables the edge."""

    glow_radius: int = Field(default=14, ge=0)
    """Radius of the glow circle behind the marker, 0 disables it."""

    glow_alpha: float = Field(default=0.25, ge=0, le=1)
    """Blend alpha for the marker glow."""

    grid_enabled: bool = False
    """Whether to draw a background grid."""

    grid_color_rgb: tuple[int, int, int] = (225, 225, 225)
    """Color for grid lines."""

    grid_divisions: int = Field(default=5, gt=0)
    """Number of grid divisions per axis."""

    label_enabled: bool = True
    """Draw the period number and local time in the bottom-left corner."""

    label_color_rgb: tuple[int, int, int] = (60, 60, 60)
    """Color of the label text."""

    label_scale: float = Field(default=0.5, gt=0)
    """Font scale of the label text."""

    title: str | None = None
    """Caption drawn in the top-left corner of every frame, e.g. the input key."""

    crf: int = Field(default=18, ge=0, le=51)
    """H.264 constant rate factor (lower = higher quality)."""

    render_workers: int = Field(default=1, gt=0)
    """Threads used to render frames; 1 renders inline."""
