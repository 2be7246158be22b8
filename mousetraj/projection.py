"""Per-period mapping from raw pointer coordinates to canvas pixels."""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from jaxtyping import Float, jaxtyped

from mousetraj.config import MouseVideoConfig
from mousetraj.segment import Period


@dataclass(frozen=True)
class CanvasTransform:
    """Affine map ``canvas = raw * scale + offset`` per axis."""

    scale_x: float
    scale_y: float
    offset_x: float
    offset_y: float
    width: int
    height: int

    @jaxtyped(typechecker=beartype)
    def apply(
        self, positions: Float[np.ndarray, "n 2"]
    ) -> Float[np.ndarray, "n 2"]:
        """Map raw positions to canvas pixels, clipped to the canvas.

        Args:
            positions: Raw (x, y) positions with shape (n, 2).

        Returns:
            Canvas positions in ``[0, width-1] x [0, height-1]``.

        """
        out = np.empty(positions.shape, dtype=np.float64)
        out[:, 0] = positions[:, 0] * self.scale_x + self.offset_x
        out[:, 1] = positions[:, 1] * self.scale_y + self.offset_y
        # Clip away floating-point overshoot at the bounding-box edges
        np.clip(out[:, 0], 0.0, self.width - 1, out=out[:, 0])
        np.clip(out[:, 1], 0.0, self.height - 1, out=out[:, 1])
        return out


@jaxtyped(typechecker=beartype)
def fit_transform(
    positions: Float[np.ndarray, "n 2"],
    width: int,
    height: int,
    margin_ratio: float,
    min_span: float,
    uniform_aspect: bool = False,
    flip_y: bool = False,
) -> CanvasTransform:
    """Fit a transform placing the positions' bounding box on the canvas.

    The bounding box span is floored at ``min_span`` per axis (centered
    on the data) so single points and straight lines do not zoom to
    infinity, then padded by ``margin_ratio * span`` on each side and
    mapped onto pixel centers ``[0, width-1] x [0, height-1]``.

    Args:
        positions: Raw (x, y) positions with shape (n, 2), n >= 1.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin_ratio: Padding per side as a fraction of the span.
        min_span: Minimum span per axis in raw units.
        uniform_aspect: Use the smaller of the two scales on both axes.
        flip_y: Map larger raw y to smaller canvas y.

    Returns:
        The fitted transform.

    """
    lo = positions.min(axis=0)
    hi = positions.max(axis=0)
    center = (lo + hi) / 2.0
    span = np.maximum(hi - lo, min_span)
    extent = span * (1.0 + 2.0 * margin_ratio)

    usable = np.array([max(width - 1, 1), max(height - 1, 1)], dtype=np.float64)
    scale = usable / extent
    if uniform_aspect:
        scale[:] = scale.min()

    sx = float(scale[0])
    sy = -float(scale[1]) if flip_y else float(scale[1])
    return CanvasTransform(
        scale_x=sx,
        scale_y=sy,
        offset_x=(width - 1) / 2.0 - sx * float(center[0]),
        offset_y=(height - 1) / 2.0 - sy * float(center[1]),
        width=width,
        height=height,
    )


@dataclass(frozen=True)
class NormalizedPeriod:
    """A period together with its canvas transform."""

    period: Period
    transform: CanvasTransform
    canvas_positions: Float[np.ndarray, "n 2"]


def normalize_period(
    period: Period, config: MouseVideoConfig
) -> NormalizedPeriod:
    """Fit an independent canvas transform for one period."""
    transform = fit_transform(
        period.positions,
        config.width,
        config.height,
        config.margin_ratio,
        config.min_span,
        uniform_aspect=config.uniform_aspect,
        flip_y=config.flip_y,
    )
    return NormalizedPeriod(
        period=period,
        transform=transform,
        canvas_positions=transform.apply(period.positions),
    )
