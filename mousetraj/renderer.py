"""Frame rendering using OpenCV drawing primitives."""

from collections import deque
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor

import cv2
import numpy as np
from beartype import beartype
from jaxtyping import Float, Int, UInt8, jaxtyped

from mousetraj.config import MouseVideoConfig
from mousetraj.schedule import Frame

# Fractional bits for sub-pixel drawing (cv2 ``shift`` argument)
SHIFT = 4
_ONE = 1 << SHIFT


@jaxtyped(typechecker=beartype)
def _to_fixed(points: Float[np.ndarray, "n 2"]) -> Int[np.ndarray, "n 2"]:
    """Convert float pixel coordinates to cv2 fixed-point."""
    return np.round(points * _ONE).astype(np.int32)


def _draw_grid(
    canvas: UInt8[np.ndarray, "h w 3"], config: MouseVideoConfig
) -> None:
    h, w = canvas.shape[:2]
    divs = config.grid_divisions
    for k in range(1, divs):
        x = int(w * k / divs)
        y = int(h * k / divs)
        cv2.line(canvas, (x, 0), (x, h), config.grid_color_rgb, 1, cv2.LINE_AA)
        cv2.line(canvas, (0, y), (w, y), config.grid_color_rgb, 1, cv2.LINE_AA)


@jaxtyped(typechecker=beartype)
def render_frame(
    frame: Frame, config: MouseVideoConfig
) -> UInt8[np.ndarray, "h w 3"]:
    """Render one frame as an RGB uint8 array.

    Each frame shows:
    1. Background fill
    2. Grid lines (optional)
    3. Trail polyline from the first sample to the cursor
    4. Glow circle behind the cursor
    5. Cursor marker with edge
    6. Period/time label (optional)
    7. Title caption (when ``config.title`` is set)

    The result depends only on ``frame`` and ``config``, so frames may
    be rendered concurrently.

    Args:
        frame: Frame descriptor in canvas coordinates.
        config: Rendering configuration.

    Returns:
        RGB frame with shape (height, width, 3).

    """
    h, w = config.height, config.width
    canvas = np.empty((h, w, 3), dtype=np.uint8)
    canvas[:] = np.array(config.background_rgb, dtype=np.uint8)

    if config.grid_enabled:
        _draw_grid(canvas, config)

    cursor = np.array([frame.cursor_pos], dtype=np.float64)
    path = _to_fixed(np.vstack([frame.trail, cursor]))
    if len(path) > 1:
        cv2.polylines(
            canvas,
            [path.reshape(-1, 1, 2)],
            isClosed=False,
            color=config.trail_color_rgb,
            thickness=config.trail_thickness,
            lineType=cv2.LINE_AA,
            shift=SHIFT,
        )

    center = tuple(path[-1].tolist())

    if config.glow_radius > 0 and config.glow_alpha > 0:
        overlay = canvas.copy()
        cv2.circle(
            overlay,
            center,
            config.glow_radius * _ONE,
            config.marker_color_rgb,
            -1,
            cv2.LINE_AA,
            SHIFT,
        )
        cv2.addWeighted(
            overlay,
            config.glow_alpha,
            canvas,
            1.0 - config.glow_alpha,
            0.0,
            canvas,
        )

    cv2.circle(
        canvas,
        center,
        config.marker_radius * _ONE,
        config.marker_color_rgb,
        -1,
        cv2.LINE_AA,
        SHIFT,
    )
    if config.marker_edge_thickness > 0:
        cv2.circle(
            canvas,
            center,
            config.marker_radius * _ONE,
            config.marker_edge_color_rgb,
            config.marker_edge_thickness,
            cv2.LINE_AA,
            SHIFT,
        )

    if config.label_enabled:
        cv2.putText(
            canvas,
            f"period {frame.period_index + 1}  t={frame.local_time:.2f}s",
            (10, h - 10),
            cv2.FONT_HERSHEY_SIMPLEX,
            config.label_scale,
            config.label_color_rgb,
            1,
            cv2.LINE_AA,
        )

    if config.title:
        cv2.putText(
            canvas,
            config.title,
            (10, 20),
            cv2.FONT_HERSHEY_SIMPLEX,
            config.label_scale,
            config.label_color_rgb,
            1,
            cv2.LINE_AA,
        )

    return canvas


def render_frames(
    frames: Iterable[Frame],
    config: MouseVideoConfig,
    workers: int = 1,
) -> Iterator[tuple[Frame, UInt8[np.ndarray, "h w 3"]]]:
    """Render frames in order, optionally on a thread pool.

    With ``workers > 1`` up to ``2 * workers`` frames are in flight;
    results are still yielded in the order the frames arrive.

    Args:
        frames: Frame descriptors in output order.
        config: Rendering configuration.
        workers: Number of render threads.

    Yields:
        Each frame with its RGB bitmap of shape (height, width, 3).

    """
    if workers <= 1:
        for frame in frames:
            yield frame, render_frame(frame, config)
        return

    window = 2 * workers
    with ThreadPoolExecutor(max_workers=workers) as pool:
        pending: deque[tuple[Frame, Future[np.ndarray]]] = deque()
        for frame in frames:
            pending.append((frame, pool.submit(render_frame, frame, config)))
            if len(pending) >= window:
                done, future = pending.popleft()
                yield done, future.result()
        while pending:
            done, future = pending.popleft()
            yield done, future.result()
