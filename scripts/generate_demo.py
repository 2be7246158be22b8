"""Generate a demo mouse trajectory video for README."""

import numpy as np

from mousetraj import MouseVideoConfig, render_video


def main() -> None:
    """Render two synthetic activity periods to assets/demo.mp4."""
    rows = ["t,x,y"]

    # Period 1: a spiral around the screen center
    t = np.linspace(0, 4 * np.pi, 120)
    for i, angle in enumerate(t):
        radius = 40 + 20 * angle
        rows.append(
            f"{i * 0.05:.3f},{960 + radius * np.cos(angle):.1f},"
            f"{540 + radius * np.sin(angle):.1f}"
        )

    # Period 2: a zig-zag in the top-left corner after a 30 s pause
    for i in range(60):
        rows.append(f"{36.0 + i * 0.05:.3f},{50 + 5 * i:.1f},{100 + 40 * (i % 2):.1f}")

    config = MouseVideoConfig(
        gap_threshold=5.0,
        fps=30,
        width=480,
        height=360,
        grid_enabled=True,
        uniform_aspect=True,
    )
    render_video("\n".join(rows).encode(), "assets/demo.mp4", config)


if __name__ == "__main__":
    main()
