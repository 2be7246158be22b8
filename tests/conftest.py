"""Shared fixtures: an in-memory frame sink."""

from pathlib import Path

import numpy as np
import pytest

from mousetraj.errors import EncodingFailure


class MemorySink:
    """Frame sink that keeps frames in memory and mimics a partial file."""

    def __init__(self, fail_at: int | None = None) -> None:
        self.fail_at = fail_at
        self.frames: list[np.ndarray] = []
        self.path: Path | None = None
        self.size: tuple[int, int] | None = None
        self.fps: float | None = None
        self.finalized = 0
        self.aborted = 0

    def open(self, path: Path, width: int, height: int, fps: float) -> None:
        self.path = path
        self.size = (width, height)
        self.fps = fps
        path.write_bytes(b"")

    def write_frame(self, bitmap: np.ndarray) -> None:
        if self.fail_at is not None and len(self.frames) == self.fail_at:
            msg = "sink rejected frame"
            raise EncodingFailure(msg)
        self.frames.append(bitmap.copy())
        assert self.path is not None
        with self.path.open("ab") as fh:
            fh.write(b"f")

    def finalize(self) -> None:
        self.finalized += 1

    def abort(self) -> None:
        self.aborted += 1


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()
