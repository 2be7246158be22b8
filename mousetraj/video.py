"""Ordered frame assembly and FFmpeg-based video output via stdin pipe."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import IO, Protocol

import numpy as np
from difflogtest import get_logger

from mousetraj.errors import EncodingFailure

logger = get_logger()


class FrameSink(Protocol):
    """Encoder that consumes raw RGB frames and commits on finalize."""

    def open(self, path: Path, width: int, height: int, fps: float) -> None:
        """Start a stream of ``width x height`` frames written to ``path``."""
        ...

    def write_frame(self, bitmap: np.ndarray) -> None:
        """Append one (height, width, 3) uint8 frame."""
        ...

    def finalize(self) -> None:
        """Flush and close the stream; raise EncodingFailure on error."""
        ...

    def abort(self) -> None:
        """Stop without producing a valid stream."""
        ...


def _encoder_args(path: Path, crf: int) -> list[str]:
    if path.suffix.lower() == ".gif":
        return [
            "-filter_complex",
            "split[a][b];[a]palettegen[p];[b][p]paletteuse",
        ]
    # yuv420p needs even dimensions
    return [
        "-vf",
        "pad=ceil(iw/2)*2:ceil(ih/2)*2",
        "-c:v",
        "libx264",
        "-pix_fmt",
        "yuv420p",
        "-crf",
        str(crf),
        "-preset",
        "fast",
    ]


class FfmpegSink:
    """Pipes raw rgb24 frames into an ffmpeg subprocess.

    The container is chosen by ffmpeg from the output suffix; ``.gif``
    gets a palette filter, everything else is encoded with libx264.
    """

    def __init__(self, crf: int = 18) -> None:
        self.crf = crf
        self._process: subprocess.Popen[bytes] | None = None
        self._stderr: IO[bytes] | None = None

    def open(self, path: Path, width: int, height: int, fps: float) -> None:
        if shutil.which("ffmpeg") is None:
            msg = "ffmpeg not found on PATH"
            raise EncodingFailure(msg)

        cmd = [
            "ffmpeg",
            "-y",
            "-loglevel",
            "error",
            "-f",
            "rawvideo",
            "-pix_fmt",
            "rgb24",
            "-s",
            f"{width}x{height}",
            "-r",
            f"{fps:g}",
            "-i",
            "pipe:",
            *_encoder_args(path, self.crf),
            str(path),
        ]
        self._stderr = tempfile.TemporaryFile()
        try:
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=self._stderr,
            )
        except OSError as exc:
            self._close_stderr()
            msg = f"could not start ffmpeg: {exc}"
            raise EncodingFailure(msg) from exc
        if self._process.stdin is None:
            msg = "ffmpeg stdin pipe not available"
            raise EncodingFailure(msg)

    def _pipe(self) -> tuple[subprocess.Popen[bytes], IO[bytes]]:
        process = self._process
        if process is None or process.stdin is None:
            msg = "ffmpeg sink is not open"
            raise EncodingFailure(msg)
        return process, process.stdin

    def _stderr_tail(self) -> str:
        if self._stderr is None:
            return ""
        self._stderr.seek(0)
        lines = self._stderr.read().decode(errors="replace").strip().splitlines()
        return " | ".join(lines[-3:])

    def write_frame(self, bitmap: np.ndarray) -> None:
        try:
            self._pipe()[1].write(bitmap.tobytes())
        except (OSError, ValueError) as exc:
            msg = f"ffmpeg stopped accepting frames: {self._stderr_tail() or exc}"
            raise EncodingFailure(msg) from exc

    def finalize(self) -> None:
        process, stdin = self._pipe()
        try:
            stdin.close()
        except BrokenPipeError:
            pass  # reported through the exit status
        return_code = process.wait()
        tail = self._stderr_tail()
        self._close_stderr()
        if return_code != 0:
            msg = f"ffmpeg exited with code {return_code}: {tail}"
            raise EncodingFailure(msg)

    def abort(self) -> None:
        if self._process is not None and self._process.poll() is None:
            self._process.kill()
            self._process.wait()
        if self._process is not None and self._process.stdin is not None:
            try:
                self._process.stdin.close()
            except BrokenPipeError:
                pass  # already killed
        self._close_stderr()

    def _close_stderr(self) -> None:
        if self._stderr is not None:
            self._stderr.close()
            self._stderr = None


class VideoAssembler:
    """Single writer that commits a video atomically.

    Frames go to a hidden temporary file beside ``output_path`` which is
    renamed over the output only after the sink finalizes successfully.
    On any failure the sink is aborted and the temporary file removed,
    so the output path never holds a partial video.

    Use as a context manager: a clean exit finalizes, an exception
    aborts.
    """

    def __init__(
        self,
        output_path: str | Path,
        width: int,
        height: int,
        fps: float,
        sink: FrameSink,
    ) -> None:
        self.output_path = Path(output_path)
        self.width = width
        self.height = height
        self.fps = fps
        self.sink = sink
        self.frames_written = 0
        self.temp_path = self.output_path.with_name(
            f".{self.output_path.stem}.partial{self.output_path.suffix}"
        )
        self._last_key: tuple[int, int] | None = None
        self._opened = False
        self._closed = False

    def __enter__(self) -> "VideoAssembler":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.finalize()
        else:
            self.abort()

    def open(self) -> None:
        if self._opened:
            msg = "assembler already opened"
            raise EncodingFailure(msg)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._opened = True
        self.sink.open(self.temp_path, self.width, self.height, self.fps)

    def write_frame(
        self, bitmap: np.ndarray, key: tuple[int, int] | None = None
    ) -> None:
        """Append a frame; ``key`` is (period_index, frame_index).

        Raises:
            EncodingFailure: If the assembler is closed, the bitmap does
                not match the declared dimensions, keys go backwards, or
                the sink rejects the frame.

        """
        if not self._opened or self._closed:
            msg = "assembler is not accepting frames"
            raise EncodingFailure(msg)
        expected = (self.height, self.width, 3)
        if bitmap.shape != expected or bitmap.dtype != np.uint8:
            msg = (
                f"frame {self.frames_written} has shape {bitmap.shape} "
                f"{bitmap.dtype}, expected {expected} uint8"
            )
            raise EncodingFailure(msg)
        if key is not None:
            if self._last_key is not None and key <= self._last_key:
                msg = f"frame {key} submitted after {self._last_key}"
                raise EncodingFailure(msg)
            self._last_key = key
        self.sink.write_frame(bitmap)
        self.frames_written += 1

    def finalize(self) -> Path:
        """Commit the video once; later calls are no-ops."""
        if self._closed:
            return self.output_path
        self._closed = True
        try:
            if self.frames_written == 0:
                msg = "no frames were written"
                raise EncodingFailure(msg)
            self.sink.finalize()
            os.replace(self.temp_path, self.output_path)
        except EncodingFailure:
            self._discard()
            raise
        except OSError as exc:
            self._discard()
            msg = f"could not commit {self.output_path}: {exc}"
            raise EncodingFailure(msg) from exc
        logger.success(f"Trajectory video saved: {self.output_path}")
        return self.output_path

    def abort(self) -> None:
        """Discard the partial output; no-op once closed."""
        if self._closed:
            return
        self._closed = True
        if self._opened:
            self._discard()

    def _discard(self) -> None:
        self.sink.abort()
        self.temp_path.unlink(missing_ok=True)
