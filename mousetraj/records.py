"""CSV parsing of timestamped pointer samples."""

import csv
import io
import math
from typing import NamedTuple

from mousetraj.config import TimestampUnit
from mousetraj.errors import EmptyInput, MalformedRecord

TIME_COLUMN_NAMES = ("t", "time", "timestamp", "ts")


class Sample(NamedTuple):
    """One pointer position; ``timestamp`` is in seconds."""

    timestamp: float
    x: float
    y: float


def _as_number(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _is_header(fields: list[str]) -> bool:
    """A header has some text and no numeric columns."""
    if not any(field.strip() for field in fields):
        return False
    return all(_as_number(field) is None for field in fields)


def _column_indices(header: list[str]) -> tuple[int, int, int] | None:
    """Locate (t, x, y) by name, or None to fall back to positions."""
    names = [name.strip().lower() for name in header]
    time_idx = next(
        (i for i, name in enumerate(names) if name in TIME_COLUMN_NAMES),
        None,
    )
    if time_idx is None or "x" not in names or "y" not in names:
        return None
    return time_idx, names.index("x"), names.index("y")


def _parse_field(
    value: str, what: str, line_number: int, raw: str
) -> float:
    number = _as_number(value)
    if number is None:
        msg = f"non-numeric {what} {value.strip()!r}"
        raise MalformedRecord(line_number, raw, msg)
    if not math.isfinite(number):
        msg = f"non-finite {what} {value.strip()!r}"
        raise MalformedRecord(line_number, raw, msg)
    return number


def parse_samples(
    data: bytes,
    unit: TimestampUnit = TimestampUnit.SECONDS,
) -> list[Sample]:
    """Parse raw CSV bytes into samples sorted by timestamp.

    Rows are ``timestamp,x,y``. Blank lines and ``#`` comments are
    skipped. An optional header row is detected when it has text and
    none of its fields is numeric; if it names ``t``/``time``/
    ``timestamp``, ``x`` and ``y`` columns, those are used and extra
    columns are ignored.
    Unsorted input is re-sorted; ties keep their input order.

    Args:
        data: Raw CSV bytes (UTF-8, optional BOM).
        unit: Unit of the timestamp column.

    Returns:
        Samples with timestamps converted to seconds.

    Raises:
        MalformedRecord: A row has the wrong column count or a field
            that is not a finite number.
        EmptyInput: No data rows were found.

    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedRecord(0, "", f"input is not UTF-8: {exc}") from exc

    scale = unit.seconds_per_unit
    indices = (0, 1, 2)
    n_columns = 3
    seen_first_row = False
    samples: list[Sample] = []

    for line_number, line in enumerate(io.StringIO(text), start=1):
        raw = line.rstrip("\r\n")
        if not raw.strip() or raw.lstrip().startswith("#"):
            continue
        fields = next(csv.reader([raw]))

        if not seen_first_row:
            seen_first_row = True
            if _is_header(fields):
                named = _column_indices(fields)
                if named is not None:
                    indices = named
                    n_columns = len(fields)
                continue

        if len(fields) != n_columns:
            msg = f"expected {n_columns} columns, got {len(fields)}"
            raise MalformedRecord(line_number, raw, msg)

        t_idx, x_idx, y_idx = indices
        timestamp = _parse_field(fields[t_idx], "timestamp", line_number, raw)
        x = _parse_field(fields[x_idx], "x coordinate", line_number, raw)
        y = _parse_field(fields[y_idx], "y coordinate", line_number, raw)
        samples.append(Sample(timestamp * scale, x, y))

    if not samples:
        msg = "CSV contains no data rows"
        raise EmptyInput(msg)

    # sorted() is stable, so equal timestamps keep input order
    return sorted(samples, key=lambda s: s.timestamp)
