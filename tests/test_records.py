"""Tests for CSV sample parsing."""

import pytest

from mousetraj.config import TimestampUnit
from mousetraj.errors import (
    EmptyInput,
    MalformedRecord,
    NoTrajectoryData,
    ParseError,
)
from mousetraj.records import Sample, parse_samples


class TestParseSamples:
    """Tests for parse_samples."""

    def test_header_is_skipped(self) -> None:
        samples = parse_samples(b"t,x,y\n0,0,0\n1,10,10\n2,20,20\n")
        assert samples == [
            Sample(0.0, 0.0, 0.0),
            Sample(1.0, 10.0, 10.0),
            Sample(2.0, 20.0, 20.0),
        ]

    def test_no_header(self) -> None:
        samples = parse_samples(b"0.5,1.5,2.5\n1.0,3,4\n")
        assert samples == [Sample(0.5, 1.5, 2.5), Sample(1.0, 3.0, 4.0)]

    def test_unsorted_input_is_sorted(self) -> None:
        samples = parse_samples(b"3,3,3\n1,1,1\n2,2,2\n")
        assert [s.timestamp for s in samples] == [1.0, 2.0, 3.0]

    def test_ties_keep_input_order(self) -> None:
        samples = parse_samples(b"1,9,9\n0,0,0\n1,5,5\n1,7,7\n")
        assert [(s.x, s.y) for s in samples] == [
            (0.0, 0.0),
            (9.0, 9.0),
            (5.0, 5.0),
            (7.0, 7.0),
        ]

    def test_milliseconds(self) -> None:
        samples = parse_samples(b"1500,1,2\n", TimestampUnit.MILLISECONDS)
        assert samples[0].timestamp == pytest.approx(1.5)

    def test_named_columns_any_order(self) -> None:
        """Header names select columns; extra columns are ignored."""
        data = b"x,y,z,t\n1,2,3,0.5\n4,5,6,0.25\n"
        samples = parse_samples(data)
        assert samples == [Sample(0.25, 4.0, 5.0), Sample(0.5, 1.0, 2.0)]

    def test_unnamed_header_is_positional(self) -> None:
        samples = parse_samples(b"when,left,top\n0,1,2\n")
        assert samples == [Sample(0.0, 1.0, 2.0)]

    def test_comments_and_blank_lines(self) -> None:
        data = b"# recorded 2023-05-01\n\nt,x,y\n0,1,1\n\n# pause\n1,2,2\n"
        assert len(parse_samples(data)) == 2

    def test_bom_and_crlf(self) -> None:
        data = b"\xef\xbb\xbft,x,y\r\n0,1,2\r\n"
        assert parse_samples(data) == [Sample(0.0, 1.0, 2.0)]

    def test_bad_timestamp_is_malformed(self) -> None:
        """``abc,1,2`` is neither a header nor a valid record."""
        with pytest.raises(MalformedRecord) as info:
            parse_samples(b"abc,1,2\n")
        assert info.value.line_number == 1
        assert info.value.row == "abc,1,2"

    def test_empty_first_row_is_not_a_header(self) -> None:
        with pytest.raises(MalformedRecord) as info:
            parse_samples(b",,\n0,1,2\n")
        assert info.value.line_number == 1
        assert "timestamp" in str(info.value)

    def test_bad_timestamp_after_header(self) -> None:
        with pytest.raises(MalformedRecord) as info:
            parse_samples(b"t,x,y\n0,1,2\nabc,1,2\n")
        assert info.value.line_number == 3
        assert "timestamp" in str(info.value)

    def test_wrong_column_count(self) -> None:
        with pytest.raises(MalformedRecord, match="expected 3 columns, got 2"):
            parse_samples(b"t,x,y\n0,1\n")

    def test_non_numeric_coordinate(self) -> None:
        with pytest.raises(MalformedRecord, match="x coordinate"):
            parse_samples(b"0,left,2\n")

    def test_non_finite_coordinate(self) -> None:
        with pytest.raises(MalformedRecord, match="non-finite"):
            parse_samples(b"0,1,nan\n")

    def test_invalid_utf8(self) -> None:
        with pytest.raises(MalformedRecord):
            parse_samples(b"\xff\xfe\x00")

    def test_header_only_is_empty(self) -> None:
        with pytest.raises(EmptyInput) as info:
            parse_samples(b"t,x,y\n")
        assert isinstance(info.value, ParseError)
        assert isinstance(info.value, NoTrajectoryData)

    def test_empty_bytes(self) -> None:
        with pytest.raises(EmptyInput):
            parse_samples(b"")

    def test_malformed_is_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_samples(b"0,1,2,3\n")
