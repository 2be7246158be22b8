"""Exception taxonomy for the trajectory video pipeline.

Every error carries the name of the pipeline stage that raised it so the
command line can report a single ``error [stage]: cause`` line.
"""


class MouseTrajError(Exception):
    """Base class for all pipeline failures."""

    stage = "pipeline"


class RetrievalError(MouseTrajError):
    """The input CSV could not be fetched."""

    stage = "retrieval"


class NotFound(RetrievalError):
    """No object exists under the requested key."""


class NetworkError(RetrievalError):
    """The store could not be reached or answered with an error."""


class AccessDenied(RetrievalError):
    """The store refused access to the object."""


class ParseError(MouseTrajError):
    """The CSV payload does not follow the ``timestamp,x,y`` schema."""

    stage = "parse"


class MalformedRecord(ParseError):
    """A single CSV row is invalid."""

    def __init__(self, line_number: int, row: str, reason: str) -> None:
        self.line_number = line_number
        self.row = row
        self.reason = reason
        super().__init__(f"line {line_number}: {reason} ({row!r})")


class NoTrajectoryData(MouseTrajError):
    """Segmentation produced no periods."""

    stage = "segment"


class EmptyInput(ParseError, NoTrajectoryData):
    """The CSV contains no data rows."""

    stage = "parse"


class EncodingFailure(MouseTrajError):
    """The video sink rejected a frame or failed to finalize."""

    stage = "encode"
