# src/timetable_extractor/errors.py
from __future__ import annotations


class TimetableError(Exception):
    """Base class for every failure raised while reading a time-table."""


class GridNotFound(TimetableError):
    """The image does not contain a recognizable table grid."""


class RowOriginNotFound(GridNotFound):
    def __init__(self) -> None:
        super().__init__("first row not found")


class ColOriginNotFound(GridNotFound):
    def __init__(self, row0: int) -> None:
        super().__init__(f"first col not found on row {row0}")
        self.row0 = row0


class UnrecognizedDateFormat(TimetableError, ValueError):
    def __init__(self, text: str, reason: str = "unexpected date format") -> None:
        super().__init__(f"{reason}: {text!r}")
        self.text = text


class TimeParseFailure(TimetableError, ValueError):
    def __init__(self, date_key: str, text: str) -> None:
        super().__init__(f"failed to parse time {text!r} for date {date_key!r}")
        self.date_key = date_key
        self.text = text


class CellLookupMiss(TimetableError, LookupError):
    """A coordinate falls between or outside the detected rows/columns."""

    def __init__(self, axis: str, value: int) -> None:
        super().__init__(f"no {axis} at {value}")
        self.axis = axis
        self.value = value


class AmbiguousEntry(TimetableError, ValueError):
    """A fix cannot be generated for an entry."""


class ScanFailed(TimetableError):
    """Cell assignment failed; carries the id used for the debug dump."""

    def __init__(self, message_id: str, cause: Exception) -> None:
        super().__init__(f"failed to parse entries: {cause}. debug logs: {message_id}")
        self.message_id = message_id
        self.cause = cause
