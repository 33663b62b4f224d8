"""
Custom exceptions for the spreadsheet bridge.

Every exception carries the ResultCode reported for it at the public API
boundary.
"""

from sheetbridge.exceptions.spreadsheet_exceptions import (
    CachingUnavailableError,
    CellRangeError,
    FileNotReadableError,
    FileNotWrittenError,
    LibraryNotFoundError,
    NoDataError,
    NoHeadersError,
    PathNotWritableError,
    SerializationError,
    SheetNotFoundError,
    SpreadsheetError,
)

__all__ = [
    "SpreadsheetError",
    "NoHeadersError",
    "NoDataError",
    "PathNotWritableError",
    "FileNotReadableError",
    "CachingUnavailableError",
    "LibraryNotFoundError",
    "FileNotWrittenError",
    "SerializationError",
    "SheetNotFoundError",
    "CellRangeError",
]
