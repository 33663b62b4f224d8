"""
Custom exceptions for spreadsheet export and import.

This module defines a hierarchy of exceptions for the failure conditions
of the export and import orchestrators. All exceptions inherit from
SpreadsheetError and carry the ResultCode the public API reports for them,
so the service boundary can turn any of them into a plain result code.

Example:
    try:
        strategy = resolve_cache_strategy(settings)
    except CachingUnavailableError as e:
        logger.warning(f"Caching error: {e.method}")
        return e.result_code
"""

from sheetbridge.models.spreadsheet_models import ResultCode


class SpreadsheetError(Exception):
    """
    Base exception for all spreadsheet bridge errors.

    Attributes:
        message: Human-readable error description.
        result_code: Result code reported to callers of the public API.
        details: Optional additional context about the error.
    """

    def __init__(
        self,
        message: str,
        result_code: ResultCode = ResultCode.SERIALIZATION_FAILED,
        details: dict | None = None,
    ) -> None:
        """
        Initialize the SpreadsheetError.

        Args:
            message: Human-readable error description.
            result_code: Result code reported to callers of the public API.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.result_code = result_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """
        Convert exception to a dictionary for API responses.

        Returns:
            Dictionary containing result_code, message, and details.
        """
        return {
            "result_code": self.result_code.value,
            "message": self.message,
            "details": self.details,
        }


class NoHeadersError(SpreadsheetError):
    """Raised when an export has no headers and does not ignore them."""

    def __init__(self) -> None:
        super().__init__(
            message="No headers were given and ignore_headers is not set",
            result_code=ResultCode.NO_HEADERS,
        )


class NoDataError(SpreadsheetError):
    """Raised when an export has no data rows."""

    def __init__(self) -> None:
        super().__init__(
            message="No data was given",
            result_code=ResultCode.NO_DATA,
        )


class PathNotWritableError(SpreadsheetError):
    """
    Raised when the export target cannot be written.

    Attributes:
        file_path: Path that was rejected.
    """

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(
            message=f"Path is not writable: {file_path}",
            result_code=ResultCode.PATH_NOT_WRITABLE,
            details={"file_path": file_path},
        )


class FileNotReadableError(SpreadsheetError):
    """
    Raised when the import source cannot be read.

    Attributes:
        file_path: Path that was rejected.
        reason: Specific reason, e.g. a missing file or an unknown extension.
    """

    def __init__(self, file_path: str, reason: str | None = None) -> None:
        self.file_path = file_path
        self.reason = reason

        message = f"File is not readable: {file_path}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            result_code=ResultCode.FILE_NOT_READABLE,
            details={"file_path": file_path, "reason": reason},
        )


class CachingUnavailableError(SpreadsheetError):
    """
    Raised when the configured cell caching backend cannot be used.

    Attributes:
        method: The cache method that was resolved.
        reason: Why the backend is unavailable.
    """

    def __init__(self, method: str, reason: str | None = None) -> None:
        self.method = method
        self.reason = reason

        message = f"Caching method unavailable: {method}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            result_code=ResultCode.CACHING_METHOD_UNAVAILABLE,
            details={"method": method, "reason": reason},
        )


class LibraryNotFoundError(SpreadsheetError):
    """
    Raised when the library backing a reader or writer is not installed.

    Attributes:
        package: Distribution name of the missing library.
    """

    def __init__(self, package: str) -> None:
        self.package = package
        super().__init__(
            message=f"Spreadsheet library not installed: {package}",
            result_code=ResultCode.LIBRARY_NOT_FOUND,
            details={"package": package},
        )


class FileNotWrittenError(SpreadsheetError):
    """
    Raised when the target file is absent after the writer finished.

    Attributes:
        file_path: Path that should have been written.
    """

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(
            message=f"File was not written: {file_path}",
            result_code=ResultCode.FILE_NOT_WRITTEN,
            details={"file_path": file_path},
        )


class SerializationError(SpreadsheetError):
    """
    Raised when the underlying library fails to load or save a workbook.

    Attributes:
        file_path: Path of the workbook being loaded or saved.
        operation: The operation that failed (load/save).
        reason: The library's error message.
    """

    def __init__(
        self,
        file_path: str,
        operation: str = "save",
        reason: str | None = None,
    ) -> None:
        self.file_path = file_path
        self.operation = operation
        self.reason = reason

        message = f"Failed to {operation} spreadsheet: {file_path}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            result_code=ResultCode.SERIALIZATION_FAILED,
            details={
                "file_path": file_path,
                "operation": operation,
                "reason": reason,
            },
        )


class SheetNotFoundError(SpreadsheetError):
    """
    Raised when a referenced worksheet does not exist in the workbook.

    Attributes:
        sheet_name: Name of the sheet that was not found.
        available_sheets: List of sheets available in the workbook.
    """

    def __init__(
        self,
        sheet_name: str,
        available_sheets: list[str] | None = None,
    ) -> None:
        self.sheet_name = sheet_name
        self.available_sheets = available_sheets or []

        message = f"Sheet not found: {sheet_name}"
        if available_sheets:
            message += f". Available sheets: {', '.join(available_sheets)}"

        super().__init__(
            message=message,
            result_code=ResultCode.SHEET_NOT_FOUND,
            details={
                "sheet_name": sheet_name,
                "available_sheets": self.available_sheets,
            },
        )


class CellRangeError(SpreadsheetError):
    """
    Raised when an invalid cell range is specified.

    Attributes:
        cell_range: The invalid cell range string.
        reason: Specific reason why the range is invalid.
    """

    def __init__(
        self,
        cell_range: str,
        reason: str | None = None,
    ) -> None:
        self.cell_range = cell_range
        self.reason = reason

        message = f"Invalid cell range: {cell_range}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            result_code=ResultCode.INVALID_CELL_RANGE,
            details={
                "cell_range": cell_range,
                "reason": reason,
            },
        )
