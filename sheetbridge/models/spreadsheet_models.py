"""
Pydantic models for spreadsheet export and import.

This module contains the option records consumed by the export and import
orchestrators, the result codes they return, and the request/response
models used by the FastAPI and MCP interfaces.

All models use Pydantic v2 for validation, serialization, and
JSON Schema generation for OpenAPI documentation.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultCode(str, Enum):
    """
    Outcome of an export or import call.

    Every failure crossing the public API is reported as one of these codes
    rather than as a raised exception.
    """

    SUCCESS = "success"
    NO_HEADERS = "no_headers"
    NO_DATA = "no_data"
    PATH_NOT_WRITABLE = "path_not_writable"
    LIBRARY_NOT_FOUND = "library_not_found"
    FILE_NOT_WRITTEN = "file_not_written"
    CACHING_METHOD_UNAVAILABLE = "caching_method_unavailable"
    FILE_NOT_READABLE = "file_not_readable"
    SERIALIZATION_FAILED = "serialization_failed"
    SHEET_NOT_FOUND = "sheet_not_found"
    INVALID_CELL_RANGE = "invalid_cell_range"


class ExportFormat(str, Enum):
    """Output formats understood by the export writers."""

    XLS = "xls"
    XLSX = "xlsx"
    CSV = "csv"
    ODS = "ods"

    @classmethod
    def resolve(cls, fmt: str | None, file_path: str) -> "ExportFormat":
        """
        Pick the output format from an explicit option or the file extension.

        Anything unrecognised falls back to the legacy xls format.

        Args:
            fmt: Format option as given by the caller (case-insensitive).
            file_path: Target path, consulted when fmt is empty.

        Returns:
            The resolved ExportFormat.
        """
        candidate = (fmt or "").strip().lower()
        if not candidate:
            _, dot, extension = file_path.rpartition(".")
            candidate = extension.lower() if dot else ""

        try:
            return cls(candidate)
        except ValueError:
            return cls.XLS


class CacheMethod(str, Enum):
    """
    Cell caching backends a workbook engine may hold sheets in.

    The in-memory kinds keep the whole workbook resident; the others let the
    engine stream large workbooks instead of materializing them.
    """

    MEMORY = "memory"
    MEMORY_SERIALIZED = "memory_serialized"
    MEMORY_GZIP = "memory_gzip"
    TEMP_FILE = "temp_file"
    MEMCACHE = "memcache"
    SQLITE = "sqlite"


class ExportOptions(BaseModel):
    """
    Options for an export call.

    Unknown fields are kept verbatim and handed to hook observers through
    ``model_extra``.

    Attributes:
        ignore_headers: Skip the header pass. Defaults to True when no
            headers were given, False otherwise.
        format: Output format (xls, xlsx, csv or ods). Inferred from the
            file extension when unset.
        creator: Document creator property.
        title: Document title property.
        subject: Document subject property.
        description: Document description property.
        template: Path of a workbook used as the starting point.
        merge_cells: Mapping of sheet identifier to A1 ranges to merge.
        append: Load an existing target file and append to it.
    """

    model_config = ConfigDict(extra="allow")

    ignore_headers: bool | None = Field(
        default=None,
        description="Skip the header pass (defaults to True when headers are empty)",
    )
    format: str | None = Field(
        default=None,
        description="Output format: xls, xlsx, csv or ods",
    )
    creator: str | None = Field(
        default=None,
        description="Document creator property",
    )
    title: str | None = Field(
        default=None,
        description="Document title property",
    )
    subject: str | None = Field(
        default=None,
        description="Document subject property",
    )
    description: str | None = Field(
        default=None,
        description="Document description property",
    )
    template: str | None = Field(
        default=None,
        description="Path to a workbook used as a template",
    )
    merge_cells: dict[str | int, list[str]] = Field(
        default_factory=dict,
        description="Mapping of sheet identifier to cell ranges to merge (e.g. 'A1:C1')",
    )
    append: bool = Field(
        default=True,
        description="Append to the target file if it already exists",
    )


class ImportOptions(BaseModel):
    """
    The options of an import call, as seen by hook observers.

    Attributes:
        path: Path of the file being imported.
        keyed_by_headers: Use the first row as keys for the other rows.
        keyed_by_worksheet: Bucket rows by worksheet title instead of index.
        custom_calls: Reader configuration calls applied before loading.
        only_existing_cells: Only visit cells that hold a value.
    """

    path: str
    keyed_by_headers: bool = True
    keyed_by_worksheet: bool = False
    custom_calls: dict[str, list[Any]] = Field(default_factory=dict)
    only_existing_cells: bool = False

    @field_validator("custom_calls", mode="before")
    @classmethod
    def wrap_single_arguments(cls, v: Any) -> Any:
        """Allow ``{"set_delimiter": ";"}`` as shorthand for a one-argument call."""
        if not isinstance(v, dict):
            return v
        return {
            name: list(args) if isinstance(args, (list, tuple)) else [args]
            for name, args in v.items()
        }


class ExportRequest(BaseModel):
    """
    Request model for the export endpoint and tool.

    Attributes:
        file_path: Path where the spreadsheet will be written.
        headers: Column names, either a flat list or a mapping of sheet name to list.
        data: Rows, either a flat list of rows or a mapping of sheet name to rows.
        options: Export options.
    """

    file_path: str = Field(
        description="Path where the spreadsheet will be written",
    )
    headers: list[Any] | dict[str, list[Any]] = Field(
        default_factory=list,
        description="Column names: a list, or a mapping of sheet name to list",
    )
    data: list[Any] | dict[str, list[list[Any]]] = Field(
        description="Rows: a list of rows, or a mapping of sheet name to rows",
    )
    options: ExportOptions = Field(
        default_factory=ExportOptions,
        description="Export options",
    )


class ExportResponse(BaseModel):
    """
    Response model for export operations.

    Attributes:
        success: Whether the export produced a file.
        result_code: The detailed outcome.
        file_path: Path of the written file (after filename sanitization).
        file_size_bytes: Size of the written file in bytes.
        processing_time_ms: Time taken to process the request in milliseconds.
    """

    success: bool = Field(
        description="Whether the export produced a file",
    )
    result_code: ResultCode = Field(
        description="Detailed outcome of the export",
    )
    file_path: str | None = Field(
        default=None,
        description="Path of the written file",
    )
    file_size_bytes: int | None = Field(
        default=None,
        ge=0,
        description="Size of the written file in bytes",
    )
    processing_time_ms: float | None = Field(
        default=None,
        ge=0,
        description="Time taken to process the request in milliseconds",
    )


class ImportRequest(BaseModel):
    """
    Request model for the import endpoint and tool.

    Attributes:
        file_path: Path of the spreadsheet to read.
        keyed_by_headers: Use the first row of each sheet as keys.
        keyed_by_worksheet: Bucket rows by worksheet title.
        custom_calls: Reader configuration calls.
        only_existing_cells: Only visit cells that hold a value.
    """

    file_path: str = Field(
        description="Path of the spreadsheet to read",
    )
    keyed_by_headers: bool = Field(
        default=True,
        description="Use the first row of each sheet as keys for the other rows",
    )
    keyed_by_worksheet: bool = Field(
        default=False,
        description="Bucket rows by worksheet title instead of worksheet index",
    )
    custom_calls: dict[str, Any] = Field(
        default_factory=dict,
        description="Reader calls to apply before loading, e.g. {'set_delimiter': [';']}",
    )
    only_existing_cells: bool = Field(
        default=False,
        description="Only visit cells that hold a value",
    )


class ImportResponse(BaseModel):
    """
    Response model for import operations.

    Attributes:
        success: Whether the file was imported.
        result_code: The detailed outcome.
        sheets: Imported rows, bucketed by worksheet index or title.
        sheet_count: Number of buckets in ``sheets``.
        processing_time_ms: Time taken to process the request in milliseconds.
    """

    success: bool = Field(
        description="Whether the file was imported",
    )
    result_code: ResultCode = Field(
        description="Detailed outcome of the import",
    )
    sheets: dict[str, list[Any]] = Field(
        default_factory=dict,
        description="Imported rows, bucketed by worksheet index or title",
    )
    sheet_count: int = Field(
        default=0,
        ge=0,
        description="Number of worksheet buckets",
    )
    processing_time_ms: float | None = Field(
        default=None,
        ge=0,
        description="Time taken to process the request in milliseconds",
    )


class SpreadsheetErrorResponse(BaseModel):
    """
    Standard error response model for the API.

    Attributes:
        success: Always False for error responses.
        result_code: Machine-readable result code.
        message: Human-readable error description.
    """

    success: bool = Field(
        default=False,
        description="Always False for error responses",
    )
    result_code: ResultCode = Field(
        description="Machine-readable result code",
    )
    message: str = Field(
        description="Human-readable error description",
    )
