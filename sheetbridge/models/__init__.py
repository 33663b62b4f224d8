"""
Data models for the spreadsheet bridge.

Contains Pydantic models for options, result codes and request/response
validation and serialization.
"""

from sheetbridge.models.spreadsheet_models import (
    CacheMethod,
    ExportFormat,
    ExportOptions,
    ExportRequest,
    ExportResponse,
    ImportOptions,
    ImportRequest,
    ImportResponse,
    ResultCode,
    SpreadsheetErrorResponse,
)

__all__ = [
    "CacheMethod",
    "ExportFormat",
    "ExportOptions",
    "ExportRequest",
    "ExportResponse",
    "ImportOptions",
    "ImportRequest",
    "ImportResponse",
    "ResultCode",
    "SpreadsheetErrorResponse",
]
