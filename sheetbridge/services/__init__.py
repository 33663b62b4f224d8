"""
Service layer for spreadsheet export and import.

Contains the orchestration logic, decoupled from transport layers
(HTTP/MCP).
"""

from sheetbridge.services.export_service import ExportService
from sheetbridge.services.hooks import HookEvent, HookPhase, HookRegistry, ValueRef
from sheetbridge.services.import_service import ImportService
from sheetbridge.services.spreadsheet_service import SpreadsheetService

__all__ = [
    "ExportService",
    "HookEvent",
    "HookPhase",
    "HookRegistry",
    "ImportService",
    "SpreadsheetService",
    "ValueRef",
]
