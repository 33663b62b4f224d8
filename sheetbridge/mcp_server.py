"""
MCP (Model Context Protocol) server for spreadsheet export and import.

This module implements an MCP server that exposes the spreadsheet service
as tools that can be called by AI agents. It provides the same functionality
as the REST API but through the MCP protocol.

MCP Tools:
    - export_spreadsheet: Export headers and rows to a spreadsheet file
    - import_spreadsheet: Import a spreadsheet file into rows
    - list_cache_methods: List cell caching backends and their availability

Example:
    To run the MCP server:
        python -m sheetbridge.mcp_server

    Or programmatically:
        from sheetbridge.mcp_server import run_mcp_server
        run_mcp_server()
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
)

from sheetbridge.cache_strategy import resolve_cache_strategy
from sheetbridge.config import configure_logging
from sheetbridge.exceptions.spreadsheet_exceptions import (
    CachingUnavailableError,
    SpreadsheetError,
)
from sheetbridge.models.spreadsheet_models import (
    CacheMethod,
    ExportRequest,
    ImportRequest,
)
from sheetbridge.services.spreadsheet_service import SpreadsheetService

logger = logging.getLogger(__name__)


class MCPSpreadsheetServer:
    """
    MCP server implementation for spreadsheet operations.

    This class wraps the SpreadsheetService and exposes it through the MCP
    protocol, allowing AI agents to export and import spreadsheets using
    standardized tool calls.

    The server implements:
        - list_tools: Returns available spreadsheet operations as MCP tools
        - call_tool: Executes a specific spreadsheet operation

    Attributes:
        service: The underlying SpreadsheetService instance.
        server: The MCP Server instance.

    Example:
        mcp_server = MCPSpreadsheetServer()
        await mcp_server.run()
    """

    def __init__(self, service: SpreadsheetService | None = None) -> None:
        """
        Initialize the MCP Spreadsheet Server.

        Args:
            service: Optional SpreadsheetService instance. If None, creates a new one.
        """
        self.service = service or SpreadsheetService()
        self.server = Server("sheetbridge-mcp-server")
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP request handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return the list of available spreadsheet tools."""
            return self._get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Execute a tool and return the result."""
            result = await self._execute_tool(name, arguments)
            return [TextContent(type="text", text=json.dumps(result, default=str, indent=2))]

    def _get_tools(self) -> list[Tool]:
        """
        Get the list of available spreadsheet tools.

        Returns:
            List of MCP Tool definitions.
        """
        return [
            Tool(
                name="export_spreadsheet",
                description=(
                    "Export headers and rows to a spreadsheet file (xlsx, xls, csv or ods). "
                    "Headers and data may be flat lists or objects mapping worksheet names "
                    "to lists. Existing files are appended to unless options.append is false."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path where the spreadsheet will be written",
                        },
                        "headers": {
                            "type": ["array", "object"],
                            "description": "Column names, or an object mapping sheet name to column names",
                        },
                        "data": {
                            "type": ["array", "object"],
                            "description": "Rows, or an object mapping sheet name to rows",
                        },
                        "options": {
                            "type": "object",
                            "description": (
                                "Export options: ignore_headers, format, creator, title, subject, "
                                "description, template, merge_cells, append"
                            ),
                        },
                    },
                    "required": ["file_path", "data"],
                },
            ),
            Tool(
                name="import_spreadsheet",
                description=(
                    "Import a spreadsheet file. Rows are returned per worksheet, keyed by "
                    "the first row of the sheet unless keyed_by_headers is false."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the spreadsheet file",
                        },
                        "keyed_by_headers": {
                            "type": "boolean",
                            "description": "Use the first row as keys (default: true)",
                        },
                        "keyed_by_worksheet": {
                            "type": "boolean",
                            "description": "Bucket rows by worksheet title instead of index (default: false)",
                        },
                        "custom_calls": {
                            "type": "object",
                            "description": "Reader calls to apply before loading, e.g. {'set_delimiter': [';']}",
                        },
                        "only_existing_cells": {
                            "type": "boolean",
                            "description": "Only visit cells that hold a value (default: false)",
                        },
                    },
                    "required": ["file_path"],
                },
            ),
            Tool(
                name="list_cache_methods",
                description="List the cell caching backends and the one currently configured.",
                inputSchema={
                    "type": "object",
                    "properties": {},
                    "required": [],
                },
            ),
        ]

    def _cache_methods(self) -> dict[str, Any]:
        settings = self.service.settings
        try:
            configured = resolve_cache_strategy(settings).method.value
            error = None
        except CachingUnavailableError as e:
            configured = e.method
            error = e.message

        return {
            "configured": configured,
            "available": error is None,
            "error": error,
            "methods": [method.value for method in CacheMethod],
        }

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a tool by name with the given arguments.

        Args:
            name: The name of the tool to execute.
            arguments: The arguments to pass to the tool.

        Returns:
            Dictionary containing the tool execution result.
        """
        try:
            if name == "export_spreadsheet":
                request = ExportRequest(
                    file_path=arguments["file_path"],
                    headers=arguments.get("headers", []),
                    data=arguments["data"],
                    options=arguments.get("options", {}),
                )
                result = self.service.export_request(request)
                return {"success": True, "data": result.model_dump(mode="json")}

            elif name == "import_spreadsheet":
                request = ImportRequest(
                    file_path=arguments["file_path"],
                    keyed_by_headers=arguments.get("keyed_by_headers", True),
                    keyed_by_worksheet=arguments.get("keyed_by_worksheet", False),
                    custom_calls=arguments.get("custom_calls", {}),
                    only_existing_cells=arguments.get("only_existing_cells", False),
                )
                result = self.service.import_request(request)
                return {"success": True, "data": result.model_dump(mode="json")}

            elif name == "list_cache_methods":
                return {"success": True, "data": self._cache_methods()}

            else:
                return {
                    "success": False,
                    "error": {
                        "result_code": "unknown_tool",
                        "message": f"Unknown tool: {name}",
                    },
                }

        except SpreadsheetError as e:
            return {
                "success": False,
                "error": e.to_dict(),
            }
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return {
                "success": False,
                "error": {
                    "result_code": "internal_error",
                    "message": str(e),
                },
            }

    async def run(self) -> None:
        """
        Run the MCP server using stdio transport.

        This method starts the server and blocks until it is terminated.
        It uses stdin/stdout for communication with the MCP client.
        """
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def run_mcp_server() -> None:
    """
    Run the MCP spreadsheet server.

    This is the entry point for running the MCP server from the command line.
    It creates an MCPSpreadsheetServer instance and runs it.

    Example:
        python -m sheetbridge.mcp_server
    """
    configure_logging()
    server = MCPSpreadsheetServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    run_mcp_server()
