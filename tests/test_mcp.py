"""
Tests for the MCP server.

Tests the MCP protocol implementation for spreadsheet operations.
"""

from pathlib import Path

import pytest

from sheetbridge.mcp_server import MCPSpreadsheetServer
from sheetbridge.services.spreadsheet_service import SpreadsheetService


@pytest.fixture
def mcp_server(spreadsheet_service: SpreadsheetService) -> MCPSpreadsheetServer:
    """Create an MCPSpreadsheetServer instance for testing."""
    return MCPSpreadsheetServer(service=spreadsheet_service)


class TestMCPServerTools:
    """Tests for MCP tool listing."""

    def test_get_tools_returns_all_tools(self, mcp_server: MCPSpreadsheetServer) -> None:
        """Test that all expected tools are returned."""
        tool_names = [tool.name for tool in mcp_server._get_tools()]

        assert tool_names == ["export_spreadsheet", "import_spreadsheet", "list_cache_methods"]

    def test_tools_have_required_fields(self, mcp_server: MCPSpreadsheetServer) -> None:
        """Test that all tools have required fields."""
        for tool in mcp_server._get_tools():
            assert tool.name is not None
            assert tool.description is not None
            assert tool.inputSchema is not None
            assert "properties" in tool.inputSchema
            assert "required" in tool.inputSchema


class TestMCPServerToolExecution:
    """Tests for MCP tool execution."""

    @pytest.mark.asyncio
    async def test_export_then_import(self, mcp_server: MCPSpreadsheetServer, temp_dir: Path) -> None:
        """Test exporting and importing through tools."""
        file_path = temp_dir / "mcp.xlsx"

        exported = await mcp_server._execute_tool(
            "export_spreadsheet",
            {
                "file_path": str(file_path),
                "headers": ["Name", "Age"],
                "data": [["Alice", 30]],
            },
        )
        imported = await mcp_server._execute_tool(
            "import_spreadsheet",
            {"file_path": str(file_path)},
        )

        assert exported["success"] is True
        assert exported["data"]["result_code"] == "success"
        assert imported["success"] is True
        assert imported["data"]["sheets"]["0"] == [{"Name": "Alice", "Age": 30}]

    @pytest.mark.asyncio
    async def test_export_error(self, mcp_server: MCPSpreadsheetServer, temp_dir: Path) -> None:
        """Test that export failures carry the result code."""
        result = await mcp_server._execute_tool(
            "export_spreadsheet",
            {"file_path": str(temp_dir / "out.xlsx"), "data": [[1]]},
        )

        assert result["success"] is False
        assert result["error"]["result_code"] == "no_headers"

    @pytest.mark.asyncio
    async def test_import_missing_file(self, mcp_server: MCPSpreadsheetServer, temp_dir: Path) -> None:
        """Test importing a missing file."""
        result = await mcp_server._execute_tool(
            "import_spreadsheet",
            {"file_path": str(temp_dir / "missing.xlsx")},
        )

        assert result["success"] is False
        assert result["error"]["result_code"] == "file_not_readable"

    @pytest.mark.asyncio
    async def test_list_cache_methods(self, mcp_server: MCPSpreadsheetServer) -> None:
        """Test listing cache methods."""
        result = await mcp_server._execute_tool("list_cache_methods", {})

        assert result["success"] is True
        assert result["data"]["configured"] == "memory"
        assert result["data"]["available"] is True
        assert "temp_file" in result["data"]["methods"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, mcp_server: MCPSpreadsheetServer) -> None:
        """Test calling an unknown tool."""
        result = await mcp_server._execute_tool("unknown_tool", {})

        assert result["success"] is False
        assert result["error"]["result_code"] == "unknown_tool"
