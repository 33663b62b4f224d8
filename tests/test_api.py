"""
Tests for the FastAPI REST API.

Tests the HTTP endpoints for spreadsheet export and import.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sheetbridge import main
from sheetbridge.main import app
from sheetbridge.services.spreadsheet_service import SpreadsheetService


@pytest.fixture
def client(spreadsheet_service: SpreadsheetService) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    main.spreadsheet_service = spreadsheet_service
    with TestClient(app) as c:
        yield c
    main.spreadsheet_service = None


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        """Test the health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data


class TestExportEndpoint:
    """Tests for POST /spreadsheet/export."""

    def test_export(self, client: TestClient, temp_dir: Path) -> None:
        """Test exporting rows to a file."""
        file_path = temp_dir / "api_export.xlsx"

        response = client.post(
            "/spreadsheet/export",
            json={
                "file_path": str(file_path),
                "headers": ["Name", "Age"],
                "data": [["Alice", 30], ["Bob", 25]],
                "options": {"title": "People"},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["result_code"] == "success"
        assert data["file_size_bytes"] > 0
        assert file_path.exists()

    def test_export_multi_sheet(self, client: TestClient, temp_dir: Path) -> None:
        """Test exporting named sheets to ods."""
        file_path = temp_dir / "api_export.ods"

        response = client.post(
            "/spreadsheet/export",
            json={
                "file_path": str(file_path),
                "headers": {"S1": ["x"], "S2": ["y"]},
                "data": {"S1": [[1]], "S2": [[2]]},
            },
        )

        assert response.status_code == 200
        assert file_path.exists()

    def test_export_no_headers(self, client: TestClient, temp_dir: Path) -> None:
        """Test that missing headers are a client error."""
        response = client.post(
            "/spreadsheet/export",
            json={"file_path": str(temp_dir / "out.xlsx"), "data": [[1]]},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["result_code"] == "no_headers"

    def test_export_path_not_writable(self, client: TestClient, temp_dir: Path) -> None:
        """Test that an unwritable target is forbidden."""
        response = client.post(
            "/spreadsheet/export",
            json={
                "file_path": str(temp_dir / "missing" / "out.xlsx"),
                "headers": ["a"],
                "data": [[1]],
            },
        )

        assert response.status_code == 403
        assert response.json()["detail"]["result_code"] == "path_not_writable"


class TestImportEndpoints:
    """Tests for the import endpoints."""

    def test_import(self, client: TestClient, sample_xlsx_file: Path) -> None:
        """Test importing a file on the server."""
        response = client.post(
            "/spreadsheet/import",
            json={"file_path": str(sample_xlsx_file), "keyed_by_worksheet": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sheet_count"] == 1
        assert data["sheets"]["Users"][0] == {"Name": "Alice", "Age": 30, "Email": "alice@example.com"}

    def test_import_not_found(self, client: TestClient, temp_dir: Path) -> None:
        """Test importing a missing file."""
        response = client.post(
            "/spreadsheet/import",
            json={"file_path": str(temp_dir / "missing.xlsx")},
        )

        assert response.status_code == 404
        assert response.json()["detail"]["result_code"] == "file_not_readable"

    def test_upload(self, client: TestClient, sample_xlsx_file: Path) -> None:
        """Test uploading and importing a file."""
        with open(sample_xlsx_file, "rb") as f:
            response = client.post(
                "/spreadsheet/upload",
                files={"file": ("upload.xlsx", f, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
                params={"keyed_by_headers": False},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["sheets"]["0"][0] == ["Name", "Age", "Email"]

    def test_upload_invalid_extension(self, client: TestClient) -> None:
        """Test uploading a file no reader handles."""
        response = client.post(
            "/spreadsheet/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
