"""
FastAPI application for the spreadsheet service.

This module provides the REST API endpoints for export and import using
FastAPI. It exposes both file-based operations (for files on the server)
and an upload operation (for importing uploaded files).

API Endpoints:
    - GET /health: Health check
    - POST /spreadsheet/export: Export headers and rows to a file
    - POST /spreadsheet/import: Import a file on the server
    - POST /spreadsheet/upload: Upload and import a file

Example:
    To run the server:
        uvicorn sheetbridge.main:app --reload

    Or programmatically:
        from sheetbridge.main import run_server
        run_server()
"""

import logging
import os
import tempfile
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any

import uvicorn
from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from sheetbridge import __version__
from sheetbridge.adapters.factory import READERS
from sheetbridge.config import configure_logging
from sheetbridge.exceptions.spreadsheet_exceptions import SpreadsheetError
from sheetbridge.models.spreadsheet_models import (
    ExportRequest,
    ExportResponse,
    ImportRequest,
    ImportResponse,
    ResultCode,
    SpreadsheetErrorResponse,
)
from sheetbridge.services.spreadsheet_service import SpreadsheetService

logger = logging.getLogger(__name__)

spreadsheet_service: SpreadsheetService | None = None

STATUS_CODES = {
    ResultCode.NO_HEADERS: 400,
    ResultCode.NO_DATA: 400,
    ResultCode.INVALID_CELL_RANGE: 400,
    ResultCode.FILE_NOT_READABLE: 404,
    ResultCode.SHEET_NOT_FOUND: 404,
    ResultCode.PATH_NOT_WRITABLE: 403,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Initializes the spreadsheet service on startup unless one was installed
    beforehand, and drops it on shutdown.

    Args:
        app: The FastAPI application instance.
    """
    global spreadsheet_service
    configure_logging()
    if spreadsheet_service is None:
        spreadsheet_service = SpreadsheetService()
    yield
    spreadsheet_service = None


app = FastAPI(
    title="SheetBridge Spreadsheet Service",
    description="""
    Spreadsheet export and import supporting both REST API and MCP (Model Context Protocol).

    ## Features

    - **Export**: headers and rows to xlsx, xls, csv or ods, one or many worksheets
    - **Append**: repeated exports add rows below the existing ones
    - **Import**: any supported file into rows keyed by headers or by position
    - **Hooks**: registered observers may rewrite every value on the way

    ## Architecture

    - **Service Layer**: export and import orchestrators decoupled from transport
    - **Adapters**: openpyxl, python-calamine, odfpy and xlwt
    - **Dual Protocol**: Same service exposed via REST and MCP
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> SpreadsheetService:
    """
    Get the spreadsheet service instance.

    Returns:
        The global SpreadsheetService instance.

    Raises:
        HTTPException: If the service is not initialized.
    """
    if spreadsheet_service is None:
        raise HTTPException(
            status_code=503,
            detail="Spreadsheet service is not initialized",
        )
    return spreadsheet_service


def handle_spreadsheet_error(error: SpreadsheetError) -> HTTPException:
    """
    Convert a SpreadsheetError to the matching HTTP exception.

    Args:
        error: The SpreadsheetError to convert.

    Returns:
        HTTPException with the status code for the error's result code.
    """
    status_code = STATUS_CODES.get(error.result_code, 500)
    if status_code == 500:
        logger.error(f"Request failed: {error.message}")

    return HTTPException(status_code=status_code, detail=error.to_dict())


@app.get(
    "/health",
    tags=["System"],
    summary="Health check",
    response_model=dict,
)
async def health_check() -> dict[str, Any]:
    """
    Check the health status of the service.

    Returns:
        Dictionary containing status and timestamp.
    """
    return {
        "status": "healthy",
        "service": "SheetBridge Spreadsheet Service",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post(
    "/spreadsheet/export",
    tags=["Spreadsheet Operations"],
    summary="Export data to a spreadsheet",
    response_model=ExportResponse,
    responses={
        400: {"model": SpreadsheetErrorResponse, "description": "Missing headers or data, invalid merge range"},
        403: {"model": SpreadsheetErrorResponse, "description": "Path not writable"},
        404: {"model": SpreadsheetErrorResponse, "description": "Merge sheet or template not found"},
        500: {"model": SpreadsheetErrorResponse, "description": "Write error"},
    },
)
async def export_spreadsheet(request: ExportRequest) -> ExportResponse:
    """
    Export headers and rows to a spreadsheet file.

    The output format follows ``options.format`` or the file extension.
    Existing files are appended to unless ``options.append`` is false.

    Args:
        request: ExportRequest containing file path, headers, data and options.

    Returns:
        ExportResponse describing the written file.

    Raises:
        HTTPException: If the export fails.
    """
    service = get_service()

    try:
        return service.export_request(request)
    except SpreadsheetError as e:
        raise handle_spreadsheet_error(e) from e


@app.post(
    "/spreadsheet/import",
    tags=["Spreadsheet Operations"],
    summary="Import a spreadsheet",
    response_model=ImportResponse,
    responses={
        404: {"model": SpreadsheetErrorResponse, "description": "File not readable"},
        500: {"model": SpreadsheetErrorResponse, "description": "Read error"},
    },
)
async def import_spreadsheet(request: ImportRequest) -> ImportResponse:
    """
    Import a spreadsheet file from the server.

    Args:
        request: ImportRequest containing the file path and import flags.

    Returns:
        ImportResponse containing the imported rows per worksheet.

    Raises:
        HTTPException: If the import fails.
    """
    service = get_service()

    try:
        return service.import_request(request)
    except SpreadsheetError as e:
        raise handle_spreadsheet_error(e) from e


@app.post(
    "/spreadsheet/upload",
    tags=["Spreadsheet Operations"],
    summary="Upload and import a spreadsheet",
    response_model=ImportResponse,
    responses={
        400: {"model": SpreadsheetErrorResponse, "description": "Invalid file"},
        500: {"model": SpreadsheetErrorResponse, "description": "Processing error"},
    },
)
async def upload_and_import_spreadsheet(
    file: Annotated[UploadFile, File(description="Spreadsheet file to upload")],
    keyed_by_headers: Annotated[bool, Query(description="Use the first row as keys")] = True,
    keyed_by_worksheet: Annotated[bool, Query(description="Bucket rows by worksheet title")] = False,
    only_existing_cells: Annotated[bool, Query(description="Only visit cells that hold a value")] = False,
) -> ImportResponse:
    """
    Upload a spreadsheet file and import its contents.

    This endpoint handles file uploads for scenarios where the file is not
    stored on the server. The file is temporarily saved and processed.

    Args:
        file: The uploaded spreadsheet file.
        keyed_by_headers: Whether to use the first row as keys.
        keyed_by_worksheet: Whether to bucket rows by worksheet title.
        only_existing_cells: Whether to skip empty cells.

    Returns:
        ImportResponse containing the imported rows per worksheet.

    Raises:
        HTTPException: If upload or import fails.
    """
    if not file.filename:
        raise HTTPException(
            status_code=400,
            detail={"result_code": ResultCode.FILE_NOT_READABLE.value, "message": "No file provided"},
        )

    suffix = os.path.splitext(file.filename)[1].lower()
    if suffix not in READERS:
        raise HTTPException(
            status_code=400,
            detail={
                "result_code": ResultCode.FILE_NOT_READABLE.value,
                "message": f"Invalid file extension. Supported: {', '.join(sorted(READERS))}",
            },
        )

    service = get_service()
    temp_path = None

    try:
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as temp_file:
            content = await file.read()
            temp_file.write(content)
            temp_path = temp_file.name

        return service.import_request(
            ImportRequest(
                file_path=temp_path,
                keyed_by_headers=keyed_by_headers,
                keyed_by_worksheet=keyed_by_worksheet,
                only_existing_cells=only_existing_cells,
            )
        )
    except SpreadsheetError as e:
        raise handle_spreadsheet_error(e) from e
    finally:
        if temp_path and os.path.exists(temp_path):
            os.unlink(temp_path)


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server.

    Args:
        host: Host to bind to. Defaults to "0.0.0.0".
        port: Port to listen on. Defaults to 8000.
        reload: Whether to enable auto-reload. Defaults to False.

    Example:
        from sheetbridge.main import run_server
        run_server(host="127.0.0.1", port=8080)
    """
    uvicorn.run(
        "sheetbridge.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
