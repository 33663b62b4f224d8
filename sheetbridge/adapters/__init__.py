"""
Adapters for spreadsheet engines.

Implements the adapter pattern for the libraries doing the actual work:
- OpenpyxlAdapter / OpenpyxlReader: workbook model, xlsx load and save
- CalamineReader: xls, xlsb and ods reading using python-calamine (Rust-based)
- CsvReader / CsvWriter: csv
- OdsWriter: ods writing using odfpy
- XlsWriter: legacy xls writing using xlwt
"""

from sheetbridge.adapters.calamine_adapter import CalamineReader
from sheetbridge.adapters.csv_adapter import CsvReader, CsvWriter
from sheetbridge.adapters.factory import create_reader, create_writer, load_for_update, sniff_reader
from sheetbridge.adapters.odf_adapter import OdsWriter
from sheetbridge.adapters.openpyxl_adapter import OpenpyxlAdapter, OpenpyxlReader
from sheetbridge.adapters.xlwt_adapter import XlsWriter

__all__ = [
    "CalamineReader",
    "CsvReader",
    "CsvWriter",
    "OdsWriter",
    "OpenpyxlAdapter",
    "OpenpyxlReader",
    "XlsWriter",
    "create_reader",
    "create_writer",
    "load_for_update",
    "sniff_reader",
]
