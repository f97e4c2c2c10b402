"""
Tabular parser for legacy sales ledger exports.

Reads an uploaded CSV or Excel file (.xlsx through openpyxl, legacy
.xls through xlrd) into a header row plus raw
string rows. The preview cap only bounds the size of the preview
payload; the full-file apply calls parse_file(max_rows=None) on
the original upload.

parse_file never raises. Callers check ParseResult.error before
using the rows.
"""

import csv
import io
import logging
import os
from datetime import date, datetime, time
from typing import BinaryIO, Iterable, Iterator

import openpyxl
import xlrd

from billing_ledger.schemas.imports import ParseResult

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = (".csv", ".txt", ".tsv")
EXCEL_EXTENSIONS = (".xlsx", ".xls")
SNIFF_DELIMITERS = ",;\t|"
# .xlsx is a zip archive; anything else is read as a legacy BIFF .xls
ZIP_SIGNATURE = b"PK\x03\x04"


def parse_file(
    stream: BinaryIO | bytes,
    filename: str,
    max_rows: int | None = 500,
) -> ParseResult:
    """
    Parse an uploaded file into headers and rows.

    Args:
        stream: File-like object (or raw bytes) with the upload
        filename: Original filename, used to pick the format
        max_rows: Maximum data rows to return; None reads them all

    Returns:
        ParseResult with headers and rows, or with error set
    """
    extension = os.path.splitext(filename or "")[1].lower()

    try:
        content = stream if isinstance(stream, bytes) else stream.read()
        if extension in CSV_EXTENSIONS:
            result = _parse_csv(content, max_rows)
        elif extension in EXCEL_EXTENSIONS:
            result = _parse_excel(content, max_rows)
        else:
            result = ParseResult(
                error="Unsupported file type. Use .csv, .xlsx or .xls."
            )
    except Exception as e:
        # Unreadable streams and corrupt workbooks surface as OSError,
        # zipfile, XLRDError, KeyError, csv.Error, ...
        logger.warning("Could not parse %s: %s", filename, e)
        result = ParseResult(error=str(e) or e.__class__.__name__)

    if result.error is None:
        logger.info(
            "Parsed %s: %d columns, %d rows",
            filename, len(result.headers), len(result.rows),
        )
    return result


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Older billing tools export in the Windows code page
        return content.decode("cp1252")


def _sniff_delimiter(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _parse_csv(content: bytes, max_rows: int | None) -> ParseResult:
    text = _decode(content)
    if not text.strip():
        return ParseResult(error="File is empty.")

    first_line = text.lstrip("\r\n").splitlines()[0]
    reader = csv.reader(io.StringIO(text), delimiter=_sniff_delimiter(first_line))
    return _collect(reader, max_rows)


def _parse_excel(content: bytes, max_rows: int | None) -> ParseResult:
    if not content.startswith(ZIP_SIGNATURE):
        return _parse_xls(content, max_rows)

    workbook = openpyxl.load_workbook(io.BytesIO(content), data_only=True)

    # First worksheet that actually holds data
    for sheet in workbook.worksheets:
        rows = (
            [_cell_text(value) for value in row]
            for row in sheet.iter_rows(values_only=True)
        )
        result = _collect(rows, max_rows)
        if result.error is None:
            return result

    return ParseResult(error="Excel sheet is empty.")


def _parse_xls(content: bytes, max_rows: int | None) -> ParseResult:
    """Read a legacy binary workbook, the format older billing tools export."""
    book = xlrd.open_workbook(file_contents=content, on_demand=True)
    try:
        for sheet in book.sheets():
            rows = (
                [_xls_cell_text(cell, book.datemode) for cell in sheet.row(index)]
                for index in range(sheet.nrows)
            )
            result = _collect(rows, max_rows)
            if result.error is None:
                return result
    finally:
        book.release_resources()

    return ParseResult(error="Excel sheet is empty.")


def _xls_cell_text(cell: xlrd.sheet.Cell, datemode: int) -> str:
    if cell.ctype == xlrd.XL_CELL_DATE:
        return _cell_text(xlrd.xldate_as_datetime(cell.value, datemode))
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return ""
    return _cell_text(cell.value)


def _collect(rows: Iterable[list[str]], max_rows: int | None) -> ParseResult:
    """Split the first non-blank row off as the header and cap the rest."""
    iterator: Iterator[list[str]] = (
        [cell.strip() for cell in row]
        for row in rows
        if any(cell.strip() for cell in row)
    )

    header_row = next(iterator, None)
    if header_row is None:
        return ParseResult(error="File is empty.")

    headers = [
        value or f"Col{index}"
        for index, value in enumerate(header_row, start=1)
    ]

    data: list[list[str]] = []
    for row in iterator:
        if max_rows is not None and len(data) >= max_rows:
            break
        data.append(row)

    return ParseResult(headers=headers, rows=data)


def _cell_text(value) -> str:
    """Render a spreadsheet cell the way it would look in a CSV export."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
