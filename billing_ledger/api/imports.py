"""
Sales ledger import API endpoints.

Upload flow:
1. POST /import/sales-ledger/parse returns headers and a preview
   of the rows so the user can map columns
2. POST /import/sales-ledger/apply imports the mapped rows, or
   POST /import/sales-ledger/apply-file re-reads the whole
   original upload and imports every row

Structural problems (bad file, bad mapping) are a 400. Row-level
problems never are: the report lists them and the rest of the
batch is still committed.
"""

import json
import os

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from billing_ledger.api.tenancy import get_tenant_id
from billing_ledger.config import get_settings
from billing_ledger.models.base import get_db
from billing_ledger.schemas.imports import (
    ApiResponse,
    ApplyRequest,
    ImportReport,
    ParseResult,
)
from billing_ledger.services.import_service import LedgerImportService
from billing_ledger.services.tabular_parser import parse_file

router = APIRouter(prefix="/import", tags=["Import"])

ALLOWED_EXTENSIONS = (".csv", ".xlsx", ".xls")


def _bad_request(message: str, data=None) -> JSONResponse:
    body = ApiResponse(success=False, message=message, data=data)
    return JSONResponse(
        status_code=400,
        content=body.model_dump(mode="json", by_alias=True),
    )


def _read_upload(file: UploadFile | None) -> tuple[bytes | None, str | None]:
    """Return (content, error message) for an uploaded ledger file."""
    if file is None or not file.filename:
        return None, "No file uploaded. Please select an Excel or CSV file."

    extension = os.path.splitext(file.filename)[1].lower()
    if extension == ".pdf":
        return None, (
            "PDF upload is not supported. Please export your sales ledger "
            "from the other app as Excel (.xlsx) or CSV and upload that file."
        )
    if extension not in ALLOWED_EXTENSIONS:
        return None, "Unsupported file type. Use Excel (.xlsx, .xls) or CSV only."

    max_bytes = get_settings().IMPORT_MAX_UPLOAD_BYTES
    content = file.file.read(max_bytes + 1)
    if not content:
        return None, "No file uploaded. Please select an Excel or CSV file."
    if len(content) > max_bytes:
        return None, f"File is larger than the {max_bytes // (1024 * 1024)} MB limit."
    return content, None


@router.post(
    "/sales-ledger/parse",
    response_model=ApiResponse[ParseResult],
)
def parse_sales_ledger_file(
    file: UploadFile | None = File(default=None),
    max_rows: int | None = Query(default=None, ge=1),
):
    """Parse an uploaded file and return headers plus preview rows."""
    content, error = _read_upload(file)
    if error:
        return _bad_request(error)

    result = parse_file(
        content,
        file.filename,
        max_rows=max_rows or get_settings().IMPORT_PREVIEW_MAX_ROWS,
    )
    if result.error:
        return _bad_request(result.error, data=result)

    return ApiResponse[ParseResult](
        success=True,
        message="File parsed. Map columns and apply to import.",
        data=result,
    )


@router.post(
    "/sales-ledger/apply",
    response_model=ApiResponse[ImportReport],
)
def apply_sales_ledger_import(
    request: ApplyRequest,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Create customers, invoices and payments from mapped rows."""
    if not request.rows:
        return _bad_request("No rows to import.")
    return _apply(
        db, tenant_id, request.column_mapping, request.rows,
        request.skip_duplicates,
    )


@router.post(
    "/sales-ledger/apply-file",
    response_model=ApiResponse[ImportReport],
)
def apply_sales_ledger_file(
    file: UploadFile | None = File(default=None),
    column_mapping: str = Form(...),
    skip_duplicates: bool = Form(default=True),
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Import every row of the original upload, not just the preview."""
    try:
        mapping = json.loads(column_mapping)
    except json.JSONDecodeError:
        return _bad_request("column_mapping must be a JSON object.")
    if not isinstance(mapping, dict) or not all(
        isinstance(index, int) for index in mapping.values()
    ):
        return _bad_request("column_mapping must map field names to column indexes.")

    content, error = _read_upload(file)
    if error:
        return _bad_request(error)

    result = parse_file(content, file.filename, max_rows=None)
    if result.error:
        return _bad_request(result.error, data=result)
    if not result.rows:
        return _bad_request("No rows to import.")

    return _apply(db, tenant_id, mapping, result.rows, skip_duplicates)


def _apply(
    db: Session,
    tenant_id: int,
    column_mapping: dict[str, int],
    rows: list[list[str]],
    skip_duplicates: bool,
):
    service = LedgerImportService(db, tenant_id)
    try:
        report = service.apply_rows(
            column_mapping, rows, skip_duplicates=skip_duplicates
        )
        db.commit()
    except ValueError as e:
        db.rollback()
        return _bad_request(str(e))

    return ApiResponse[ImportReport](
        success=True,
        message=report.message(),
        data=report,
    )
