import sys
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from loguru import logger

from .banks import BankDirectory, fetch_bank_statuses, get_bank_directory
from .codec import decode_upload, parse_accounts, serialize_all, serialize_successful
from .config import get_settings
from .errors import CsvImportError
from .models import (
    AccountForm,
    BankData,
    BankStatus,
    BulkSummary,
    BulkVerifyResponse,
    ExportRequest,
    HealthResponse,
    VerificationResult,
)
from .rules import ALL_RESULTS_EXPORT_FILENAME, SUCCESSFUL_EXPORT_FILENAME
from .verification import Verifier, verify_account, verify_batch


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())
    logger.info(f"Starting account-verifier | env={settings.environment}")
    yield


app = FastAPI(
    title="account-verifier",
    description="Nigerian bank account verification with bulk CSV import and export",
    version="0.1.0",
    lifespan=lifespan,
)


def get_verifier() -> Verifier:
    return verify_account


@app.exception_handler(CsvImportError)
async def csv_import_error_handler(request: Request, exc: CsvImportError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


def _csv_download(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.get("/banks", response_model=List[BankData])
async def list_banks(directory: BankDirectory = Depends(get_bank_directory)):
    return list(await directory.get())


@app.get("/banks/status", response_model=List[BankStatus])
async def bank_statuses(directory: BankDirectory = Depends(get_bank_directory)):
    return await fetch_bank_statuses(directory)


@app.post("/verify", response_model=VerificationResult)
async def verify_single(form: AccountForm, verifier: Verifier = Depends(get_verifier)):
    details = form.to_details()
    try:
        return await verifier(details)
    except Exception as e:
        message = str(e) or "An unknown error occurred during verification."
        return VerificationResult(success=False, message=message, data=details)


@app.post("/verify/bulk", response_model=BulkVerifyResponse)
async def verify_bulk(file: UploadFile = File(...), verifier: Verifier = Depends(get_verifier)):
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    records = parse_accounts(decode_upload(raw))
    results = await verify_batch(records, verifier)

    succeeded = sum(1 for r in results if r.success)
    summary = BulkSummary(total=len(results), succeeded=succeeded, failed=len(results) - succeeded)
    return BulkVerifyResponse(results=results, summary=summary)


@app.post("/export/successful")
def export_successful(body: ExportRequest):
    content = serialize_successful(body.results)
    if content is None:
        raise HTTPException(status_code=404, detail="No successful verifications to export")
    return _csv_download(content, SUCCESSFUL_EXPORT_FILENAME)


@app.post("/export/all")
def export_all(body: ExportRequest):
    content = serialize_all(body.results)
    if content is None:
        raise HTTPException(status_code=404, detail="No verification results to export")
    return _csv_download(content, ALL_RESULTS_EXPORT_FILENAME)
