"""
Submission endpoint.

Receives one registration as JSON, checks required fields, then signs,
exchanges and appends a row to the configured spreadsheet. Errors are
"missing field" (400) or anything else (500).
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config.settings import DEFAULT_SUBMIT_PATH
from registration.state import REQUIRED_FIELDS, WorkerRegistration
from sheets.errors import CredentialsNotConfigured

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submission"])

SUCCESS_MESSAGE = "Data berhasil disimpan ke Google Sheets"
FAILURE_MESSAGE = "Terjadi kesalahan saat menyimpan data"


def _authorized(request: Request) -> bool:
    key = request.app.state.endpoint_config.client_key
    if key is None:
        return True
    expected = f"Bearer {key.get_secret_value()}"
    supplied = request.headers.get("authorization", "")
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def first_missing_field(payload: dict) -> Optional[str]:
    for field in REQUIRED_FIELDS:
        if not payload.get(field):
            return field
    return None


@router.post(
    DEFAULT_SUBMIT_PATH,
    responses={
        200: {"description": "Row appended"},
        400: {"description": "A required field is missing"},
        401: {"description": "Missing or wrong client key"},
        500: {"description": "Credential, token or spreadsheet failure"},
    },
    summary="Append a daily-worker registration to the payroll sheet",
)
async def submit_payroll_data(request: Request) -> JSONResponse:
    if not _authorized(request):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
    except ValueError as exc:
        logger.warning("unreadable submission body: %s", exc)
        return JSONResponse({"error": FAILURE_MESSAGE, "details": str(exc)}, status_code=500)

    missing = first_missing_field(payload)
    if missing:
        return JSONResponse({"error": f"Field {missing} is required"}, status_code=400)

    try:
        writer = request.app.state.writer_factory()
        registration = WorkerRegistration.model_validate(payload)
        updated_range = await run_in_threadpool(writer.append, registration)
    except CredentialsNotConfigured as exc:
        logger.error("%s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    except Exception as exc:
        logger.exception("Error in submit-payroll-data")
        return JSONResponse({"error": FAILURE_MESSAGE, "details": str(exc)}, status_code=500)

    return JSONResponse(
        {"success": True, "message": SUCCESS_MESSAGE, "updatedRange": updated_range}
    )
