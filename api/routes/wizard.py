"""
HTML registration wizard.

Routes:
    GET  /           form, review or confirmation for the session's step
    POST /form       apply changed fields and uploads, then try to advance
    POST /back       review -> form
    POST /submit     send the reviewed record
    POST /reset      start a new registration
    GET  /whatsapp   redirect to the pre-filled WhatsApp message
"""

import logging
import uuid
from typing import Tuple

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from registration.options import ATTACHMENT_LABELS, SECTIONS
from registration.session import WizardInputError, WizardSession, WizardStepError
from registration.state import ATTACHMENT_FIELDS, DERIVED_FIELDS, FIELD_ORDER

logger = logging.getLogger(__name__)

router = APIRouter(tags=["wizard"])

SESSION_COOKIE = "wizard_session"

TEMPLATES = {
    "form": "form.html",
    "review": "review.html",
    "confirmation": "confirmation.html",
}


def _session(request: Request) -> Tuple[WizardSession, str]:
    sid = request.cookies.get(SESSION_COOKIE) or uuid.uuid4().hex
    session = WizardSession(
        request.app.state.graph,
        sid,
        whatsapp_number=request.app.state.client_config.whatsapp_number,
    )
    return session, sid


def _with_cookie(response, sid: str):
    response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax")
    return response


def _back_to_wizard(sid: str) -> RedirectResponse:
    return _with_cookie(RedirectResponse("/", status_code=303), sid)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def show_wizard(request: Request):
    session, sid = _session(request)
    state = await run_in_threadpool(lambda: session.state)
    response = request.app.state.templates.TemplateResponse(
        request,
        TEMPLATES[state.step],
        {
            "state": state,
            "sections": SECTIONS,
            "attachment_labels": ATTACHMENT_LABELS,
        },
    )
    return _with_cookie(response, sid)


def _apply_form(session: WizardSession, form) -> None:
    current = session.state.record
    for name in FIELD_ORDER:
        if name in DERIVED_FIELDS:
            continue
        value = form.get(name)
        if isinstance(value, str) and value.strip() != current.get(name, ""):
            session.edit(name, value)

    for name in ATTACHMENT_FIELDS:
        upload = form.get(name)
        if not getattr(upload, "filename", None):
            continue
        try:
            session.attach(name, upload.filename, upload.content_type or "", upload.size or 0)
        except WizardInputError as exc:
            logger.warning("rejected upload for %s: %s", name, exc)

    session.next()


@router.post("/form", include_in_schema=False)
async def submit_form(request: Request):
    session, sid = _session(request)
    form = await request.form()
    await run_in_threadpool(_apply_form, session, form)
    return _back_to_wizard(sid)


@router.post("/back", include_in_schema=False)
async def go_back(request: Request):
    session, sid = _session(request)
    await run_in_threadpool(session.back)
    return _back_to_wizard(sid)


@router.post("/submit", include_in_schema=False)
async def submit_registration(request: Request):
    session, sid = _session(request)
    await run_in_threadpool(session.submit)
    return _back_to_wizard(sid)


@router.post("/reset", include_in_schema=False)
async def reset_registration(request: Request):
    session, sid = _session(request)
    await run_in_threadpool(session.reset)
    return _back_to_wizard(sid)


@router.get("/whatsapp", include_in_schema=False)
async def whatsapp(request: Request):
    session, sid = _session(request)
    try:
        link = await run_in_threadpool(session.whatsapp_link)
    except WizardStepError:
        return _back_to_wizard(sid)
    return _with_cookie(RedirectResponse(link, status_code=302), sid)
