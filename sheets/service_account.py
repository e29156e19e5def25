import json
import logging
from typing import Iterable

import google.auth.exceptions
import requests
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from sheets.errors import SheetsError

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


def load_credentials(
    blob: str, scopes: Iterable[str] = (SHEETS_SCOPE,)
) -> service_account.Credentials:
    """Parse a service-account key file (JSON text) into signing credentials."""
    info = json.loads(blob)
    info.setdefault("token_uri", TOKEN_URI)
    return service_account.Credentials.from_service_account_info(info, scopes=list(scopes))


def fetch_access_token(
    credentials: service_account.Credentials, session: requests.Session
) -> str:
    """Sign a fresh one-hour assertion and exchange it for a bearer token.

    Nothing is reused between calls; every call signs and exchanges again.
    """
    try:
        credentials.refresh(Request(session))
    except google.auth.exceptions.GoogleAuthError as exc:
        logger.error("token exchange failed: %s", exc)
        raise SheetsError("Failed to get access token from Google") from exc
    return credentials.token
