import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import requests
from google.oauth2 import service_account

from registration.state import WorkerRegistration
from sheets.client import SheetsClient, format_timestamp
from sheets.errors import CredentialsNotConfigured
from sheets.service_account import fetch_access_token, load_credentials

logger = logging.getLogger(__name__)


class SheetWriter:
    """Appends one registration per call: sign, exchange, append.

    Tokens are never cached; every call performs its own exchange.
    """

    def __init__(
        self,
        credentials: service_account.Credentials,
        sheets: SheetsClient,
        session: requests.Session,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.credentials = credentials
        self.sheets = sheets
        self.session = session
        self.clock = clock

    @classmethod
    def from_blob(
        cls,
        blob: Optional[str],
        spreadsheet_id: str,
        sheet_range: str,
        session: Optional[requests.Session] = None,
    ) -> "SheetWriter":
        if not blob:
            raise CredentialsNotConfigured("Google Service Account key not configured")
        session = session or requests.Session()
        return cls(
            credentials=load_credentials(blob),
            sheets=SheetsClient(spreadsheet_id, sheet_range, session),
            session=session,
        )

    def build_row(self, registration: WorkerRegistration, now: datetime) -> list:
        return [format_timestamp(now)] + registration.row_values()

    def append(self, registration: WorkerRegistration) -> Optional[str]:
        now = self.clock()
        token = fetch_access_token(self.credentials, self.session)

        updated_range = self.sheets.append_row(token, self.build_row(registration, now))
        logger.info("appended registration row at %s", updated_range)
        return updated_range
