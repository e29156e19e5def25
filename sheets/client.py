import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from urllib.parse import quote

import requests

from sheets.errors import SheetsError

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"

# Asia/Jakarta has no DST
JAKARTA = timezone(timedelta(hours=7), "WIB")


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Render ``now`` the way id-ID formats a date-time: ``19/10/2026, 14.05.09``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(JAKARTA).strftime("%d/%m/%Y, %H.%M.%S")


class SheetsClient:
    def __init__(self, spreadsheet_id: str, sheet_range: str, session: requests.Session):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_range = sheet_range
        self.session = session

    @property
    def append_url(self) -> str:
        return (
            f"{SHEETS_API}/{self.spreadsheet_id}/values/"
            f"{quote(self.sheet_range, safe='!:')}:append"
        )

    def append_row(self, access_token: str, row: List[str]) -> Optional[str]:
        """Append one row; returns the range Sheets reports as updated."""
        response = self.session.post(
            self.append_url,
            params={"valueInputOption": "RAW"},
            json={"values": [row]},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )
        if not response.ok:
            logger.error("Google Sheets API error: %s", response.text)
            raise SheetsError(f"Failed to write to Google Sheets: {response.status_code}")

        return (response.json().get("updates") or {}).get("updatedRange")
