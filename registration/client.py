import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """The submission endpoint rejected the payload or could not be reached."""


class SubmissionClient:
    """POSTs a registration payload to the submission endpoint."""

    def __init__(
        self,
        url: str,
        client_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.client_key = client_key
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.client_key:
            headers["Authorization"] = f"Bearer {self.client_key}"
        return headers

    def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(self.url, json=payload, headers=self._headers())
        except requests.RequestException as exc:
            logger.warning("submission request failed: %s", exc)
            raise SubmissionError(f"Gagal menghubungi server: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok:
            message = body.get("details") or body.get("error") or f"HTTP {response.status_code}"
            logger.info("submission rejected with status %s", response.status_code)
            raise SubmissionError(message)

        return body
