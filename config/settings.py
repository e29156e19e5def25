import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, SecretStr

load_dotenv()

DEFAULT_SUBMIT_PATH = "/functions/v1/submit-payroll-data"
DEFAULT_SPREADSHEET_ID = "1BNhyJfE2ejqAAXes1gz6HaBd2KijtG86xkGA1AbxXDY"
DEFAULT_SHEET_RANGE = "Sheet1!A:AD"


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


class ClientConfig(BaseModel):
    """Settings for the wizard side: where to submit and how to reach the coordinator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    submit_url: str
    client_key: Optional[SecretStr] = None
    whatsapp_number: str
    encryption_key: Optional[SecretStr] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        key = _optional("SUBMIT_CLIENT_KEY")
        enc = _optional("ENCRYPTION_KEY")
        return cls(
            submit_url=os.getenv("SUBMIT_URL", f"http://localhost:8000{DEFAULT_SUBMIT_PATH}"),
            client_key=SecretStr(key) if key else None,
            whatsapp_number=os.getenv("WHATSAPP_NUMBER", "6281234567890"),
            encryption_key=SecretStr(enc) if enc else None,
        )


class EndpointConfig(BaseModel):
    """Settings for the submission endpoint and the spreadsheet it writes to."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    service_account_key: Optional[SecretStr] = None
    spreadsheet_id: str = DEFAULT_SPREADSHEET_ID
    sheet_range: str = DEFAULT_SHEET_RANGE
    client_key: Optional[SecretStr] = None
    log_format: str = "text"
    cors_origins: List[str] = ["*"]

    @classmethod
    def from_env(cls) -> "EndpointConfig":
        blob = _optional("GOOGLE_SERVICE_ACCOUNT_KEY")
        key = _optional("SUBMIT_CLIENT_KEY")
        origins = os.getenv("APP_CORS_ORIGINS", "*")
        return cls(
            service_account_key=SecretStr(blob) if blob else None,
            spreadsheet_id=os.getenv("SPREADSHEET_ID", DEFAULT_SPREADSHEET_ID),
            sheet_range=os.getenv("SHEET_RANGE", DEFAULT_SHEET_RANGE),
            client_key=SecretStr(key) if key else None,
            log_format=os.getenv("APP_LOG_FORMAT", "text").lower(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
