"""
FastAPI application factory for the payroll onboarding service.

Two surfaces share one process:

    POST /functions/v1/submit-payroll-data   JSON submission endpoint
    GET  /, POST /form, /back, /submit, /reset, GET /whatsapp
                                             HTML registration wizard

Usage:
    python main.py
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.templating import Jinja2Templates

from api.routes import submission, wizard
from config.settings import ClientConfig, EndpointConfig
from persistence.crypto import FieldCipher
from persistence.encrypted_memory_saver import EncryptedInMemorySaver
from registration.client import SubmissionClient
from registration.graph import RegistrationGraphFactory, Submitter
from registration.validator import RegistrationValidator
from sheets.writer import SheetWriter

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(log_format: str = "text") -> None:
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    logging.basicConfig(handlers=[handler], level=logging.INFO, force=True)


def create_app(
    endpoint_config: Optional[EndpointConfig] = None,
    client_config: Optional[ClientConfig] = None,
    submitter: Optional[Submitter] = None,
    writer_factory: Optional[Callable[[], SheetWriter]] = None,
) -> FastAPI:
    """Create and configure the application.

    Args:
        endpoint_config: Override endpoint settings (defaults to the environment).
        client_config: Override wizard settings (defaults to the environment).
        submitter: What the wizard submits through; defaults to an HTTP
            SubmissionClient pointed at ``client_config.submit_url``.
        writer_factory: Builds the SheetWriter for each submission; defaults
            to one signing with the configured service-account key.
    """
    endpoint_config = endpoint_config or EndpointConfig.from_env()
    client_config = client_config or ClientConfig.from_env()
    configure_logging(endpoint_config.log_format)

    if submitter is None:
        key = client_config.client_key
        submitter = SubmissionClient(
            client_config.submit_url, key.get_secret_value() if key else None
        )

    if writer_factory is None:
        def writer_factory() -> SheetWriter:
            blob = endpoint_config.service_account_key
            return SheetWriter.from_blob(
                blob.get_secret_value() if blob else None,
                endpoint_config.spreadsheet_id,
                endpoint_config.sheet_range,
            )

    enc = client_config.encryption_key
    cipher = FieldCipher.from_b64(enc.get_secret_value() if enc else None)
    factory = RegistrationGraphFactory(RegistrationValidator(), submitter)

    app = FastAPI(
        title="Payroll Onboarding",
        summary="Daily-worker registration wizard and spreadsheet submission endpoint.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=endpoint_config.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.state.endpoint_config = endpoint_config
    app.state.client_config = client_config
    app.state.writer_factory = writer_factory
    app.state.graph = factory.compile(checkpointer=EncryptedInMemorySaver(cipher))
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    app.include_router(submission.router)
    app.include_router(wizard.router)
    return app
