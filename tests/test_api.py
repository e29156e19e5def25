"""
Tests for api/app.py, the submission endpoint and the HTML wizard routes.
"""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from api.app import create_app
from config.settings import DEFAULT_SUBMIT_PATH, ClientConfig, EndpointConfig
from registration.state import WorkerRegistration
from sheets.errors import SheetsError

from conftest import VALID_ATTACHMENTS, VALID_RECORD, FakeSubmitter


def _client_config():
    return ClientConfig(submit_url="http://testserver" + DEFAULT_SUBMIT_PATH, whatsapp_number="6281234567890")


@pytest.fixture
def writer():
    writer = MagicMock()
    writer.append.return_value = "Sheet1!A2:AD2"
    return writer


@pytest.fixture
def writer_factory(writer):
    return MagicMock(return_value=writer)


@pytest.fixture
def wizard_submitter():
    return FakeSubmitter()


@pytest.fixture
def client(writer_factory, wizard_submitter):
    app = create_app(
        endpoint_config=EndpointConfig(),
        client_config=_client_config(),
        submitter=wizard_submitter,
        writer_factory=writer_factory,
    )
    return TestClient(app)


# ── submission endpoint ──────────────────────────────────────────────────────

def test_missing_nama_is_rejected_before_any_sheet_call(client, writer_factory):
    body = {k: v for k, v in VALID_RECORD.items() if k != "nama"}

    resp = client.post(DEFAULT_SUBMIT_PATH, json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Field nama is required"}
    writer_factory.assert_not_called()


def test_first_missing_field_is_named(client):
    resp = client.post(DEFAULT_SUBMIT_PATH, json={"nama": "Budi"})
    assert resp.json() == {"error": "Field opsId is required"}


def test_optional_fields_may_be_absent(client, writer):
    body = {k: v for k, v in VALID_RECORD.items() if k not in ("npwp", "rtRw", "noRumah", "kodePos")}

    resp = client.post(DEFAULT_SUBMIT_PATH, json=body)

    assert resp.status_code == 200
    registration = writer.append.call_args.args[0]
    assert registration.npwp == ""


def test_success_returns_updated_range(client, writer):
    resp = client.post(DEFAULT_SUBMIT_PATH, json={**VALID_RECORD, "umur": "31"})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Data berhasil disimpan ke Google Sheets",
        "updatedRange": "Sheet1!A2:AD2",
    }
    registration = writer.append.call_args.args[0]
    assert isinstance(registration, WorkerRegistration)
    assert registration.nik == VALID_RECORD["nik"]
    assert registration.umur == "31"


def test_numeric_values_are_accepted(client, writer):
    resp = client.post(DEFAULT_SUBMIT_PATH, json={**VALID_RECORD, "umur": 31})

    assert resp.status_code == 200
    assert writer.append.call_args.args[0].umur == "31"


def test_sheet_failure_is_500_with_details(client, writer):
    writer.append.side_effect = SheetsError("Failed to write to Google Sheets: 403")

    resp = client.post(DEFAULT_SUBMIT_PATH, json=VALID_RECORD)

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Terjadi kesalahan saat menyimpan data",
        "details": "Failed to write to Google Sheets: 403",
    }


def test_unconfigured_credentials_is_500():
    app = create_app(
        endpoint_config=EndpointConfig(service_account_key=None),
        client_config=_client_config(),
        submitter=FakeSubmitter(),
    )

    resp = TestClient(app).post(DEFAULT_SUBMIT_PATH, json=VALID_RECORD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Google Service Account key not configured"}


def test_malformed_credentials_is_500():
    app = create_app(
        endpoint_config=EndpointConfig(service_account_key=SecretStr("{not json")),
        client_config=_client_config(),
        submitter=FakeSubmitter(),
    )

    resp = TestClient(app).post(DEFAULT_SUBMIT_PATH, json=VALID_RECORD)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Terjadi kesalahan saat menyimpan data"


def test_invalid_json_is_500(client):
    resp = client.post(
        DEFAULT_SUBMIT_PATH, content=b"{oops", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 500
    assert resp.json()["error"] == "Terjadi kesalahan saat menyimpan data"


def test_client_key_is_enforced_when_configured(writer_factory):
    app = create_app(
        endpoint_config=EndpointConfig(client_key=SecretStr("anon-key")),
        client_config=_client_config(),
        submitter=FakeSubmitter(),
        writer_factory=writer_factory,
    )
    client = TestClient(app)

    assert client.post(DEFAULT_SUBMIT_PATH, json=VALID_RECORD).status_code == 401
    resp = client.post(
        DEFAULT_SUBMIT_PATH, json=VALID_RECORD, headers={"Authorization": "Bearer anon-key"}
    )
    assert resp.status_code == 200


def test_cors_preflight(client):
    resp = client.options(
        DEFAULT_SUBMIT_PATH,
        headers={
            "Origin": "https://forms.example.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


# ── HTML wizard ──────────────────────────────────────────────────────────────

def _files():
    return {
        field: (filename, b"\xff\xd8\xff", content_type)
        for field, (filename, content_type, _size) in VALID_ATTACHMENTS.items()
    }


def test_form_page_renders(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert 'name="nik"' in resp.text
    assert "wizard_session" in resp.cookies


def test_incomplete_form_shows_errors(client):
    resp = client.post("/form", data={"nama": "Budi"})

    assert resp.status_code == 200
    assert "Field ini wajib diisi" in resp.text
    assert "Foto KTP wajib diupload" in resp.text
    assert 'value="Budi"' in resp.text


def test_full_wizard_flow(client, wizard_submitter):
    resp = client.post("/form", data=VALID_RECORD, files=_files())
    assert "Review Data" in resp.text
    assert "ktp.jpg" in resp.text

    resp = client.post("/submit")
    assert "Data Berhasil Dikirim" in resp.text
    assert wizard_submitter.calls[0]["nik"] == VALID_RECORD["nik"]

    resp = client.get("/whatsapp", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("https://wa.me/6281234567890?text=")

    resp = client.post("/reset")
    assert 'name="nik"' in resp.text


def test_back_from_review_keeps_values(client):
    client.post("/form", data=VALID_RECORD, files=_files())

    resp = client.post("/back")

    assert f'value="{VALID_RECORD["nik"]}"' in resp.text


def test_failed_submit_shows_banner(client, wizard_submitter):
    wizard_submitter.error = "Failed to write to Google Sheets: 500"
    client.post("/form", data=VALID_RECORD, files=_files())

    resp = client.post("/submit")

    assert "Review Data" in resp.text
    assert "Failed to write to Google Sheets: 500" in resp.text


def test_whatsapp_before_submission_goes_home(client):
    resp = client.get("/whatsapp", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"


def test_null_optional_field_becomes_empty_cell(client, writer):
    resp = client.post(DEFAULT_SUBMIT_PATH, json={**VALID_RECORD, "npwp": None, "kodePos": None})

    assert resp.status_code == 200
    registration = writer.append.call_args.args[0]
    assert registration.npwp == ""
    assert registration.kode_pos == ""


def test_null_required_field_is_missing(client, writer_factory):
    resp = client.post(DEFAULT_SUBMIT_PATH, json={**VALID_RECORD, "nama": None})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Field nama is required"}
    writer_factory.assert_not_called()
