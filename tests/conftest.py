from datetime import date

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from persistence.crypto import FieldCipher
from persistence.encrypted_memory_saver import EncryptedInMemorySaver
from registration.client import SubmissionError
from registration.graph import RegistrationGraphFactory
from registration.session import WizardSession
from registration.validator import RegistrationValidator

TODAY = date(2026, 10, 19)

VALID_RECORD = {
    "opsId": "OPS-0042",
    "nama": "Budi Santoso",
    "nik": "3175091705950001",
    "noHp": "081234567890",
    "alamatKtp": "Jl. Raya Bekasi No. 10",
    "alamatDomisili": "Jl. Raya Bekasi No. 10",
    "rtRw": "001/002",
    "noRumah": "10",
    "kelurahan": "Cakung Barat",
    "kecamatan": "Cakung",
    "kota": "Jakarta Timur",
    "kodePos": "13910",
    "tempatLahir": "Jakarta",
    "tanggalLahir": "1995-05-17",
    "jenisKelamin": "Laki-laki",
    "npwp": "",
    "namaAyah": "Slamet",
    "namaIbu": "Sri",
    "noWaKontakDarurat": "+6281298765432",
    "namaKontakDarurat": "Sri",
    "hubunganKontakDarurat": "Orang Tua",
    "noRekening": "1234567890",
    "namaPenerima": "Budi Santoso",
    "jenisBank": "BCA",
    "posisi": "Daily Worker",
    "contractType": "Daily - Worker TDP",
    "departement": "SOC Operator",
    "lokasi": "CAKUNG 2",
}

VALID_ATTACHMENTS = {
    "fotoKtp": ("ktp.jpg", "image/jpeg", 2048),
    "fotoKk": ("kk.png", "image/png", 4096),
    "foto": ("selfie.jpg", "image/jpeg", 1024),
}


class FakeSubmitter:
    def __init__(self, error=None, updated_range="Sheet1!A2:AD2"):
        self.error = error
        self.updated_range = updated_range
        self.calls = []

    def submit(self, payload):
        self.calls.append(payload)
        if self.error:
            raise SubmissionError(self.error)
        return {"success": True, "updatedRange": self.updated_range}


def fill(session, record=None, attachments=None):
    for field, value in (record or VALID_RECORD).items():
        session.edit(field, value)
    for field, (filename, content_type, size) in (attachments or VALID_ATTACHMENTS).items():
        session.attach(field, filename, content_type, size)
    return session.state


@pytest.fixture
def cipher():
    return FieldCipher(AESGCM.generate_key(bit_length=256))


@pytest.fixture
def saver(cipher):
    return EncryptedInMemorySaver(cipher)


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def graph(saver, submitter):
    factory = RegistrationGraphFactory(RegistrationValidator(), submitter, today=lambda: TODAY)
    return factory.compile(checkpointer=saver)


@pytest.fixture
def session(graph):
    return WizardSession(graph, "pytest_thread", whatsapp_number="6281234567890")
