import re
from datetime import date
from typing import Any, Dict, Iterable, Literal, Mapping, Optional

from registration.state import REQUIRED_ATTACHMENTS, REQUIRED_FIELDS, WizardState

NIK_PATTERN = re.compile(r"\d{16}", re.ASCII)
PHONE_PATTERN = re.compile(r"(\+62|62|0)[0-9]{9,13}")

REQUIRED_MESSAGE = "Field ini wajib diisi"
NIK_MESSAGE = "NIK harus 16 digit angka"
DUPLICATE_NIK_MESSAGE = "NIK sudah terdaftar sebelumnya"
PHONE_MESSAGE = "Format nomor HP tidak valid"
WHATSAPP_MESSAGE = "Format nomor WhatsApp tidak valid"
BIRTH_DATE_MESSAGE = "Format tanggal lahir tidak valid"


def parse_birth_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def compute_age(birth: date, today: date) -> int:
    """Whole years between birth and today."""
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


class RegistrationValidator:
    def __init__(self, required_fields: Optional[Iterable[str]] = None):
        self.required_fields = tuple(required_fields or REQUIRED_FIELDS)

    def validate(
        self,
        record: Mapping[str, str],
        attachments: Mapping[str, object],
        used_niks: Iterable[str] = (),
    ) -> Dict[str, str]:
        errors: Dict[str, str] = {}

        nik = record.get("nik", "").strip()
        if nik and nik in set(used_niks):
            errors["nik"] = DUPLICATE_NIK_MESSAGE

        for field in self.required_fields:
            val = record.get(field, "")
            if not val or not val.strip():
                errors[field] = REQUIRED_MESSAGE

        for field, message in REQUIRED_ATTACHMENTS.items():
            if not attachments.get(field):
                errors[field] = message

        if nik and not NIK_PATTERN.fullmatch(nik):
            errors["nik"] = NIK_MESSAGE

        no_hp = record.get("noHp", "").strip()
        if no_hp and not PHONE_PATTERN.fullmatch(no_hp):
            errors["noHp"] = PHONE_MESSAGE

        no_wa = record.get("noWaKontakDarurat", "").strip()
        if no_wa and not PHONE_PATTERN.fullmatch(no_wa):
            errors["noWaKontakDarurat"] = WHATSAPP_MESSAGE

        birth = record.get("tanggalLahir", "").strip()
        if birth and parse_birth_date(birth) is None:
            errors["tanggalLahir"] = BIRTH_DATE_MESSAGE

        return errors

    def validate_state(self, state: WizardState) -> Dict[str, Any]:
        return {
            "errors": self.validate(state.record, state.attachments, state.used_niks)
        }

    @staticmethod
    def should_review(state: WizardState) -> Literal["end", "review"]:
        return "review" if len(state.errors) == 0 else "end"
