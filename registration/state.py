from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WorkerRegistration(BaseModel):
    """One daily-worker registration as it travels on the wire.

    Attribute declaration order is the spreadsheet column order (after the
    timestamp column), so do not reorder fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    ops_id: str = Field(default="", description="OPS ID")
    nama: str = Field(default="", description="Full name")
    nik: str = Field(default="", description="16 digit national ID number")
    no_hp: str = Field(default="", description="Mobile number")
    alamat_ktp: str = Field(default="", description="Address as printed on the ID card")
    alamat_domisili: str = Field(default="", description="Current address")
    rt_rw: str = ""
    no_rumah: str = ""
    kelurahan: str = ""
    kecamatan: str = ""
    kota: str = ""
    kode_pos: str = ""
    tempat_lahir: str = ""
    tanggal_lahir: str = Field(default="", description="YYYY-MM-DD")
    umur: str = Field(default="", description="Derived from tanggal_lahir")
    jenis_kelamin: str = ""
    npwp: str = Field(default="", description="Tax number, optional")
    nama_ayah: str = ""
    nama_ibu: str = ""
    no_wa_kontak_darurat: str = ""
    nama_kontak_darurat: str = ""
    hubungan_kontak_darurat: str = ""
    no_rekening: str = ""
    nama_penerima: str = ""
    jenis_bank: str = ""
    posisi: str = ""
    contract_type: str = ""
    departement: str = ""
    lokasi: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        # an explicit null becomes an empty cell, same as an absent field
        return "" if value is None else value

    def to_payload(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)

    def row_values(self) -> List[str]:
        payload = self.to_payload()
        return [payload[name] for name in FIELD_ORDER]


# wire names, in spreadsheet column order
FIELD_ORDER = tuple(f.alias for f in WorkerRegistration.model_fields.values())

OPTIONAL_FIELDS = frozenset({"rtRw", "noRumah", "kodePos", "npwp"})
DERIVED_FIELDS = frozenset({"umur"})

REQUIRED_FIELDS = tuple(
    name for name in FIELD_ORDER if name not in OPTIONAL_FIELDS | DERIVED_FIELDS
)

ATTACHMENT_FIELDS = ("fotoKtp", "fotoKk", "bukuTabungan", "foto")
REQUIRED_ATTACHMENTS = {
    "fotoKtp": "Foto KTP wajib diupload",
    "fotoKk": "Foto KK wajib diupload",
    "foto": "Foto diri wajib diupload",
}


class Attachment(BaseModel):
    """Metadata of an uploaded document. File contents are not retained."""

    filename: str
    content_type: str
    size: int = 0


Step = Literal["form", "review", "confirmation"]


class WizardState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    step: Step = Field(default="form", description="Current wizard view")

    # form data, keyed by wire name
    record: Dict[str, str] = Field(default_factory=dict)
    attachments: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)

    used_niks: List[str] = Field(default_factory=list)
    submitting: bool = False
    submit_error: Optional[str] = None
    last_submission: Dict[str, str] = Field(default_factory=dict)

    # the event being applied by the current invoke
    action: Optional[str] = None
    field: Optional[str] = None
    value: Optional[Any] = None

    def registration(self) -> WorkerRegistration:
        return WorkerRegistration.model_validate(self.record)
