from typing import Mapping
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me"


def confirmation_message(summary: Mapping[str, str]) -> str:
    lines = [
        "Halo, saya sudah mengisi formulir data penggajian Daily Worker.",
        "",
        f"Nama: {summary.get('nama', '')}",
        f"NIK: {summary.get('nik', '')}",
        f"OPS ID: {summary.get('opsId', '')}",
        f"Lokasi: {summary.get('lokasi', '')}",
    ]
    if summary.get("updatedRange"):
        lines.append(f"Referensi: {summary['updatedRange']}")
    lines += ["", "Mohon konfirmasinya. Terima kasih."]
    return "\n".join(lines)


def whatsapp_link(number: str, message: str) -> str:
    digits = "".join(ch for ch in number if ch.isdigit())
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"
