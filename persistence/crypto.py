import base64
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

FORMAT_HEADER = b"v1"


class FieldCipher:
    """AES-256-GCM for checkpoint channel values."""

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise RuntimeError(
                f"ENCRYPTION_KEY must decode to 32 bytes for AES-256. Got {len(key)} bytes."
            )
        self._aesgcm = AESGCM(key)

    @classmethod
    def from_b64(cls, key_b64: Optional[str]) -> "FieldCipher":
        if not key_b64:
            # session checkpoints only live in memory, so a per-process key is enough
            logger.warning("ENCRYPTION_KEY not set; using an ephemeral key for session state")
            return cls(AESGCM.generate_key(bit_length=256))
        return cls(base64.b64decode(key_b64))

    @staticmethod
    def should_encrypt(key: str, encrypt_keys: set[str]) -> bool:
        return key in encrypt_keys

    def encrypt_bytes(self, plaintext: bytes, aad: bytes) -> str:
        nonce = os.urandom(12)
        ct = self._aesgcm.encrypt(nonce, plaintext, aad)
        return base64.b64encode(FORMAT_HEADER + nonce + ct).decode("utf-8")

    def decrypt_bytes(self, payload_b64: str, aad: bytes) -> bytes:
        raw = base64.b64decode(payload_b64.encode("utf-8"))
        if raw[:2] != FORMAT_HEADER:
            raise ValueError("Not encrypted with expected format/version header")
        nonce = raw[2:14]
        ct = raw[14:]
        return self._aesgcm.decrypt(nonce, ct, aad)
