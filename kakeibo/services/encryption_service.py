"""AES-256-GCM encryption for stored account credentials."""

import base64
import os
import re
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from kakeibo.core.utils import get_logger, utcnow

logger = get_logger("kakeibo.security")

IV_LENGTH = 12
AUTH_TAG_LENGTH = 16
MASTER_KEY_HEX_LENGTH = 64


@dataclass(frozen=True)
class EncryptedData:
    """Base64-encoded ciphertext, IV and authentication tag."""

    ciphertext: str
    iv: str
    auth_tag: str


class EncryptionService:
    """Encrypts and decrypts strings with a 32-byte master key."""

    def __init__(self, master_key: str) -> None:
        """Initialize with a master key given as 64 hex characters."""
        if not master_key:
            msg = "MASTER_KEY is required"
            raise ValueError(msg)
        if len(master_key) != MASTER_KEY_HEX_LENGTH:
            msg = "MASTER_KEY must be 64 hex characters (32 bytes)"
            raise ValueError(msg)
        if not re.fullmatch(r"[0-9a-fA-F]+", master_key):
            msg = "MASTER_KEY must be valid hex string"
            raise ValueError(msg)
        self._aesgcm = AESGCM(bytes.fromhex(master_key))

    def encrypt(self, plaintext: str) -> EncryptedData:
        """Encrypt a UTF-8 string with a fresh random IV."""
        iv = os.urandom(IV_LENGTH)
        sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        # AESGCM appends the tag to the ciphertext
        ciphertext, tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
        return EncryptedData(
            ciphertext=base64.b64encode(ciphertext).decode("ascii"),
            iv=base64.b64encode(iv).decode("ascii"),
            auth_tag=base64.b64encode(tag).decode("ascii"),
        )

    def decrypt(self, encrypted: EncryptedData) -> str:
        """Decrypt previously encrypted data; tampering raises cryptography's InvalidTag."""
        iv = base64.b64decode(encrypted.iv)
        sealed = base64.b64decode(encrypted.ciphertext) + base64.b64decode(encrypted.auth_tag)
        plaintext = self._aesgcm.decrypt(iv, sealed, None)
        logger.info(f"Decrypt operation performed at {utcnow().isoformat()}")
        return plaintext.decode("utf-8")
