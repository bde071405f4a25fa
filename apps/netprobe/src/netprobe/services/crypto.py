"""Decryption of equipment credentials stored by the equipment registry."""

import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.config import settings
from ..core.logging import get_logger

logger = get_logger(__name__)


class CredentialCipher:
    """AES-256-GCM cipher for device passwords and SNMP secrets.

    Format: iv_hex:auth_tag_hex:encrypted_hex, keyed by the SHA-256 digest
    of the shared session secret. Values that are not in this format are
    plaintext from older records and pass through unchanged.
    """

    IV_LENGTH = 12
    TAG_LENGTH = 16

    def __init__(self, secret: str | None = None) -> None:
        raw_secret = secret or settings.credential_secret
        self._key = hashlib.sha256(raw_secret.encode()).digest()

    @classmethod
    def is_encrypted(cls, value: str | None) -> bool:
        """Check whether a value looks like iv:tag:ciphertext."""
        if not value:
            return False
        parts = value.split(":")
        if len(parts) != 3:
            return False
        iv_hex, tag_hex, encrypted_hex = parts
        try:
            iv = bytes.fromhex(iv_hex)
            tag = bytes.fromhex(tag_hex)
            bytes.fromhex(encrypted_hex)
        except ValueError:
            return False
        return len(iv) == cls.IV_LENGTH and len(tag) == cls.TAG_LENGTH

    def encrypt(self, plaintext: str) -> str:
        if not plaintext:
            return ""
        iv = os.urandom(self.IV_LENGTH)
        ciphertext_with_tag = AESGCM(self._key).encrypt(iv, plaintext.encode(), None)
        ciphertext = ciphertext_with_tag[:-self.TAG_LENGTH]
        auth_tag = ciphertext_with_tag[-self.TAG_LENGTH:]
        return f"{iv.hex()}:{auth_tag.hex()}:{ciphertext.hex()}"

    def decrypt(self, value: str | None) -> str:
        """Decrypt a stored credential; plaintext and undecryptable values pass through."""
        if not value:
            return ""
        if not self.is_encrypted(value):
            return value
        iv_hex, tag_hex, encrypted_hex = value.split(":")
        try:
            decrypted = AESGCM(self._key).decrypt(
                bytes.fromhex(iv_hex),
                bytes.fromhex(encrypted_hex) + bytes.fromhex(tag_hex),
                None,
            )
            return decrypted.decode()
        except (InvalidTag, UnicodeDecodeError) as e:
            logger.error("credential_decryption_failed", error=type(e).__name__)
            return value


# Singleton instance
_credential_cipher: CredentialCipher | None = None


def get_credential_cipher() -> CredentialCipher:
    """Get the credential cipher singleton."""
    global _credential_cipher
    if _credential_cipher is None:
        _credential_cipher = CredentialCipher()
    return _credential_cipher
