"""
AES-256-GCM key vault for custodial private keys.

Each call to `encrypt` draws a fresh 128-bit nonce; callers cannot supply
one. The output splits into ciphertext, iv and tag (hex) so it can be
stored column-per-field.
"""

import hashlib
import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import ConfigurationError, IntegrityError


logger = logging.getLogger(__name__)

KEY_BYTES = 32
NONCE_BYTES = 16
TAG_BYTES = 16

_INSECURE_DEV_SEED = b"chatwallet-dev-key-do-not-use-in-prod"


@dataclass(frozen=True)
class EncryptedKey:
    """Ciphertext, nonce and GCM tag, all hex encoded."""

    ciphertext: str
    iv: str
    tag: str


class KeyVault:
    """Encrypts and decrypts private keys with a single 32-byte secret."""

    def __init__(self, key: bytes, *, insecure: bool = False):
        if len(key) != KEY_BYTES:
            raise ConfigurationError(
                f"Wallet encryption key must be {KEY_BYTES} bytes, got {len(key)}"
            )
        self._aead = AESGCM(key)
        self.insecure = insecure

    @classmethod
    def from_hex(cls, key_hex: str) -> "KeyVault":
        try:
            key = bytes.fromhex(key_hex)
        except ValueError as exc:
            raise ConfigurationError("WALLET_ENCRYPTION_KEY must be 64 hex characters") from exc
        return cls(key)

    @classmethod
    def insecure_development(cls) -> "KeyVault":
        """Vault keyed by a hash of a public constant. Development and tests only."""
        logger.warning(
            "WALLET_ENCRYPTION_KEY is not set; using the insecure development key. "
            "Wallets created now are not protected at rest."
        )
        return cls(hashlib.sha256(_INSECURE_DEV_SEED).digest(), insecure=True)

    @classmethod
    def from_settings(cls, settings) -> "KeyVault":
        """Build the vault for the configured environment.

        Refuses the development fallback in production.
        """
        if settings.has_encryption_key:
            return cls.from_hex(settings.wallet_encryption_key)
        if settings.is_production:
            raise ConfigurationError(
                "WALLET_ENCRYPTION_KEY is required when ENVIRONMENT=production"
            )
        return cls.insecure_development()

    def encrypt(self, plaintext: str) -> EncryptedKey:
        nonce = os.urandom(NONCE_BYTES)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return EncryptedKey(ciphertext=ciphertext.hex(), iv=nonce.hex(), tag=tag.hex())

    def decrypt(self, ciphertext: str, iv: str, tag: str) -> str:
        try:
            nonce = bytes.fromhex(iv)
            sealed = bytes.fromhex(ciphertext) + bytes.fromhex(tag)
        except ValueError as exc:
            raise IntegrityError("Encrypted key is malformed") from exc

        if len(nonce) != NONCE_BYTES or len(sealed) < TAG_BYTES:
            raise IntegrityError("Encrypted key is malformed")

        try:
            plaintext = self._aead.decrypt(nonce, sealed, None)
        except InvalidTag as exc:
            raise IntegrityError("Encrypted key failed authentication") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:  # pragma: no cover - authenticated data
            raise IntegrityError("Encrypted key is not valid text") from exc

    def decrypt_record(self, encrypted: EncryptedKey) -> str:
        return self.decrypt(encrypted.ciphertext, encrypted.iv, encrypted.tag)
