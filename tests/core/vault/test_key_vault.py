"""
Tests for the AES-256-GCM key vault.
"""

import pytest

from chatwallet.config import Settings
from chatwallet.core.errors import ConfigurationError, IntegrityError
from chatwallet.core.vault import EncryptedKey, KeyVault


KEY = bytes(range(32))
PRIVATE_KEY = "0x" + "ab" * 32


def _flip_first_byte(hex_text: str) -> str:
    first = int(hex_text[:2], 16) ^ 0x01
    return f"{first:02x}{hex_text[2:]}"


def test_round_trip():
    vault = KeyVault(KEY)
    sealed = vault.encrypt(PRIVATE_KEY)

    assert vault.decrypt(sealed.ciphertext, sealed.iv, sealed.tag) == PRIVATE_KEY
    assert vault.decrypt_record(sealed) == PRIVATE_KEY


def test_nonce_and_tag_sizes():
    sealed = KeyVault(KEY).encrypt(PRIVATE_KEY)

    assert len(bytes.fromhex(sealed.iv)) == 16
    assert len(bytes.fromhex(sealed.tag)) == 16
    assert len(bytes.fromhex(sealed.ciphertext)) == len(PRIVATE_KEY)


def test_each_encryption_uses_a_fresh_nonce():
    vault = KeyVault(KEY)
    first = vault.encrypt(PRIVATE_KEY)
    second = vault.encrypt(PRIVATE_KEY)

    assert first.iv != second.iv
    assert first.ciphertext != second.ciphertext


@pytest.mark.parametrize("field", ["ciphertext", "iv", "tag"])
def test_tampering_raises_integrity_error(field):
    vault = KeyVault(KEY)
    sealed = vault.encrypt(PRIVATE_KEY)
    parts = {"ciphertext": sealed.ciphertext, "iv": sealed.iv, "tag": sealed.tag}
    parts[field] = _flip_first_byte(parts[field])

    with pytest.raises(IntegrityError):
        vault.decrypt(**parts)


def test_wrong_key_raises_integrity_error():
    sealed = KeyVault(KEY).encrypt(PRIVATE_KEY)
    other = KeyVault(bytes(32))

    with pytest.raises(IntegrityError):
        other.decrypt_record(sealed)


def test_malformed_hex_raises_integrity_error():
    vault = KeyVault(KEY)
    with pytest.raises(IntegrityError):
        vault.decrypt_record(EncryptedKey(ciphertext="zz", iv="00" * 16, tag="00" * 16))
    with pytest.raises(IntegrityError):
        vault.decrypt_record(EncryptedKey(ciphertext="00", iv="00" * 12, tag="00" * 16))


def test_key_must_be_32_bytes():
    with pytest.raises(ConfigurationError):
        KeyVault(b"short")
    with pytest.raises(ConfigurationError):
        KeyVault.from_hex("not-hex")


def test_from_settings_uses_configured_key():
    settings = Settings(wallet_encryption_key="0x" + KEY.hex(), environment="production")
    vault = KeyVault.from_settings(settings)

    assert vault.insecure is False
    sealed = vault.encrypt(PRIVATE_KEY)
    assert KeyVault(KEY).decrypt_record(sealed) == PRIVATE_KEY


def test_development_fallback_is_marked_insecure():
    vault = KeyVault.from_settings(Settings(wallet_encryption_key="", environment="development"))

    assert vault.insecure is True
    assert vault.decrypt_record(vault.encrypt(PRIVATE_KEY)) == PRIVATE_KEY


def test_production_refuses_development_fallback():
    with pytest.raises(ConfigurationError):
        KeyVault.from_settings(Settings(wallet_encryption_key="", environment="production"))
