"""
Key vault: authenticated encryption for custodial private keys.
"""

from .crypto import EncryptedKey, KeyVault

__all__ = [
    "EncryptedKey",
    "KeyVault",
]
