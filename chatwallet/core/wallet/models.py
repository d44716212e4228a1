"""
Custodial wallet models.

A session owns exactly one WalletRecord. The record only ever holds the
encrypted key; the address is derived from the key at creation time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..vault import EncryptedKey


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WalletRecord:
    """Stored custodial wallet. Never mutated in place."""
    address: str
    encrypted_key: str      # AES-256-GCM ciphertext (hex)
    iv: str                 # Nonce (hex)
    auth_tag: str           # GCM tag (hex)
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_encrypted(cls, address: str, encrypted: EncryptedKey) -> "WalletRecord":
        return cls(
            address=address,
            encrypted_key=encrypted.ciphertext,
            iv=encrypted.iv,
            auth_tag=encrypted.tag,
        )

    @property
    def sealed(self) -> EncryptedKey:
        return EncryptedKey(ciphertext=self.encrypted_key, iv=self.iv, tag=self.auth_tag)


@dataclass(frozen=True)
class WalletInfo:
    """Public view of a session wallet."""
    address: str
    session_id: str
    created_at: datetime


@dataclass
class ExportConfirmation:
    """Private key export request. Stored while pending, consumed on confirm."""
    requested_at: float
    confirmed: bool = False


@dataclass(frozen=True)
class ExportRequest:
    pending: bool
    message: str


@dataclass(frozen=True)
class ExportResult:
    success: bool
    message: str
    private_key: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class TokenBalance:
    symbol: str
    address: str
    balance: str        # Smallest unit
    formatted: str


@dataclass(frozen=True)
class WalletBalance:
    eth: str            # Wei
    eth_formatted: str
    tokens: List[TokenBalance] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return int(self.eth) == 0 and not self.tokens
