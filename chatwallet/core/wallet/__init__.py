"""
Custodial wallet store: one encrypted wallet per chat session.
"""

from .manager import EXPORT_CONFIRMATION_PHRASE, WalletManager
from .models import (
    ExportConfirmation,
    ExportRequest,
    ExportResult,
    TokenBalance,
    WalletBalance,
    WalletInfo,
    WalletRecord,
)
from .repository import InMemoryWalletRepository, WalletRepository
from .signer import ERC20_ABI, MAX_UINT256, SessionSigner, SignerFactory

__all__ = [
    "EXPORT_CONFIRMATION_PHRASE",
    "WalletManager",
    "ExportConfirmation",
    "ExportRequest",
    "ExportResult",
    "TokenBalance",
    "WalletBalance",
    "WalletInfo",
    "WalletRecord",
    "InMemoryWalletRepository",
    "WalletRepository",
    "ERC20_ABI",
    "MAX_UINT256",
    "SessionSigner",
    "SignerFactory",
]
