"""
Error Classification

Error types shared by the vault, wallet, trading and security layers.

Every error carries a category. Handlers turn these into structured
results; only IntegrityError is meant to abort the operation that raised it.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Categories of errors surfaced to handlers."""

    VALIDATION = "validation"           # Bad amount, unknown token, bad params
    INTEGRITY = "integrity"             # Ciphertext failed authentication
    UPSTREAM = "upstream"               # RPC / aggregator / provider failure
    TIMEOUT = "timeout"                 # No confirmation within the window
    TRANSACTION_REVERTED = "transaction_reverted"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    CONFIGURATION = "configuration"     # Refused or malformed settings
    UNKNOWN = "unknown"


class ChatWalletError(Exception):
    """Base class for all domain errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChatWalletError):
    """Input could not be used (amount, token, parameters)."""

    category = ErrorCategory.VALIDATION


class IntegrityError(ChatWalletError):
    """Encrypted key material failed authentication. Never recovered silently."""

    category = ErrorCategory.INTEGRITY


class UpstreamError(ChatWalletError):
    """An external service failed. `detail` keeps the raw reason for logs."""

    category = ErrorCategory.UPSTREAM

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.detail = detail
        self.status_code = status_code


class TransactionTimeoutError(UpstreamError):
    """A submitted transaction was not confirmed within the wait window."""

    category = ErrorCategory.TIMEOUT

    def __init__(self, message: str, *, tx_hash: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.tx_hash = tx_hash


class TransactionRevertedError(UpstreamError):
    """A transaction was mined with a failed status."""

    category = ErrorCategory.TRANSACTION_REVERTED

    def __init__(self, message: str, *, tx_hash: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.tx_hash = tx_hash


class ConfigurationError(ChatWalletError):
    """Settings are missing, malformed, or unsafe for this environment."""

    category = ErrorCategory.CONFIGURATION


def error_message(exc: BaseException, fallback: str = "Unknown error") -> str:
    """Extract a readable message from any exception."""
    if isinstance(exc, ChatWalletError):
        return exc.message
    text = str(exc).strip()
    return text or fallback


def classify_error(exc: BaseException) -> ErrorCategory:
    """Map an arbitrary exception onto an ErrorCategory."""
    if isinstance(exc, ChatWalletError):
        return exc.category

    text = str(exc).lower()
    if "insufficient funds" in text:
        return ErrorCategory.INSUFFICIENT_FUNDS
    if "timeout" in text or "timed out" in text:
        return ErrorCategory.TIMEOUT
    if "revert" in text:
        return ErrorCategory.TRANSACTION_REVERTED
    return ErrorCategory.UNKNOWN
