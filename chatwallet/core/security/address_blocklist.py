"""Known-bad and suspicious address checks."""

import re
from typing import Iterable, List, Optional, Set

from .models import RiskLevel, ScreenResult


ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

DEFAULT_BLOCKED_ADDRESSES = frozenset({
    "0x0000000000000000000000000000000000000000",  # Zero address
    "0x000000000000000000000000000000000000dead",  # Burn address
})

SUSPICIOUS_ADDRESS_PATTERNS = [
    re.compile(r"^0x0{30,}", re.I),  # Vanity leading zeros
    re.compile(r"^0xdead", re.I),
]


def is_address(value: object) -> bool:
    return isinstance(value, str) and bool(ADDRESS_RE.match(value))


class AddressBlocklist:
    """Exact blocklist plus heuristic patterns. Extend with `add`."""

    def __init__(self, blocked: Optional[Iterable[str]] = None):
        self._blocked: Set[str] = {
            address.lower() for address in (DEFAULT_BLOCKED_ADDRESSES if blocked is None else blocked)
        }

    def add(self, address: str) -> None:
        self._blocked.add(address.strip().lower())

    def __contains__(self, address: str) -> bool:
        return address.strip().lower() in self._blocked

    def screen(self, address: str) -> ScreenResult:
        addr = address.strip().lower()
        reasons: List[str] = []
        blocked = addr in self._blocked

        if blocked:
            reasons.append(f"Address {addr[:10]}... is on the blocklist")

        if any(pattern.match(addr) for pattern in SUSPICIOUS_ADDRESS_PATTERNS):
            reasons.append("Address matches suspicious pattern")

        if not is_address(address.strip()):
            reasons.append("Invalid Ethereum address format")

        if not reasons:
            return ScreenResult.ok()
        return ScreenResult.from_risk(RiskLevel.BLOCK if blocked else RiskLevel.WARNING, reasons)


default_blocklist = AddressBlocklist()


def screen_address(address: str) -> ScreenResult:
    return default_blocklist.screen(address)
