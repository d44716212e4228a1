"""Async client for the GoPlus token security API (no key required)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.errors import UpstreamError
from .base import Provider


# Chain IDs that GoPlus understands
CHAIN_IDS: Dict[str, str] = {
    "base": "8453",
    "ethereum": "1",
    "polygon": "137",
    "bsc": "56",
    "arbitrum": "42161",
    "optimism": "10",
}


class GoPlusProvider(Provider):
    name = "goplus"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(transport=transport)
        self.base_url = (base_url or settings.goplus_base_url).rstrip("/")
        self.timeout_s = timeout_s or settings.request_timeout_seconds

    async def ready(self) -> bool:
        return True

    async def token_security(self, token_address: str, chain: str = "base") -> Optional[Dict[str, Any]]:
        """Raw report for one token, or None when GoPlus does not know it."""
        chain_id = CHAIN_IDS.get((chain or "base").lower(), CHAIN_IDS["base"])
        address = token_address.lower()

        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.base_url}/token_security/{chain_id}",
                    params={"contract_addresses": address},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise UpstreamError("GoPlus API unavailable", provider=self.name, detail=str(exc)) from exc

        result = (response.json() or {}).get("result") or {}
        return result.get(address)
