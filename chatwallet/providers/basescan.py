"""Async client for BaseScan's account transaction list."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.errors import UpstreamError
from .base import Provider


NO_TRANSACTIONS = "No transactions found"


class BasescanProvider(Provider):
    name = "basescan"

    def __init__(
        self,
        *,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(transport=transport)
        self.api_url = api_url or settings.basescan_api_url
        self.api_key = settings.basescan_api_key if api_key is None else api_key
        self.timeout_s = timeout_s or settings.request_timeout_seconds

    async def ready(self) -> bool:
        return True

    async def list_transactions(self, address: str, *, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent normal transactions for `address`, newest first."""
        params = {
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": "0",
            "endblock": "99999999",
            "page": "1",
            "offset": str(limit),
            "sort": "desc",
        }
        if self.api_key:
            params["apikey"] = self.api_key

        async with self._client() as client:
            try:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise UpstreamError("BaseScan request failed", provider=self.name, detail=str(exc)) from exc

        data = response.json() or {}
        result = data.get("result")
        if str(data.get("status")) != "1" or not isinstance(result, list):
            # "No transactions found" comes back as status 0
            if data.get("message") == NO_TRANSACTIONS:
                return []
            message = data.get("message") or "unexpected response"
            raise UpstreamError(
                f"Failed to fetch transaction history: {message}",
                provider=self.name,
                detail=str(result),
            )
        return result[:limit]
