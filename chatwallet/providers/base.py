from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    def __init__(self, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _client(self, **kwargs: Any) -> httpx.AsyncClient:
        """Fresh client per call; `transport` lets tests substitute a MockTransport."""
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport, **kwargs)

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        if not await self.ready():
            return {"status": "unavailable", "reason": "Provider disabled"}
        return {"status": "configured"}
