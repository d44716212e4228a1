import httpx
from typing import Any, Dict, Optional

from ..config import settings
from ..core.errors import UpstreamError
from .base import Provider


# Token symbol -> CoinGecko id. Covers tokens on all chains, not just Base.
COINGECKO_ID_MAP: Dict[str, str] = {
    # Ethereum / ETH variants
    "eth": "ethereum",
    "ethereum": "ethereum",
    "weth": "ethereum",
    "base": "ethereum",
    # Bitcoin
    "btc": "bitcoin",
    "bitcoin": "bitcoin",
    "cbbtc": "coinbase-wrapped-btc",
    # Stablecoins
    "usdc": "usd-coin",
    "usdt": "tether",
    "dai": "dai",
    # L1 / L2
    "sol": "solana",
    "solana": "solana",
    "avax": "avalanche-2",
    "matic": "matic-network",
    "polygon": "matic-network",
    "arb": "arbitrum",
    "arbitrum": "arbitrum",
    "op": "optimism",
    "optimism": "optimism",
    # DeFi
    "link": "chainlink",
    "uni": "uniswap",
    "aave": "aave",
    # Base-native
    "degen": "degen-base",
    "aero": "aerodrome-finance",
    "brett": "brett",
    "toshi": "toshi",
}


def coingecko_id(symbol: str) -> str:
    """CoinGecko id for a symbol; unknown symbols pass through lowercased."""
    key = (symbol or "").strip().lower()
    return COINGECKO_ID_MAP.get(key, key)


class CoingeckoProvider(Provider):
    """Coingecko API provider for spot prices"""

    name = "coingecko"
    timeout_s = 15

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: str = "https://api.coingecko.com/api/v3",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(transport=transport)
        self.api_key = settings.coingecko_api_key if api_key is None else api_key
        self.base_url = base_url.rstrip("/")

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    async def ready(self) -> bool:
        return True  # API key is optional for basic tier

    async def get_spot_price(self, symbol: str, vs_currency: str = "usd") -> Optional[Dict[str, Any]]:
        """Price and 24h change for a symbol, or None when CoinGecko has no entry."""
        coin_id = coingecko_id(symbol)
        params = {
            "ids": coin_id,
            "vs_currencies": vs_currency,
            "include_24hr_change": "true",
        }

        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.base_url}/simple/price",
                    params=params,
                    headers=self._build_headers(),
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise UpstreamError("CoinGecko request failed", provider=self.name, detail=str(exc)) from exc

        entry = (response.json() or {}).get(coin_id)
        if not entry or vs_currency not in entry:
            return None
        return {
            "id": coin_id,
            "price": float(entry[vs_currency]),
            "change_24h": float(entry.get(f"{vs_currency}_24h_change") or 0.0),
        }
