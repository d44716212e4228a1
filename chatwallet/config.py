from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Normalize values that are commonly pasted with decoration."""

        super().model_post_init(__context)

        key = (self.wallet_encryption_key or "").strip()
        if key.lower().startswith("0x"):
            key = key[2:]
        object.__setattr__(self, "wallet_encryption_key", key)
        object.__setattr__(self, "environment", (self.environment or "development").strip().lower())

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(
        default="development",
        description="Deployment environment (development, production, test)",
        validation_alias=AliasChoices("environment", "app_env", "node_env"),
    )

    # Custodial wallets
    wallet_encryption_key: str = Field(
        default="",
        description="AES-256 key for wallet encryption, 64 hex chars",
    )
    export_confirmation_ttl_seconds: int = Field(
        default=120,
        ge=1,
        description="Seconds a private key export request stays confirmable",
    )

    # Chain
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base JSON-RPC endpoint")
    chain_id: int = Field(default=8453, description="Chain ID used for signing")
    explorer_base_url: str = Field(default="https://basescan.org", description="Block explorer used for links")
    tx_confirmation_timeout_seconds: int = Field(
        default=120,
        ge=1,
        description="Max seconds to wait for one confirmation before surfacing a timeout",
    )

    # Swap aggregator (0x)
    zerox_base_url: str = Field(default="https://base.api.0x.org", description="0x Swap API base URL")
    zerox_api_key: str = Field(default="", description="0x API key (optional)")
    slippage_percentage: str = Field(default="0.01", description="Slippage tolerance passed to 0x")

    # Quote cache
    quote_cache_ttl_seconds: int = Field(default=30, ge=1, description="Quote cache TTL in seconds")
    quote_cache_sweep_interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Interval of the background stale-quote sweep",
    )
    max_cache_size: int = Field(default=1000, description="Maximum cache size")

    # Screening / lookups
    goplus_base_url: str = Field(default="https://api.gopluslabs.io/api/v1", description="GoPlus Security API")
    coingecko_api_key: str = Field(default="", description="Coingecko API key")
    basescan_api_key: str = Field(default="", description="BaseScan API key (optional)")
    basescan_api_url: str = Field(default="https://api.basescan.org/api", description="BaseScan API endpoint")

    # Rate Limiting
    request_timeout_seconds: int = Field(default=20, description="Outbound request timeout")

    # LLM classifier
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    llm_model: str = Field(default="claude-sonnet-4-20250514", description="Model used for intent parsing")
    classifier_max_tokens: int = Field(default=256, description="Maximum tokens for the classifier reply")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_encryption_key(self) -> bool:
        return bool(self.wallet_encryption_key)

    @property
    def has_anthropic_key(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def has_zerox_key(self) -> bool:
        return bool(self.zerox_api_key)


# Global settings instance
settings = Settings()
