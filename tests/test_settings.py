from chatwallet.config import Settings


def test_defaults_target_base():
    settings = Settings(wallet_encryption_key="", anthropic_api_key="", zerox_api_key="")

    assert settings.chain_id == 8453
    assert settings.quote_cache_ttl_seconds == 30
    assert settings.export_confirmation_ttl_seconds == 120
    assert settings.has_encryption_key is False
    assert settings.has_anthropic_key is False
    assert settings.has_zerox_key is False


def test_encryption_key_prefix_is_stripped():
    settings = Settings(wallet_encryption_key="  0x" + "ab" * 32 + " ")

    assert settings.wallet_encryption_key == "ab" * 32
    assert settings.has_encryption_key


def test_environment_is_normalized():
    assert Settings(environment=" Production ").is_production
    assert not Settings(environment="development").is_production


def test_environment_read_from_node_env(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setenv("NODE_ENV", "production")

    assert Settings().is_production
