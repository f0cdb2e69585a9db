"""
Unit tests for environment-driven configuration.
"""

from burnbox.config.burn_config import BurnConfig
from burnbox.config.redis_config import RedisConfig
from burnbox.domain.quota import QuotaPolicy
from burnbox.domain.quota.value_objects import FREE_LIMITS, Tier


def test_defaults_match_built_in_limits(monkeypatch):
    for name in ("FREE_MAX_FILE_SIZE", "FREE_MAX_EXPIRATION", "FREE_MAX_DOWNLOADS", "PUBLIC_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

    config = BurnConfig.from_env()

    assert config.tier_limits()[Tier.FREE] == FREE_LIMITS
    assert config.public_base_url == "https://burn.snapitsoftware.com"
    assert config.short_code_length == 8


def test_limits_can_be_overridden(monkeypatch):
    monkeypatch.setenv("FREE_MAX_DOWNLOADS", "2")
    monkeypatch.setenv("PRO_MAX_FILE_SIZE", "1000")

    limits = BurnConfig.from_env().tier_limits()
    policy = QuotaPolicy(limits)

    assert policy.evaluate(Tier.FREE, 1, 60, 3).ceiling == "max_downloads"
    assert policy.evaluate(Tier.PRO, 1001, 60, -1).ceiling == "file_size"


def test_redis_url_overrides_host_settings(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://:pw@cache.internal:6380/2")

    config = RedisConfig()

    assert config.host == "cache.internal"
    assert config.port == 6380
    assert config.db == 2
    assert config.password == "pw"
