"""DataGolf configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DATAGOLF_BASE_URL = "https://feeds.datagolf.com"
DATAGOLF_TIMEOUT_SECONDS = 30.0
# DataGolf allows 45 requests per minute per key.
DATAGOLF_RATE_LIMIT = RateLimit(max_calls=45, per_seconds=60.0)
RANKINGS_CACHE_TTL_SECONDS = 3600.0


def default_resilience_config(*, cache: CacheConfig | None = None) -> ResilienceConfig:
    return ResilienceConfig(
        name="DataGolf API",
        base_url=DATAGOLF_BASE_URL,
        timeout_seconds=DATAGOLF_TIMEOUT_SECONDS,
        ratelimit=DATAGOLF_RATE_LIMIT,
        cache=cache,
    )


def _has_rankings(payload: object) -> bool:
    return isinstance(payload, dict) and "rankings" in payload


def rankings_resilience_config() -> ResilienceConfig:
    """Rankings move weekly, so their responses may be served from cache.

    The cache lives in the sqlite file under the data directory so that it
    outlives the process; each scheduled sync runs in a fresh one.
    """

    return default_resilience_config(
        cache=CacheConfig(
            backend="sqlite",
            default_ttl_seconds=RANKINGS_CACHE_TTL_SECONDS,
            should_cache=_has_rankings,
        )
    )


@dataclass(frozen=True)
class DataGolfConfig:
    """Holds DataGolf API configuration values."""

    api_key: str = field(repr=False)
    resilience: ResilienceConfig = field(default_factory=default_resilience_config)
    rankings_resilience: ResilienceConfig = field(default_factory=rankings_resilience_config)

    @classmethod
    def from_environment(cls) -> DataGolfConfig:
        return get_datagolf_config()


def get_datagolf_config(
    *,
    resilience: ResilienceConfig | None = None,
    rankings_resilience: ResilienceConfig | None = None,
) -> DataGolfConfig:
    values = require_env_vars(("DATAGOLF_API_KEY",))
    return DataGolfConfig(
        api_key=values["DATAGOLF_API_KEY"],
        resilience=resilience or default_resilience_config(),
        rankings_resilience=rankings_resilience or rankings_resilience_config(),
    )
