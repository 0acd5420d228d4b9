"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

ShouldCacheHook = Callable[[object], bool]
ResponsePredicate = Callable[[object], bool]

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 1.0


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retry budget and backoff shape.

    ``retries`` counts the attempts after the first one, so the default of 3
    allows four requests in total. Waits grow as ``backoff_factor * 2**attempt``;
    rate-limited responses without a ``Retry-After`` header wait
    ``rate_limit_multiplier`` times longer. Every wait, including one asked for
    by ``Retry-After``, is capped at ``max_backoff_wait``.
    """

    retries: int = DEFAULT_RETRIES
    backoff_factor: float = DEFAULT_BACKOFF_SECONDS
    rate_limit_multiplier: float = 2.0
    max_backoff_wait: float = 60.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(
        default_factory=lambda: frozenset({"GET", "HEAD", "OPTIONS", "POST"})
    )
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )

    @property
    def total_attempts(self) -> int:
        return self.retries + 1

    def backoff(self, attempt: int) -> float:
        return min(self.backoff_factor * 2**attempt, self.max_backoff_wait)

    def rate_limit_backoff(self, attempt: int, retry_after: str | None = None) -> float:
        if self.respect_retry_after_header and retry_after is not None:
            seconds = retry_after.strip()
            if seconds.isdigit():
                return min(float(seconds), self.max_backoff_wait)
        return min(
            self.backoff_factor * 2**attempt * self.rate_limit_multiplier,
            self.max_backoff_wait,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "sqlite"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = False
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """Everything a ``ResilientClient`` needs.

    ``transport`` replaces the network transport underneath the retry layer;
    tests pass an ``httpx.MockTransport`` here.
    """

    name: str
    base_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None
    transport: httpx.AsyncBaseTransport | None = None
