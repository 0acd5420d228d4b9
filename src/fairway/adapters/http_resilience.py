from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from fairway.config.http_resilience import (
    CacheConfig,
    ResilienceConfig,
    ResponsePredicate,
    RetryPolicy,
    ShouldCacheHook,
)
from fairway.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        AuthTypes,
        CookieTypes,
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        RequestData,
        TimeoutTypes,
        URLTypes,
    )

log = getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class FetchSuccess[T]:
    data: T
    attempts: int
    ok: Literal[True] = True


@dataclass(slots=True, frozen=True)
class FetchFailure:
    error: str
    attempts: int
    status_code: int | None = None
    ok: Literal[False] = False

    @property
    def is_authentication_error(self) -> bool:
        return self.status_code in {401, 403}


type FetchResult[T] = FetchSuccess[T] | FetchFailure


@dataclass(slots=True)
class _AttemptCounter:
    """Requests that reached the transport during one ``fetch_json`` call."""

    requests: int = 0

    @property
    def attempts(self) -> int:
        # a cache hit never reaches the transport
        return max(self.requests, 1)


_ATTEMPTS: ContextVar[_AttemptCounter | None] = ContextVar("fairway_http_attempts", default=None)


class BackoffRetry(Retry):
    """``httpx_retries.Retry`` driven by a ``RetryPolicy``.

    Waits follow ``RetryPolicy.backoff`` and ``RetryPolicy.rate_limit_backoff``
    instead of the jittered library default, go through an injectable ``sleep``
    and are logged. Inside ``ResilientClient.fetch_json`` the budget is shared
    with the payload checks done there, so a fetch never exceeds
    ``RetryPolicy.total_attempts`` requests.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        name: str,
        sleep: Sleeper = asyncio.sleep,
        attempts_made: int = 0,
    ) -> None:
        super().__init__(
            total=policy.retries,
            backoff_factor=policy.backoff_factor,
            max_backoff_wait=policy.max_backoff_wait,
            respect_retry_after_header=policy.respect_retry_after_header,
            allowed_methods=tuple(policy.allowed_methods),
            status_forcelist=tuple(policy.status_forcelist),
            retry_on_exceptions=policy.retry_on_exceptions,
            backoff_jitter=0.0,
            attempts_made=attempts_made,
        )
        self.policy = policy
        self._name = name
        self._sleep = sleep
        self._retry_index = attempts_made

    def increment(self) -> BackoffRetry:
        return BackoffRetry(
            self.policy,
            name=self._name,
            sleep=self._sleep,
            attempts_made=self._retry_index + 1,
        )

    def is_exhausted(self) -> bool:
        counter = _ATTEMPTS.get()
        if counter is None:
            return super().is_exhausted()
        return counter.requests >= self.policy.total_attempts

    def backoff_strategy(self) -> float:
        return self.policy.backoff(self._completed_attempts() - 1)

    def wait_for(self, response: httpx.Response | httpx.HTTPError) -> float:
        attempt = self._completed_attempts() - 1
        if (
            isinstance(response, httpx.Response)
            and response.status_code == httpx.codes.TOO_MANY_REQUESTS
        ):
            return self.policy.rate_limit_backoff(attempt, response.headers.get("Retry-After"))
        return self.policy.backoff(attempt)

    async def asleep(self, response: httpx.Response | httpx.HTTPError) -> None:
        wait = self.wait_for(response)
        log.warning(
            "[%s] %s, waiting %.2fs before retry %d/%d",
            self._name,
            _describe_retry_cause(response),
            wait,
            self._completed_attempts(),
            self.policy.retries,
        )
        await self._sleep(wait)

    def _completed_attempts(self) -> int:
        counter = _ATTEMPTS.get()
        if counter is None:
            return max(self._retry_index, 1)
        return max(counter.requests, 1)


class _MeteredTransport(httpx.AsyncBaseTransport):
    """Counts and rate-limits every request that goes out on the wire."""

    def __init__(self, transport: httpx.AsyncBaseTransport, limiter: AsyncLimiter | None) -> None:
        self._transport = transport
        self._limiter = limiter

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        counter = _ATTEMPTS.get()
        if counter is not None:
            counter.requests += 1
        if self._limiter is None:
            return await self._transport.handle_async_request(request)
        async with self._limiter:
            return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        await self._transport.aclose()


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    data: RequestData | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    cookies: CookieTypes | None
    auth: AuthTypes | UseClientDefault | None
    timeout: TimeoutTypes | UseClientDefault


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """Async HTTP client with timeouts, rate limiting, optional caching and retries.

    ``fetch_json`` never raises for transport or HTTP problems. It returns a
    ``FetchSuccess`` carrying the decoded payload, or a ``FetchFailure`` once the
    request is non-recoverable (4xx other than 429) or the retry budget is spent.
    Status and network retries happen in the ``RetryTransport``; invalid JSON
    and rejected payloads are retried here from the same budget.
    """

    def __init__(self, config: ResilienceConfig, *, sleep: Sleeper = asyncio.sleep) -> None:
        self.config = config
        self._sleep = sleep
        limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        network = config.transport or httpx.AsyncHTTPTransport()
        retry_transport = RetryTransport(
            transport=_MeteredTransport(network, limiter),
            retry=BackoffRetry(config.retry, name=config.name, sleep=sleep),
        )

        storage, policy = _build_cache_components(config.cache)

        headers = dict(config.default_headers) if config.default_headers else None

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": retry_transport,
        }
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if headers is not None:
            client_kwargs["headers"] = headers

        self._client: httpx.AsyncClient
        if storage is not None:
            self._client = AsyncCacheClient(**client_kwargs, storage=storage, policy=policy)
        else:
            self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(
        self,
        url: URLTypes,
        *,
        validate: ResponsePredicate | None = None,
        **kwargs: Unpack[RequestOptions],
    ) -> FetchResult[object]:
        return await self.fetch_json("GET", url, validate=validate, **kwargs)

    async def post_json(
        self,
        url: URLTypes,
        *,
        validate: ResponsePredicate | None = None,
        **kwargs: Unpack[RequestOptions],
    ) -> FetchResult[object]:
        return await self.fetch_json("POST", url, validate=validate, **kwargs)

    async def fetch_json(
        self,
        method: str,
        url: URLTypes,
        *,
        validate: ResponsePredicate | None = None,
        **kwargs: Unpack[RequestOptions],
    ) -> FetchResult[object]:
        counter = _AttemptCounter()
        token = _ATTEMPTS.set(counter)
        try:
            return await self._fetch_json(method, url, counter, validate, kwargs)
        finally:
            _ATTEMPTS.reset(token)

    async def _fetch_json(
        self,
        method: str,
        url: URLTypes,
        counter: _AttemptCounter,
        validate: ResponsePredicate | None,
        kwargs: RequestOptions,
    ) -> FetchResult[object]:
        policy = self.config.retry
        name = self.config.name

        while True:
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.TimeoutException:
                error = f"Request timeout after {self.config.timeout_seconds}s"
                return _give_up(name, error, counter)
            except httpx.TransportError as exc:
                return _give_up(name, f"Network error: {exc}", counter)

            status = response.status_code
            if status == httpx.codes.TOO_MANY_REQUESTS:
                error = f"Rate limited (429) after {counter.attempts} attempts"
                return _give_up(name, error, counter, status)
            if status >= 500:
                error = _describe_http_error("Server error", response)
                # the transport only hands back listed statuses once its budget is spent
                if status in policy.status_forcelist:
                    return _give_up(name, error, counter, status)
            elif status >= 400:
                error = _describe_http_error("HTTP error", response)
                log.error("[%s] %s, not retrying", name, error)
                return FetchFailure(error=error, attempts=counter.attempts, status_code=status)
            else:
                try:
                    payload: object = response.json()
                except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                    error = f"Invalid JSON response: {exc}"
                else:
                    if validate is None or validate(payload):
                        if counter.attempts > 1:
                            log.info(
                                "[%s] Request succeeded after %d attempts",
                                name,
                                counter.attempts,
                            )
                        return FetchSuccess(data=payload, attempts=counter.attempts)
                    error = "Response validation failed"

            if counter.attempts >= policy.total_attempts:
                return _give_up(name, error, counter, status)
            wait = policy.backoff(counter.attempts - 1)
            log.warning(
                "[%s] %s, waiting %.2fs before retry %d/%d",
                name,
                error,
                wait,
                counter.attempts,
                policy.retries,
            )
            await self._sleep(wait)


def _give_up(
    name: str,
    error: str,
    counter: _AttemptCounter,
    status_code: int | None = None,
) -> FetchFailure:
    log.warning("[%s] %s, giving up after %d attempts", name, error, counter.attempts)
    return FetchFailure(error=error, attempts=counter.attempts, status_code=status_code)


def _describe_http_error(kind: str, response: httpx.Response) -> str:
    text = response.text.strip()
    message = f"{kind} ({response.status_code}): {response.reason_phrase}"
    return f"{message} - {text}" if text else message


def _describe_retry_cause(response: httpx.Response | httpx.HTTPError) -> str:
    # the body of a response about to be retried is never read
    if isinstance(response, httpx.HTTPError):
        return f"{type(response).__name__}: {response}"
    if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
        return "Rate limited (429)"
    return f"Server error ({response.status_code}): {response.reason_phrase}"


class _ShouldCacheResponseFilter(BaseFilter[HishelCacheResponse]):
    """Hishel response filter that delegates to a simple JSON predicate."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache_components(
    config: CacheConfig | None,
) -> tuple[AsyncSqliteStorage | None, FilterPolicy | None]:
    if config is None or not config.enabled:
        return None, None

    if config.backend not in {"sqlite", "memory"}:
        msg = f"Unsupported cache backend: {config.backend}"
        raise ValueError(msg)

    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    else:
        database_path = ":memory:"
    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )

    policy: FilterPolicy | None = None
    if config.should_cache is not None:
        policy = FilterPolicy(response_filters=[_ShouldCacheResponseFilter(config.should_cache)])

    return storage, policy
