"""HTTP client and live feed fetcher for the DataGolf API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel

from fairway.adapters.http_resilience import FetchFailure, FetchSuccess, ResilientClient
from fairway.config.datagolf import DataGolfConfig
from fairway.config.sync import DEFAULT_TOUR
from fairway.domain.ports.fetching import (
    Feed,
    FeedFetchFailure,
    LiveFeedFetcher,
    LiveFeedsFetchResult,
)

from .query import (
    FieldUpdatesQuery,
    InPlayQuery,
    RankingsQuery,
    field_updates_path,
    in_play_path,
    rankings_path,
)
from .schema import FieldUpdatesResponse, InPlayResponse, RankingsResponse, accepts
from .translator import build_live_feeds

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from fairway.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]
type FeedResult[T] = FetchSuccess[T] | FeedFetchFailure


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class DataGolfClient:
    """Typed access to the three feeds a live sync needs.

    The API key comes from the injected ``DataGolfConfig``; nothing here reads
    the environment. Rankings go through their own client so that their
    responses can be cached.
    """

    def __init__(
        self,
        config: DataGolfConfig,
        *,
        client_factory: ClientFactory = _default_client_factory,
    ) -> None:
        self.config = config
        self._client = client_factory(config.resilience)
        self._rankings_client = client_factory(config.rankings_resilience)

    async def __aenter__(self) -> DataGolfClient:
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
        await self._rankings_client.aclose()

    async def field_updates(self, *, tour: str = DEFAULT_TOUR) -> FeedResult[FieldUpdatesResponse]:
        url = field_updates_path(FieldUpdatesQuery(tour=tour), api_key=self.config.api_key)
        return await self._fetch(self._client, Feed.FIELD, url, FieldUpdatesResponse)

    async def rankings(self) -> FeedResult[RankingsResponse]:
        url = rankings_path(RankingsQuery(), api_key=self.config.api_key)
        return await self._fetch(self._rankings_client, Feed.RANKINGS, url, RankingsResponse)

    async def in_play(self, *, tour: str = DEFAULT_TOUR) -> FeedResult[InPlayResponse]:
        url = in_play_path(InPlayQuery(tour=tour), api_key=self.config.api_key)
        return await self._fetch(self._client, Feed.LIVE, url, InPlayResponse)

    async def _fetch[TModel: BaseModel](
        self,
        client: ResilientClient,
        feed: Feed,
        url: str,
        model: type[TModel],
    ) -> FeedResult[TModel]:
        result = await client.get_json(url, validate=accepts(model))
        if isinstance(result, FetchFailure):
            return _feed_failure(feed, result)
        return FetchSuccess(data=model.model_validate(result.data), attempts=result.attempts)


def _feed_failure(feed: Feed, failure: FetchFailure) -> FeedFetchFailure:
    if failure.is_authentication_error:
        log.error(
            "DataGolf rejected the API key while fetching %s (%s)", feed, failure.status_code
        )
    return FeedFetchFailure(
        feed=feed,
        error=failure.error,
        attempts=failure.attempts,
        status_code=failure.status_code,
    )


@dataclass(slots=True)
class DataGolfLiveFeedFetcher:
    """Fetch field, rankings and in-play feeds concurrently.

    Returns every failure when any feed fails, so callers never reconcile
    partial data.
    """

    config: DataGolfConfig = field(default_factory=DataGolfConfig.from_environment)
    tour: str = DEFAULT_TOUR
    client_factory: ClientFactory = field(default=_default_client_factory)

    def __call__(self) -> LiveFeedsFetchResult:
        return asyncio.run(self.fetch())

    async def fetch(self) -> LiveFeedsFetchResult:
        async with DataGolfClient(self.config, client_factory=self.client_factory) as client:
            field_updates, rankings, in_play = await asyncio.gather(
                client.field_updates(tour=self.tour),
                client.rankings(),
                client.in_play(tour=self.tour),
            )

        if (
            isinstance(field_updates, FetchSuccess)
            and isinstance(rankings, FetchSuccess)
            and isinstance(in_play, FetchSuccess)
        ):
            feeds = build_live_feeds(field_updates.data, rankings.data, in_play.data)
            log.info(
                "Fetched DataGolf feeds for %r: %d in field, %d ranked, %d live",
                feeds.event_name,
                len(feeds.field),
                len(feeds.rankings),
                len(feeds.live),
            )
            return LiveFeedsFetchResult(feeds=feeds)

        failures = tuple(
            result
            for result in (field_updates, rankings, in_play)
            if isinstance(result, FeedFetchFailure)
        )
        return LiveFeedsFetchResult(failures=failures)


if TYPE_CHECKING:
    _fetcher_check: LiveFeedFetcher = DataGolfLiveFeedFetcher()
