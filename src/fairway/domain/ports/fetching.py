"""Ports for fetching provider feeds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fairway.domain.model import LiveFeeds


class Feed(StrEnum):
    FIELD = "field-updates"
    RANKINGS = "rankings"
    LIVE = "in-play"


@dataclass(slots=True, frozen=True)
class FeedFetchFailure:
    """Why one feed could not be retrieved."""

    feed: Feed
    error: str
    attempts: int
    status_code: int | None = None

    @property
    def is_authentication_error(self) -> bool:
        return self.status_code in {401, 403}

    def describe(self) -> str:
        status = f"HTTP {self.status_code}" if self.status_code is not None else "no response"
        return f"{self.feed} ({status}, {self.attempts} attempts): {self.error}"


@dataclass(slots=True)
class LiveFeedsFetchResult:
    """Either all three feeds, or the failures that prevented it."""

    feeds: LiveFeeds | None = None
    failures: tuple[FeedFetchFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return self.feeds is not None and not self.failures


@runtime_checkable
class LiveFeedFetcher(Protocol):
    """Callable port retrieving the field, rankings and in-play feeds together."""

    def __call__(self) -> LiveFeedsFetchResult: ...


__all__ = ["Feed", "FeedFetchFailure", "LiveFeedFetcher", "LiveFeedsFetchResult"]
