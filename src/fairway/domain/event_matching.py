"""Loose comparison between a stored tournament name and the provider's event name."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "the",
        "a",
        "an",
        "and",
        "of",
        "at",
        "in",
        "on",
        "for",
        "to",
        "by",
        "presented",
        "championship",
        "tournament",
        "cup",
        "classic",
    }
)
MIN_SCORE: Final[float] = 0.6
MIN_SCORE_WITH_TWO_SHARED: Final[float] = 0.5

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(slots=True, frozen=True)
class EventNameMatch:
    ok: bool
    score: float
    shared: int = 0
    expected_tokens: tuple[str, ...] = ()
    actual_tokens: tuple[str, ...] = ()


def _normalize(name: str) -> str:
    lowered = name.lower().replace("&", " and ")
    return _WHITESPACE.sub(" ", _NON_ALNUM.sub(" ", lowered)).strip()


def _singular(token: str) -> str:
    if len(token) > 3 and token.endswith("s"):
        return token[:-1]
    return token


def normalize_event_tokens(name: str) -> list[str]:
    """Significant words of an event name, e.g. ``"The Masters"`` -> ``["master"]``."""

    tokens: list[str] = []
    for raw in _normalize(name).split(" "):
        token = _singular(raw)
        if len(token) <= 1 or token.isdigit() or token in STOP_WORDS:
            continue
        tokens.append(token)
    return tokens


def event_name_looks_compatible(expected: str, actual: str) -> EventNameMatch:
    """Whether ``actual`` plausibly names the same event as ``expected``.

    A substring match of the normalized names is always compatible. Otherwise the
    share of tokens in common must reach 0.6, or 0.5 when at least two are shared.
    Blank names on either side are never compatible.
    """

    expected_normalized = _normalize(expected)
    actual_normalized = _normalize(actual)
    if not expected_normalized or not actual_normalized:
        return EventNameMatch(ok=False, score=0.0)

    expected_tokens = tuple(normalize_event_tokens(expected))
    actual_tokens = tuple(normalize_event_tokens(actual))

    if expected_normalized in actual_normalized or actual_normalized in expected_normalized:
        return EventNameMatch(
            ok=True,
            score=1.0,
            expected_tokens=expected_tokens,
            actual_tokens=actual_tokens,
        )

    expected_set = set(expected_tokens)
    actual_set = set(actual_tokens)
    shared = len(expected_set & actual_set)
    score = shared / max(len(expected_set), len(actual_set), 1)
    ok = score >= MIN_SCORE or (shared >= 2 and score >= MIN_SCORE_WITH_TWO_SHARED)
    return EventNameMatch(
        ok=ok,
        score=score,
        shared=shared,
        expected_tokens=expected_tokens,
        actual_tokens=actual_tokens,
    )
