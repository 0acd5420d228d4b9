"""Pure helpers turning provider encodings into canonical domain values.

Nothing in here performs I/O; every function is deterministic in its inputs.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from fairway.domain.model import LiveEntry

RATING_MIN: Final[float] = 0.0
RATING_MAX: Final[float] = 150.0
# DataGolf reports this skill estimate for players it has no model for.
UNRANKED_SKILL_ESTIMATE: Final[float] = -1.875

FINISHED_TOKENS: Final[frozenset[str]] = frozenset({"WD", "DQ", "CUT", "MC", "MDF", "DNS", "DNF"})
HOLES_PER_ROUND: Final[int] = 18

_ROMAN_NUMERAL = re.compile(r"^(i|ii|iii|iv|v|vi|vii|viii|ix|x)$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_LEADING_INT = re.compile(r"^[+-]?\d+")


def _collapse(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


# Names ------------------------------------------------------------------------


def normalize_suffix_token(token: str) -> str:
    raw = token.strip()
    if not raw:
        return ""

    stripped = raw.replace(".", "").strip()
    lower = stripped.lower()
    if lower == "jr":
        return "Jr."
    if lower == "sr":
        return "Sr."
    if _ROMAN_NUMERAL.match(stripped):
        return stripped.upper()
    return raw


def normalize_player_name(raw: str) -> str:
    """Turn ``"Last, First[, Suffix...]"`` into ``"First Last[ Suffix]"``.

    Names without a comma only get their whitespace collapsed. With three or more
    parts the first is the family name, the second the given name and the rest
    are suffix tokens (``jr`` -> ``Jr.``, roman numerals uppercased).
    """

    trimmed = raw.strip()
    if "," not in trimmed:
        return _collapse(trimmed)

    parts = [part.strip() for part in trimmed.split(",") if part.strip()]
    if len(parts) < 2:
        return _collapse(trimmed.replace(",", " "))

    last = parts[0]
    if len(parts) == 2:
        return _collapse(f"{parts[1]} {last}")

    first = parts[1]
    suffix = " ".join(token for token in map(normalize_suffix_token, parts[2:]) if token)
    return _collapse(f"{first} {last} {suffix}")


def normalize_country(country: str | None) -> str | None:
    """Blank or ``"unknown"`` countries are absent, never a stored value."""

    if country is None:
        return None
    trimmed = country.strip()
    if not trimmed or trimmed.lower() == "unknown":
        return None
    return trimmed


# Ratings ----------------------------------------------------------------------


def normalize_rating(skill_estimate: float | None) -> float:
    """Map a DataGolf skill estimate onto the 0..150 display rating.

    Three segments: below -1.5 the rating fades linearly from 5 towards 0, between
    -1.5 and 2 it climbs linearly from 5 to 100, and above 2 it grows with the
    square root of the excess until it hits 150.
    """

    if skill_estimate is None:
        return RATING_MIN
    x = float(skill_estimate)
    if not math.isfinite(x):
        return RATING_MIN

    if x < -1.5:
        raw = 5 + ((x + 1.5) / 1.5) * 5
        return max(RATING_MIN, min(5.0, round(raw, 2)))

    if x <= 2:
        raw = 5 + ((x + 1.5) / 3.5) * 95
        return max(RATING_MIN, round(raw, 2))

    raw = 100 + 20 * math.sqrt((x - 2) / 1.5)
    return min(RATING_MAX, round(raw, 2))


# Positions --------------------------------------------------------------------


def parse_position_number(position: str | None) -> int | None:
    """``"T5"`` -> 5, ``"12"`` -> 12, ``"CUT"`` -> None."""

    if not position:
        return None
    stripped = position.strip()
    if stripped[:1] in {"T", "t"}:
        stripped = stripped[1:]
    match = _LEADING_INT.match(stripped)
    if match is None:
        return None
    return int(match.group(0))


def compute_position_change(previous: str | None, current: str | None) -> int:
    """Places gained since ``previous``; positive means the player moved up."""

    previous_number = parse_position_number(previous)
    current_number = parse_position_number(current)
    if previous_number is None or current_number is None:
        return 0
    return previous_number - current_number


# Live state -------------------------------------------------------------------


def parse_thru(thru: object) -> int | None:
    """Holes completed: ``"F"`` is a full round, anything unparseable is absent."""

    if thru is None or isinstance(thru, bool):
        return None
    if isinstance(thru, int):
        return thru
    if isinstance(thru, float):
        return int(thru) if math.isfinite(thru) else None
    raw = str(thru).strip().upper()
    if not raw:
        return None
    if raw == "F":
        return HOLES_PER_ROUND
    match = _LEADING_INT.match(raw)
    return int(match.group(0)) if match else None


def _token(value: object) -> str:
    return "" if value is None else str(value).strip().upper()


def is_player_finished(entry: LiveEntry) -> bool:
    """A player is done for the round when out of the event or through 18."""

    if _token(entry.position) in FINISHED_TOKENS:
        return True

    thru = _token(entry.thru)
    if not thru:
        return False
    if thru in FINISHED_TOKENS or thru == "F":
        return True
    holes = parse_thru(thru)
    return holes is not None and holes >= HOLES_PER_ROUND


def _is_mid_round(entry: LiveEntry) -> bool:
    if is_player_finished(entry):
        return False
    holes = parse_thru(entry.thru)
    return holes is not None and 0 < holes < HOLES_PER_ROUND


def is_round_running(live: Iterable[LiveEntry]) -> bool:
    """True when at least one active player is strictly between hole 0 and 18."""

    return any(_is_mid_round(entry) for entry in live)


def are_all_players_finished(live: Sequence[LiveEntry]) -> bool:
    if not live:
        return False
    return all(is_player_finished(entry) for entry in live)


# Rosters ----------------------------------------------------------------------


def usage_percentages(rosters: Iterable[Iterable[int]]) -> dict[int, float]:
    """Share of rosters containing each golfer, as a percentage.

    Returns an empty mapping when there are no rosters at all; callers must treat
    that as "no usage known" rather than zero.
    """

    counts: Counter[int] = Counter()
    total = 0
    for roster in rosters:
        total += 1
        counts.update(set(roster))
    if total == 0:
        return {}
    return {api_id: count / total * 100 for api_id, count in counts.items()}


def usage_for(usage: Mapping[int, float], api_id: int, *, roster_count: int) -> float | None:
    if roster_count == 0:
        return None
    return usage.get(api_id, 0.0)


# Tee times --------------------------------------------------------------------


def parse_tee_time(value: str | None) -> datetime | None:
    """Parse DataGolf tee times (``"2025-04-10 08:03"``) as UTC instants."""

    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def earliest_tee_time(values: Iterable[str | None]) -> datetime | None:
    parsed = [moment for moment in map(parse_tee_time, values) if moment is not None]
    return min(parsed, default=None)
