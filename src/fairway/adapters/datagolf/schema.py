"""Pydantic models describing the DataGolf feed payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

if TYPE_CHECKING:
    from fairway.config.http_resilience import ResponsePredicate


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _number_or_none(value: object) -> object:
    """Accept ``"10,400"`` style numbers and blanks."""

    value = _blank_to_none(value)
    if isinstance(value, str):
        return value.replace(",", "")
    return value


class DataGolfBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TeeTimePayload(DataGolfBaseModel):
    round_num: int
    teetime: str | None = None
    start_hole: int | None = None

    _normalize_teetime = field_validator("teetime", mode="before")(_blank_to_none)


class FieldPlayerPayload(DataGolfBaseModel):
    dg_id: int
    player_name: str
    country: str | None = None
    am: int | None = None
    r1_teetime: str | None = None
    r2_teetime: str | None = None
    r3_teetime: str | None = None
    r4_teetime: str | None = None
    start_hole: int | None = None
    dk_salary: float | None = None
    fd_salary: float | None = None
    yh_salary: float | None = None
    flag: str | None = None
    early_late: int | None = None
    pga_number: int | None = None
    unofficial: int | None = None

    _normalize_strings = field_validator(
        "country",
        "r1_teetime",
        "r2_teetime",
        "r3_teetime",
        "r4_teetime",
        "flag",
        mode="before",
    )(_blank_to_none)
    _normalize_numbers = field_validator(
        "dk_salary", "fd_salary", "yh_salary", "start_hole", "early_late", mode="before"
    )(_number_or_none)

    @model_validator(mode="before")
    @classmethod
    def _flatten_teetimes(cls, value: object) -> object:
        """Newer payloads list tee times per round instead of ``rN_teetime`` keys."""

        if not isinstance(value, Mapping):
            return value
        data: dict[str, object] = dict(cast(Mapping[str, object], value))
        teetimes = data.get("teetimes")
        if not isinstance(teetimes, list):
            return data
        for raw in cast(list[object], teetimes):
            if not isinstance(raw, Mapping) or "round_num" not in raw:
                continue
            entry = TeeTimePayload.model_validate(raw)
            key = f"r{entry.round_num}_teetime"
            if data.get(key) in (None, "") and entry.teetime is not None:
                data[key] = entry.teetime
            if entry.round_num == 1 and data.get("start_hole") is None:
                data["start_hole"] = entry.start_hole
        return data

    @property
    def is_withdrawn(self) -> bool:
        return (self.flag or "").upper() == "WD"


class FieldUpdatesResponse(DataGolfBaseModel):
    event_name: str | None = None
    course_name: str | None = None
    current_round: int | None = None
    field: list[FieldPlayerPayload] = Field(default_factory=list[FieldPlayerPayload])


class RankedPlayerPayload(DataGolfBaseModel):
    dg_id: int
    player_name: str
    country: str | None = None
    am: int | None = None
    datagolf_rank: int | None = None
    owgr_rank: int | None = None
    dg_skill_estimate: float | None = None
    primary_tour: str | None = None

    _normalize_strings = field_validator("country", "primary_tour", mode="before")(
        _blank_to_none
    )
    _normalize_numbers = field_validator(
        "datagolf_rank", "owgr_rank", "dg_skill_estimate", mode="before"
    )(_number_or_none)


class RankingsResponse(DataGolfBaseModel):
    rankings: list[RankedPlayerPayload]
    last_updated: str | None = None
    notes: str | None = None


class LivePlayerPayload(DataGolfBaseModel):
    dg_id: int
    player_name: str
    country: str | None = None
    current_pos: str | None = None
    current_score: float | None = None
    today: float | None = None
    thru: str | None = None
    round: int | None = None
    end_hole: int | None = None
    make_cut: float | None = None
    top_5: float | None = None
    top_10: float | None = None
    top_20: float | None = None
    win: float | None = None
    r1: float | None = Field(default=None, alias="R1")
    r2: float | None = Field(default=None, alias="R2")
    r3: float | None = Field(default=None, alias="R3")
    r4: float | None = Field(default=None, alias="R4")

    _normalize_strings = field_validator("country", "current_pos", mode="before")(
        _blank_to_none
    )
    _normalize_numbers = field_validator(
        "current_score",
        "today",
        "round",
        "end_hole",
        "make_cut",
        "top_5",
        "top_10",
        "top_20",
        "win",
        "r1",
        "r2",
        "r3",
        "r4",
        mode="before",
    )(_number_or_none)

    @field_validator("thru", mode="before")
    @classmethod
    def _thru_as_text(cls, value: object) -> object:
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return str(int(value))
        return _blank_to_none(value)


class InPlayInfo(DataGolfBaseModel):
    current_round: int | None = None
    event_name: str | None = None
    last_update: str | None = None
    dead_heat_rules: str | None = None


class InPlayResponse(DataGolfBaseModel):
    info: InPlayInfo = Field(default_factory=InPlayInfo)
    data: list[LivePlayerPayload] = Field(default_factory=list[LivePlayerPayload])


def accepts(model: type[BaseModel]) -> ResponsePredicate:
    """Response predicate: true when ``payload`` validates as ``model``."""

    def predicate(payload: object) -> bool:
        try:
            model.model_validate(payload)
        except ValidationError:
            return False
        return True

    return predicate
