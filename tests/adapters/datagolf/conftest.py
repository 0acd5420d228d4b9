"""Shared fixtures for DataGolf adapter tests."""

from __future__ import annotations

import pytest

from tests.helpers.datagolf import DataGolfPayload, load_payload


@pytest.fixture
def field_updates_payload() -> DataGolfPayload:
    return load_payload("field_updates")


@pytest.fixture
def rankings_payload() -> DataGolfPayload:
    return load_payload("rankings")


@pytest.fixture
def in_play_payload() -> DataGolfPayload:
    return load_payload("in_play")
