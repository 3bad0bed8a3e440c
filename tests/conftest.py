"""Test configuration and fixtures."""

import json
from pathlib import Path

import pytest

from jp_reachable.config import RetryPolicy, RunConfig
from jp_reachable.core.models import FlatRow, Origin, TimeBand

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class RecordingSleep:
    """Fake sleep that records requested delays instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep():
    """A sleep replacement recording each delay."""
    return RecordingSleep()


@pytest.fixture
def origin():
    """Primary test origin."""
    return Origin(name="茅場町", node="00001303")


@pytest.fixture
def second_origin():
    """Secondary test origin."""
    return Origin(name="八丁堀", node="00007548")


@pytest.fixture
def small_config(origin, second_origin):
    """Two origins x two bands, fast retry policy."""
    return RunConfig(
        origins=[origin, second_origin],
        bands=[TimeBand(lower=0, higher=10), TimeBand(lower=10, higher=20)],
        endpoint="https://example.test/api/route/reachable",
        pacing_delay=0.25,
        retry=RetryPolicy(retries=2, backoff=0.7, timeout=5.0),
    )


@pytest.fixture
def sample_api_response():
    """Reachable API response for 茅場町 within 0-10 minutes."""
    with open(FIXTURES_DIR / "reachable_kayabacho_0-10.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def make_row(origin):
    """Factory for FlatRow objects with sensible defaults."""

    def _make_row(
        station_id: str = "00006668",
        band: str = "0-10",
        minutes: int = 5,
        line: str = "東京メトロ東西線",
        target: Origin | None = None,
        **overrides,
    ) -> FlatRow:
        target = target or origin
        time_range = TimeBand.parse(band)
        fields = {
            "target": target.name,
            "target_node": target.node,
            "time_range": time_range,
            "time_band": time_range.label,
            "line": line,
            "line_id": f"id-{line}",
            "line_color": "#009BBF",
            "station_id": station_id,
            "station_name": f"駅{station_id}",
            "time_minutes": minutes,
            "transit_count": 0,
            "rough_address": "東京都中央区日本橋1-1-1",
            "pref": "東京都",
            "city_ward": "中央区",
            "coord": {"lat": 35.68, "lon": 139.78},
        }
        fields.update(overrides)
        return FlatRow(**fields)

    return _make_row
