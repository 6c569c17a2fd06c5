"""Test configuration and fixtures."""

import copy
import json
from datetime import datetime

import pytest

from oebb_live.core.upstream import UpstreamSource

# Frozen "current time" used by the locator tests
NOW = datetime(2026, 10, 18, 12, 0)


class FakeUpstream(UpstreamSource):
    """In-memory upstream returning canned payloads."""

    def __init__(self, boards=None, stations=None, failures=None):
        self.boards = boards or {}
        self.stations = stations if stations is not None else []
        self.failures = failures or {}
        self.board_calls = []
        self.station_calls = []

    def search_stations(self, name, count):
        self.station_calls.append((name, count))
        return copy.deepcopy(self.stations)

    def fetch_board(self, station_id, at, max_journeys):
        self.board_calls.append((station_id, at, max_journeys))
        if station_id in self.failures:
            raise self.failures[station_id]
        return copy.deepcopy(self.boards.get(station_id, {"journey": []}))


def departure(label, time, delay=None, date="18.10.2026", **extra):
    """Build one raw board entry in the upstream's abbreviated format."""
    entry = {
        "id": f"{label}-{time}",
        "pr": label,
        "ti": time,
        "da": date,
        "lastStop": extra.pop("lastStop", "Salzburg Hbf"),
        "tr": extra.pop("tr", "8"),
        "rt": False,
    }
    if delay is not None:
        entry["rt"] = {
            "status": extra.pop("status", None),
            "dlm": delay,
            "dlt": extra.pop("dlt", ""),
            "dld": extra.pop("dld", date),
        }
    entry.update(extra)
    return entry


@pytest.fixture
def make_upstream():
    """Factory for fake upstreams."""
    return FakeUpstream


@pytest.fixture
def frozen_now(monkeypatch):
    """Freeze the clock used by the board fetcher and the locator."""
    monkeypatch.setattr("oebb_live.core.models._now", lambda: NOW)
    return NOW


@pytest.fixture
def sample_board():
    """Decoded departure board of Wien Hbf at 12:00."""
    return {
        "stationName": "Wien Hbf",
        "stationEvaId": "1290401",
        "journey": [
            departure("RJ 840", "11:50"),
            departure(
                "REX 7", "12:10", delay="10", dlt="12:20", lastStop="Bruck/Leitha", tr="3"
            ),
            departure("RJX 160", "12:30", delay="", status="Ausfall", lastStop="Zürich HB"),
            departure("S 1", "12:40", lastStop="Gänserndorf", tr=""),
        ],
    }


@pytest.fixture
def sample_jsonp_board(sample_board):
    """The same board wrapped the way the live ticker sends it."""
    return "journeysObj = " + json.dumps(sample_board) + ";"


@pytest.fixture
def sample_stations_payload():
    """Station search response of the ticket shop API."""
    return [
        {
            "number": 1290401,
            "name": "Wien Hbf",
            "meta": "Wien Hbf (U)",
            "latitude": 48185184,
            "longitude": 16376413,
        },
        {
            "number": 1291501,
            "name": "Wien Meidling",
            "meta": "",
            "latitude": 48174770,
            "longitude": 16333440,
        },
        {
            "number": 1290201,
            "name": "Wien Westbahnhof",
            "latitude": 48.196629,
            "longitude": 16.337915,
        },
    ]
