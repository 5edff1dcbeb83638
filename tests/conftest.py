from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import requests  # noqa: E402

from osm_geocode.geocoding import GeoResult  # noqa: E402


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, raw: str | None = None):
        self.status_code = status_code
        if raw is None:
            raw = "" if body is None else json.dumps(body)
        self.text = raw
        self.content = raw.encode()

    def json(self):
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise requests.JSONDecodeError(e.msg, e.doc, e.pos) from e


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, *responses: FakeResponse | Exception):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class StubGeocoder:
    """Geocoder returning a fixed answer per street; records every lookup."""

    def __init__(self, answers: dict[str, GeoResult | None] | None = None, default: GeoResult | None = None):
        self.answers = answers or {}
        self.default = default
        self.calls = []

    def lookup(self, query, config):
        self.calls.append(query)
        return self.answers.get(query.street, self.default)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append
