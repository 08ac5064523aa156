from __future__ import annotations

import io
import json

import pytest

from city_seed.common.http import FetchOutcome
from city_seed.common.models import Endpoints

ENDPOINTS = Endpoints(location_data="http://feed.test/static/", occupation_data="http://feed.test/bls_jobs/")

CITY_A = (
    '{"city":"A","state":"ST","studio":1,"onebr":2,"twobr":3,"threebr":4,"fourbr":5,'
    '"walkscore":50.0,"population":1000,"occ_title":"X","hourly_wage":10.0,"annual_wage":20000,'
    '"climate_zone":"Z","simple_climate":"temperate"}'
)


def occupation(title: str, city: str = "A") -> str:
    return json.dumps(
        {
            "city": city,
            "state": "ST",
            "occ_title": title,
            "jobs_1000": 3.5,
            "loc_quotient": 0.9,
            "hourly_wage": 22.5,
            "annual_wage": 46800,
        }
    )


class TrackingStream(io.StringIO):
    """StringIO that can fail mid-read."""

    def __init__(self, body: str, fail_at: int | None = None):
        super().__init__(body)
        self.fail_at = fail_at

    def read(self, size=-1):
        if self.fail_at is not None and self.tell() >= self.fail_at:
            raise OSError("connection reset by peer")
        if self.fail_at is not None:
            size = min(size, self.fail_at - self.tell()) if size and size > 0 else self.fail_at - self.tell()
        return super().read(size)


class FakeFeedClient:
    """Serves canned bodies by URL; anything unknown is a 404."""

    def __init__(self, bodies: dict[str, object]):
        self.bodies = bodies
        self.calls: list[str] = []
        self.streams: list[io.StringIO] = []

    def open_stream(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        body = self.bodies.get(url)
        if body is None:
            return FetchOutcome(url=url, status_code=404, stream=None)
        if isinstance(body, Exception):
            raise body
        stream = body if isinstance(body, io.StringIO) else TrackingStream(body)
        self.streams.append(stream)
        return FetchOutcome(url=url, status_code=200, stream=stream)

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        return None


@pytest.fixture
def endpoints() -> Endpoints:
    return ENDPOINTS


@pytest.fixture
def city_a() -> str:
    return CITY_A


@pytest.fixture
def occupation_record():
    return occupation


@pytest.fixture
def feed_client():
    return FakeFeedClient


@pytest.fixture
def failing_stream():
    return TrackingStream


@pytest.fixture
def two_location_bodies() -> dict[str, object]:
    return {
        "http://feed.test/static/A_ST": CITY_A,
        "http://feed.test/bls_jobs/A_ST": occupation("Nurse") + occupation("Welder"),
    }
