import random

import fakeredis
import pytest

from geofilter.clients.geocodec import GeoCodec
from geofilter.clients.redis_client import RedisCommandExecutor
from geofilter.clients.write_dispatcher import WriteDispatcher
from geofilter.workflows.expiry_sweeper import ExpirySweeper
from geofilter.workflows.geofilter import Geofilter
from geofilter.workflows.load_generator import LoadGenerator
from geofilter.workflows.proximity_index import ProximityIndex
from geofilter.workflows.query_engine import QueryEngine

NYC = (40.7128, -74.0060)
WINDOW_MS = 1_800_000


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


@pytest.fixture
def redis_client():
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def executor(redis_client):
    return RedisCommandExecutor(redis_client)


@pytest.fixture
def dispatcher():
    d = WriteDispatcher(lanes=4)
    yield d
    d.shutdown(wait=True)


@pytest.fixture
def codec():
    return GeoCodec()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def index(executor, dispatcher, codec, clock):
    return ProximityIndex(executor, dispatcher, codec, clock=clock)


@pytest.fixture
def query_engine(executor, codec):
    return QueryEngine(executor, codec)


@pytest.fixture
def sweeper(executor, index, clock):
    return ExpirySweeper(executor, index, expiration_ms=WINDOW_MS, clock=clock)


@pytest.fixture
def geofilter(executor, dispatcher, index, query_engine, sweeper, codec):
    generator = LoadGenerator(index, query_engine, codec, rng=random.Random(7))
    return Geofilter(executor, dispatcher, index, query_engine, sweeper, generator)
