"""
Shared pytest fixtures.

The environment is pinned before any application import so the module-level
engine points at in-memory SQLite and the remote API stays unconfigured.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOCAL_DATABASE_URL"] = "sqlite://"
os.environ["API_KEY"] = ""
os.environ["RESOURCE_ID"] = ""
os.environ["DATASET_URL"] = ""

import random

import pytest

from mgnrega_api.db.database import Base, make_engine, make_session_factory
from mgnrega_api.models.dataset import DistrictData  # noqa: F401
from mgnrega_api.services.cache_store import RecordStore

CSV_HEADER = "district,month,year,person_days,households,funds_spent,works_completed,average_wage,women_participation\n"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return RecordStore(session_factory)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def write_csv(tmp_path):
    def _write(rows, name="goa_mgnrega.csv", header=CSV_HEADER):
        path = tmp_path / name
        path.write_text(header + "".join(line + "\n" for line in rows), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def north_goa_csv(write_csv):
    return write_csv([
        "North Goa,1,2024,7400,389,754800,43,322.5,41.7",
        "North Goa,2,2024,7100,373,724200,41,322.5,42.4",
        "North Goa,3,2024,8300,436,846600,48,322.5,43.1",
    ])
