import os

# Use in-memory sqlite for tests; must be set before shallwewalk.db is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from shallwewalk.schemas.activity import ActivityLevel  # noqa: E402
from shallwewalk.schemas.profile import AnimalProfile  # noqa: E402
from shallwewalk.services.storage import InMemoryKeyValueStorage  # noqa: E402


@pytest.fixture
def storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def sql_session_factory():
    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def make_profile(name: str = "Bori", **overrides) -> AnimalProfile:
    data = {
        "name": name,
        "weight_kg": 10.0,
        "age_years": 3,
        "breed": "믹스견",
        "activity_level": ActivityLevel.medium,
    }
    data.update(overrides)
    return AnimalProfile(**data)


@pytest.fixture
def bori():
    return make_profile("Bori")
