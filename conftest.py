"""
Shared pytest configuration.

The environment is pinned BEFORE anything under ``stargate`` is imported so the
module-level Settings and engine point at an in-memory SQLite store.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_PEOPLE"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from stargate.core.database import build_engine  # noqa: E402
from stargate.core.schema import init_schema  # noqa: E402
from stargate.repositories import DutyRepository, PersonRepository, StatusRepository  # noqa: E402
from stargate.services.duty_service import DutyService  # noqa: E402
from stargate.services.person_service import PersonService  # noqa: E402


@pytest.fixture
def engine():
    """A fresh, private in-memory database per test."""
    eng = build_engine("sqlite://")
    init_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def person_repo(engine):
    return PersonRepository(engine)


@pytest.fixture
def duty_repo(engine):
    return DutyRepository(engine)


@pytest.fixture
def person_service(person_repo):
    return PersonService(person_repo)


@pytest.fixture
def duty_service(person_repo, duty_repo):
    return DutyService(person_repo, StatusRepository(), duty_repo, max_attempts=3)
