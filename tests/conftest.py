import os

# Point settings at throwaway values BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIME_ZONE"] = "UTC"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from zoneinfo import ZoneInfo

import pytest
import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.models import Base
from core.report import Report


@pytest.fixture
def location():
    return ZoneInfo("UTC")


@pytest.fixture
def log():
    return structlog.get_logger()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_report():
    def _make(**overrides) -> Report:
        values = {
            "id": "report-1",
            "account_number": "some-account-number",
            "account_name": "some-account-name",
            "day": 1,
            "month": "October",
            "year": 2016,
            "service_type": "some-service",
            "usage_quantity": 1.0,
            "cost": 1.0,
            "region": "some-region",
            "unit_of_measure": "Hours",
            "resource": "Azure",
        }
        values.update(overrides)
        return Report(**values)

    return _make
