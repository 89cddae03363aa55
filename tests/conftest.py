"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from splitsmart.services.data.memory import MemoryDataService
from splitsmart.services.data.sql import SqlDataService
from splitsmart.services.db import create_session_factory
from splitsmart.services.expense_service import ExpenseService

# Fixed reference time so date-window rules do not drift with the wall clock
FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def db_session():
    """Provide a session on a fresh in-memory SQLite database."""
    session_factory = create_session_factory("sqlite:///:memory:")
    session = session_factory()
    yield session
    session.close()
    session_factory.kw["bind"].dispose()


@pytest.fixture(params=["memory", "sql"])
def data_service(request):
    """Run the test once per storage backend."""
    if request.param == "memory":
        yield MemoryDataService()
    else:
        yield SqlDataService(request.getfixturevalue("db_session"))


@pytest.fixture
def expense_service(data_service, fixed_now):
    return ExpenseService(data_service, now=fixed_now)


@pytest.fixture
def trip_group(data_service):
    """USD group with members A and B."""
    return data_service.add_group("Trip", "USD", ["A", "B"])
