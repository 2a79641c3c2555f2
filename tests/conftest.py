"""Shared pytest fixtures for shopledger tests."""

import tempfile
import os
from datetime import datetime
import pytest

from shopledger.database.factories import create_memory_database, create_sqlite_database
from shopledger.database.storage import MemoryStorage
from shopledger.domain.debt import DebtService
from shopledger.domain.journal import JournalService
from shopledger.domain.report import ReportService

# Wednesday
NOW = datetime(2024, 5, 15, 10, 30)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def now():
    """Reference instant used by the tests."""
    return NOW


@pytest.fixture
def clock():
    """A clock frozen at NOW that tests may move."""
    return FixedClock(NOW)


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_storage():
    """Dict-backed key-value storage."""
    return MemoryStorage()


@pytest.fixture
def memory_db(memory_storage):
    """Create an in-memory database persisted to a MemoryStorage."""
    db = create_memory_database(storage=memory_storage)
    db.connect()
    db.initialize_schema()
    yield db
    db.disconnect()


@pytest.fixture(params=["sqlite", "memory"])
def any_db(request):
    """Run a test against each ledger store implementation."""
    return request.getfixturevalue("temp_db" if request.param == "sqlite" else "memory_db")


@pytest.fixture
def debt_service(any_db, clock):
    """Create a DebtService over each store."""
    return DebtService(any_db, clock=clock)


@pytest.fixture
def journal_service(any_db, clock):
    """Create a JournalService over each store."""
    return JournalService(any_db, clock=clock)


@pytest.fixture
def report_service(any_db, clock):
    """Create a ReportService over each store."""
    return ReportService(any_db, clock=clock)


@pytest.fixture
def sample_debtor(debt_service):
    """Create a debtor owing 100000."""
    return debt_service.create_debtor(name="Budi", initial_debt_amount=100000, phone="0812-3456-789")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
