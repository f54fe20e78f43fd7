"""
Pytest fixtures for the approval kernel test suite.

Provides:
- Structured logging for the whole suite and a ``captured_logs`` reader
- In-memory SQLite sessions (one fresh database per test)
- The seeded reference company ("Light": 4 approvers, rules R1..R5)
- Recording fake notification channels and in-memory directories

Environment Variables:
- DATABASE_URL: overrides the in-memory SQLite URL (e.g. a PostgreSQL test
  database).  Tables are dropped and recreated around every test.
"""

import json
import logging
import os
from io import StringIO

import pytest

from approval_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from approval_kernel.db.sample_data import seed_sample_data
from approval_kernel.domain.clock import DeterministicClock
from approval_kernel.domain.workflow import Company
from approval_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

from tests.fakes import FIXED_NOW, RecordingChannel

DEFAULT_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture approval_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, processor):
            processor.process_invoice(request)
            logs = captured_logs()
            assert any(r["message"] == "invoice_processing_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("approval_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


@pytest.fixture
def engine():
    """Fresh schema per test."""
    eng = init_engine_from_url(get_database_url())
    drop_tables()
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine):
    """Session bound to the per-test database; rolled back and closed afterwards."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def seeded(session) -> Company:
    """The reference company with its approvers and rules R1..R5."""
    company = seed_sample_data(session)
    session.flush()
    return company


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


# =============================================================================
# Fakes
# =============================================================================


@pytest.fixture
def slack_channel() -> RecordingChannel:
    return RecordingChannel("slack")


@pytest.fixture
def email_channel() -> RecordingChannel:
    return RecordingChannel("email")
