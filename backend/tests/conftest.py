"""
Arduino Relay - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests never talk to a real Firebase project. Route tests run against an
       in-memory DataSink; adapter tests patch the firebase_admin SDK.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings isolated from the process environment
    ├── memory_sink: In-memory keyed store with push-style keys
    ├── failing_sink: Sink whose every write fails
    ├── slow_sink: In-memory sink with staggered awaits per record
    ├── test_client: HTTPX AsyncClient wired to an app using memory_sink
    ├── failing_client: HTTPX AsyncClient wired to an app using failing_sink
    └── slow_client: HTTPX AsyncClient wired to an app using slow_sink
"""

import asyncio
import itertools
import os
import tempfile
from typing import Any, Callable, Dict, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from relay.exceptions import SinkWriteError
from relay.services.data_sink import DataSink, WriteFailed, WriteResult, WriteSucceeded


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE relay.main is imported anywhere
# Why: relay.main builds a module-level app from the environment
os.environ["FIREBASE_CREDENTIALS_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="relay_test_"), "missing-service-account.json"
)
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class InMemoryDataSink(DataSink):
    """
    Keyed store kept in a dict.

    Keys are monotonically increasing, like Firebase push ids, so tests can
    assert on creation order where it matters.
    """

    def __init__(self):
        self.records: Dict[str, Any] = {}
        self.append_calls = 0
        self._counter = itertools.count(1)

    async def append(self, record: Any) -> WriteResult:
        self.append_calls += 1
        key = f"-Nrelay{next(self._counter):012d}"
        self.records[key] = record
        return WriteSucceeded(key)

    async def health_check(self) -> bool:
        return True


class SlowDataSink(InMemoryDataSink):
    """
    In-memory sink that awaits before storing, so concurrent requests
    really overlap. `delay_for(record)` picks the wait per record, and
    `completed` lists records in the order their writes finished.
    """

    def __init__(self, delay_for: Callable[[Any], float]):
        super().__init__()
        self.delay_for = delay_for
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed: List[Any] = []

    async def append(self, record: Any) -> WriteResult:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay_for(record))
        finally:
            self.in_flight -= 1
        self.completed.append(record)
        return await super().append(record)


class FailingDataSink(DataSink):
    """Sink that behaves like Firebase with a revoked credential."""

    def __init__(self, message: str = "Permission denied"):
        self.message = message
        self.append_calls = 0

    async def append(self, record: Any) -> WriteResult:
        self.append_calls += 1
        return WriteFailed(
            SinkWriteError(
                message=self.message,
                context={"path": "arduinoData", "error_type": "UnauthenticatedError"},
            )
        )

    async def health_check(self) -> bool:
        return False


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings that ignore .env files and point at a non-existent key."""
    from relay.config import Settings

    return Settings(
        _env_file=None,
        firebase_credentials_path=str(tmp_path / "service-account.json"),
        log_level="WARNING",
    )


@pytest.fixture
def memory_sink():
    return InMemoryDataSink()


@pytest.fixture
def failing_sink():
    return FailingDataSink()


@pytest_asyncio.fixture
async def test_client(test_settings, memory_sink):
    """
    Provides an async HTTP test client for endpoint testing.

    How:     ASGITransport routes requests straight into the app. It does not
             run the lifespan, so the injected memory_sink is what routes see.
    """
    from relay.main import create_app

    app = create_app(settings=test_settings, data_sink=memory_sink)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def failing_client(test_settings, failing_sink):
    from relay.main import create_app

    app = create_app(settings=test_settings, data_sink=failing_sink)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def slow_sink():
    """Later readings finish first: {"reading": i} waits (20 - i) * 20ms."""
    return SlowDataSink(lambda record: max(0, 20 - record.get("reading", 0)) * 0.02)


@pytest_asyncio.fixture
async def slow_client(test_settings, slow_sink):
    from relay.main import create_app

    app = create_app(settings=test_settings, data_sink=slow_sink)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
