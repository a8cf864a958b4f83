"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest

from courier.config import Settings
from courier.delivery import DeliveryExecutor, DispatchGateway, FailureTracker, RetryScheduler
from courier.hooks import Hooks, Signals
from courier.notifications import LogMailer
from courier.queue import InProcessTaskQueue
from courier.service import CourierService
from courier.storage import InMemoryFailureStore

# Add tests directory to path so helpers can be imported
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

URL = "https://example.com/webhook"


class FakeClock:
    """Manually advanced clock for time-dependent tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class RecordingTransport:
    """httpx transport stub that answers with fixed responses and keeps requests."""

    def __init__(self, *statuses: int | Exception) -> None:
        self.statuses = list(statuses) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, Exception):
            raise status
        return httpx.Response(status, text="ok" if status == 200 else "nope")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at a fixed UTC time."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(_env_file=None, admin_email="admin@example.com", url_override=None)


@pytest.fixture
def store(clock: FakeClock) -> InMemoryFailureStore:
    """In-memory failure store on the fake clock."""
    return InMemoryFailureStore(clock)


@pytest.fixture
def tracker(store: InMemoryFailureStore, clock: FakeClock) -> FailureTracker:
    """Failure tracker with one-hour windows."""
    return FailureTracker(store, clock=clock)


@pytest.fixture
def queue(clock: FakeClock) -> InProcessTaskQueue:
    """In-process task queue on the fake clock."""
    return InProcessTaskQueue(clock)


@pytest.fixture
def hooks() -> Hooks:
    """Hooks with nothing set."""
    return Hooks()


@pytest.fixture
def signals() -> Signals:
    """Signals with no handlers."""
    return Signals()


@pytest.fixture
def gateway(
    queue: InProcessTaskQueue, tracker: FailureTracker, hooks: Hooks, settings: Settings
) -> DispatchGateway:
    """Dispatch gateway over the fixture queue and tracker."""
    return DispatchGateway(queue, tracker, hooks, settings)


@pytest.fixture
def retry(queue: InProcessTaskQueue, hooks: Hooks, settings: Settings) -> RetryScheduler:
    """Retry scheduler with the default 60s base."""
    return RetryScheduler(queue, hooks, settings.task_name, settings.task_group)


@pytest.fixture
def transport() -> RecordingTransport:
    """Transport answering HTTP 200."""
    return RecordingTransport(200)


@pytest.fixture
def make_executor(
    tracker: FailureTracker,
    retry: RetryScheduler,
    hooks: Hooks,
    signals: Signals,
    settings: Settings,
) -> Callable[..., DeliveryExecutor]:
    """Factory for executors bound to a transport."""

    def _make(transport: RecordingTransport, registry=None) -> DeliveryExecutor:
        return DeliveryExecutor(
            tracker,
            retry,
            hooks,
            signals,
            settings,
            registry=registry,
            http_client=transport.client(),
        )

    return _make


@pytest.fixture
def mailer() -> LogMailer:
    """Mailer that records notifications."""
    return LogMailer()


@pytest.fixture
def make_service(
    settings: Settings, clock: FakeClock, mailer: LogMailer
) -> Callable[..., CourierService]:
    """Factory for a fully wired in-process CourierService."""

    def _make(transport: RecordingTransport, **overrides) -> CourierService:
        overrides.setdefault("mailer", mailer)
        return CourierService.create(
            overrides.pop("settings", settings),
            http_client=transport.client(),
            clock=clock,
            **overrides,
        )

    return _make
