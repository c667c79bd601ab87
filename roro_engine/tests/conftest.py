"""Shared fixtures for engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from roro_engine.experiment import ExperimentAssigner
from roro_engine.metrics import MetricsRecorder
from roro_engine.models.viewer import SubjectIdentity
from roro_engine.storage import InMemoryExperimentStore

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryExperimentStore()


@pytest.fixture
def recorder(store, clock):
    return MetricsRecorder(store, clock=clock)


@pytest.fixture
def assigner(store, recorder, clock):
    return ExperimentAssigner(store, recorder, clock=clock)


@pytest.fixture
def anon():
    return SubjectIdentity(session_id="abcdefghij0123456789")


@pytest.fixture
def member():
    return SubjectIdentity(user_id="42", session_id="abcdefghij0123456789")
