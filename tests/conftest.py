"""Shared fixtures for notify-mute tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from notify_mute.suppression_store import SuppressionStore

RESOURCES = Path(__file__).parent / "resources"

# sha256 of the canonical JSON for the key "Bar"
BAR_FINGERPRINT = "9cf3754f15467c507012911cc590ee7a571bdb4c6bba30c605868304033db330"


class FakeClock:
    """Settable clock for deterministic expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    """Suppression store on the real clock."""
    s = SuppressionStore(data_dir=str(tmp_path / "data"))
    yield s
    s.close()


@pytest.fixture
def clocked_store(tmp_path, clock):
    """Suppression store driven by a FakeClock."""
    s = SuppressionStore(data_dir=str(tmp_path / "data"), clock=clock)
    yield s
    s.close()


@pytest.fixture
def sample_payload() -> str:
    """Slack interactive message payload with one mute action."""
    return (RESOURCES / "samplerequest.json").read_text()
