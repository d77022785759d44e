import pytest

from supplies import settings
from supplies.tracker import SupplyTracker

# 2024-01-01T00:00:00Z
T0 = 1_704_067_200_000
HOUR = 3_600_000


class FakeClock:
    def __init__(self, start: int = T0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "profiles.json"


@pytest.fixture
def tracker(state_path, clock):
    return SupplyTracker(state_path=state_path, clock=clock)


@pytest.fixture(autouse=True)
def isolated_outputs(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(settings, "STATE_FILE", tmp_path / "default_state.json")
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
