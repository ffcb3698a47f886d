import pytest

from pricecheck.config import settings
from pricecheck.interaction.resilient import ResilientInteractor
from pricecheck.tests.fakes import FakeClock, FakeDriver, instant_timeouts


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_interactor(clock):
    """Interactor over a FakeDriver whose waits advance a fake clock instead of sleeping."""
    def _make(html: str = "", timeout_s: float = 1, max_attempts: int = 3):
        driver = html if isinstance(html, FakeDriver) else FakeDriver(html)
        return ResilientInteractor(
            driver,
            timeout_s=timeout_s,
            poll_interval_s=0.25,
            max_attempts=max_attempts,
            timeout_factory=instant_timeouts(clock),
        )
    return _make


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    # Never pick up a developer's config/config.json or credentials
    monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "no-config.json"))
    monkeypatch.delenv("BH_USERNAME", raising=False)
    monkeypatch.delenv("BH_PASSWORD", raising=False)
    settings.reload_config()
    yield
    settings.reload_config()
