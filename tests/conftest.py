import pytest
import yaml

from ecfan.config import ConfigManager
from ecfan.ec import EC_SPACE_SIZE, ECAccessProvider, RegisterWriter
from ecfan.events import REGISTER_WRITTEN, event_bus


class FakeAccess(ECAccessProvider):
    """Counts ensure_ready() calls, optionally failing."""

    def __init__(self, error: Exception = None):
        self.calls = 0
        self.error = error

    def ensure_ready(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


@pytest.fixture(autouse=True)
def fresh_config():
    ConfigManager._instance = None
    yield
    ConfigManager._instance = None


@pytest.fixture
def ec_file(tmp_path):
    path = tmp_path / "io"
    path.write_bytes(bytes(EC_SPACE_SIZE))
    return path


@pytest.fixture
def writer(ec_file):
    return RegisterWriter(str(ec_file))


@pytest.fixture
def access():
    return FakeAccess()


@pytest.fixture
def recorded_writes():
    writes = []
    event_bus.subscribe(REGISTER_WRITTEN, writes.append)
    yield writes
    event_bus.unsubscribe(REGISTER_WRITTEN, writes.append)


@pytest.fixture
def config_file(tmp_path):
    def _write(**values):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(values))
        return path
    return _write
