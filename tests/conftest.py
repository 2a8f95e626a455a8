"""Shared fixtures for the memtrack test suite."""
import threading
from types import SimpleNamespace

import psutil
import pytest

from memtrack.communication import ConnectionServer, SnapshotSerializer, StaticFileDelivery
from memtrack.monitoring import ProcessSample, Snapshot
from memtrack.utils import GIB, MIB, setup_logger
from memtrack.utils.logger import APP_LOGGER_NAME


class FakeProcess:
    """Stands in for psutil.Process as yielded by psutil.process_iter(['pid', 'name'])."""

    def __init__(self, pid, name, rss=None, error=None):
        self.pid = pid
        self.info = {'pid': pid, 'name': name}
        self._rss = rss
        self._error = error
        self.memory_info_calls = 0

    def memory_info(self):
        self.memory_info_calls += 1
        if self._error is not None:
            raise self._error
        return SimpleNamespace(rss=self._rss, vms=self._rss)


class StubSampler:
    """Returns the same snapshot on every call and counts calls."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.calls = 0

    def sample(self):
        self.calls += 1
        return self.snapshot


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Rebinds the application logger to the live stderr once capture fixtures are gone."""
    yield
    setup_logger(APP_LOGGER_NAME, force=True)


@pytest.fixture
def fake_psutil(monkeypatch):
    """Installs fake memory totals and a fake process table; returns a setter."""
    def install(total=16 * GIB, available=8 * GIB, processes=()):
        monkeypatch.setattr(psutil, 'virtual_memory',
                            lambda: SimpleNamespace(total=total, available=available, percent=0.0))
        monkeypatch.setattr(psutil, 'process_iter', lambda attrs=None, ad_value=None: iter(list(processes)))
    return install


@pytest.fixture
def sample_snapshot():
    return Snapshot(
        total_physical_bytes=16 * GIB,
        available_physical_bytes=8 * GIB,
        page_size_bytes=4096,
        processes=(
            ProcessSample(pid=4, name="System", working_set_bytes=120 * MIB),
            ProcessSample(pid=1312, name="chrome.exe", working_set_bytes=512 * MIB),
        ),
    )


@pytest.fixture
def static_root(tmp_path):
    (tmp_path / "index.html").write_text("<html><body>memtrack</body></html>", encoding="utf-8")
    (tmp_path / "style.css").write_text("body { color: black; }", encoding="utf-8")
    (tmp_path / "app.js").write_text("console.log('memtrack');", encoding="utf-8")
    return tmp_path


@pytest.fixture
def running_server(sample_snapshot, static_root):
    """ConnectionServer on an ephemeral localhost port, served from a daemon thread."""
    sampler = StubSampler(sample_snapshot)
    server = ConnectionServer(
        host='127.0.0.1',
        port=0,
        sampler=sampler,
        serializer=SnapshotSerializer(),
        static_files=StaticFileDelivery(str(static_root)),
        push_interval=0.05,
        read_timeout=2.0,
    )
    server.open()
    thread = threading.Thread(target=server.serve_forever, name="TestServer", daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.stop()
        thread.join(timeout=5)
