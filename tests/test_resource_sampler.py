"""Tests for ResourceSampler against a faked psutil."""
import psutil

from memtrack.monitoring import ResourceSampler, SamplerPolicy
from memtrack.utils import GIB, MIB

from conftest import FakeProcess


def test_sample_reports_memory_totals(fake_psutil):
    fake_psutil(total=16 * GIB, available=8 * GIB)

    snapshot = ResourceSampler(page_size=4096).sample()

    assert snapshot.total_physical_bytes == 16 * GIB
    assert snapshot.available_physical_bytes == 8 * GIB
    assert snapshot.page_size_bytes == 4096
    assert snapshot.page_count == 8 * GIB // 4096
    assert f"{snapshot.usage_percent:.2f}" == "50.00"


def test_processes_keep_enumeration_order(fake_psutil):
    fake_psutil(processes=[
        FakeProcess(300, "zsh", rss=5 * MIB),
        FakeProcess(7, "init", rss=1 * MIB),
        FakeProcess(42, "python", rss=80 * MIB),
    ])

    snapshot = ResourceSampler().sample()

    assert [p.pid for p in snapshot.processes] == [300, 7, 42]
    assert [p.name for p in snapshot.processes] == ["zsh", "init", "python"]
    assert snapshot.processes[2].working_set_bytes == 80 * MIB


def test_inaccessible_processes_are_skipped(fake_psutil):
    fake_psutil(processes=[
        FakeProcess(1, "secure", error=psutil.AccessDenied(pid=1)),
        FakeProcess(2, "gone", error=psutil.NoSuchProcess(pid=2)),
        FakeProcess(3, "zombie", error=psutil.ZombieProcess(pid=3)),
        FakeProcess(4, "ok", rss=10 * MIB),
    ])

    snapshot = ResourceSampler().sample()

    assert [p.name for p in snapshot.processes] == ["ok"]


def test_other_process_errors_skip_only_that_process(fake_psutil):
    fake_psutil(processes=[
        FakeProcess(1, "first", rss=10 * MIB),
        FakeProcess(2, "broken", error=psutil.Error()),
        FakeProcess(3, "last", rss=20 * MIB),
    ])

    snapshot = ResourceSampler().sample()

    assert [p.name for p in snapshot.processes] == ["first", "last"]


def test_threshold_filter_and_cap(fake_psutil):
    processes = [FakeProcess(pid, f"proc{pid}", rss=(pid * 20) * MIB) for pid in range(1, 11)]
    fake_psutil(processes=processes)

    policy = SamplerPolicy(max_processes=3, min_working_set_bytes=50 * MIB)
    snapshot = ResourceSampler(policy).sample()

    assert len(snapshot.processes) == 3
    assert all(p.working_set_bytes > 50 * MIB for p in snapshot.processes)
    assert [p.pid for p in snapshot.processes] == [3, 4, 5]


def test_scan_stops_once_cap_is_reached(fake_psutil):
    processes = [FakeProcess(pid, "p", rss=MIB) for pid in range(5)]
    fake_psutil(processes=processes)

    snapshot = ResourceSampler(SamplerPolicy(max_processes=2)).sample()

    assert len(snapshot.processes) == 2
    assert sum(p.memory_info_calls for p in processes) == 2


def test_missing_name_becomes_empty_string(fake_psutil):
    fake_psutil(processes=[FakeProcess(9, None, rss=MIB)])

    snapshot = ResourceSampler().sample()

    assert snapshot.processes[0].name == ""


def test_available_is_clamped_to_total(fake_psutil):
    fake_psutil(total=4 * GIB, available=5 * GIB)

    snapshot = ResourceSampler().sample()

    assert snapshot.available_physical_bytes == 4 * GIB
    assert snapshot.usage_percent == 0.0


def test_memory_api_failure_degrades_to_zero(monkeypatch, fake_psutil):
    fake_psutil(processes=[FakeProcess(1, "init", rss=MIB)])

    def broken():
        raise OSError("memory status unavailable")
    monkeypatch.setattr(psutil, 'virtual_memory', broken)

    snapshot = ResourceSampler().sample()

    assert snapshot.total_physical_bytes == 0
    assert snapshot.available_physical_bytes == 0
    assert snapshot.usage_percent == 0.0
    assert len(snapshot.processes) == 1


def test_enumeration_failure_degrades_to_empty_list(monkeypatch, fake_psutil):
    fake_psutil()

    def broken(attrs=None, ad_value=None):
        raise RuntimeError("process table unavailable")
    monkeypatch.setattr(psutil, 'process_iter', broken)

    snapshot = ResourceSampler().sample()

    assert snapshot.processes == ()
    assert snapshot.total_physical_bytes == 16 * GIB


def test_default_policy_is_unbounded():
    assert ResourceSampler().policy == SamplerPolicy.unbounded()
