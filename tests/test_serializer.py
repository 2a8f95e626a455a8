"""Tests for SnapshotSerializer."""
import json

import pytest

from memtrack.communication import SnapshotSerializer
from memtrack.monitoring import ProcessSample, Snapshot
from memtrack.utils import GIB, MIB

EXPECTED_KEYS = [
    'totalMemory', 'usedMemory', 'availableMemory', 'pageSize',
    'pageCount', 'memoryUsagePercent', 'processes',
]


def test_serialized_snapshot_parses_back(sample_snapshot):
    document = json.loads(SnapshotSerializer().serialize(sample_snapshot))

    assert list(document.keys()) == EXPECTED_KEYS
    assert document['totalMemory'] == 16 * GIB
    assert document['availableMemory'] == 8 * GIB
    assert document['usedMemory'] == document['totalMemory'] - document['availableMemory']
    assert document['pageSize'] == 4096
    assert document['pageCount'] == sample_snapshot.page_count
    assert document['memoryUsagePercent'] == 50.0
    assert document['processes'] == [
        {'pid': 4, 'name': 'System', 'memory': 120 * MIB},
        {'pid': 1312, 'name': 'chrome.exe', 'memory': 512 * MIB},
    ]


def test_usage_percent_has_two_decimals(sample_snapshot):
    text = SnapshotSerializer().serialize(sample_snapshot)

    assert '"memoryUsagePercent": 50.00' in text


def test_empty_process_list():
    text = SnapshotSerializer().serialize(Snapshot(16 * GIB, 8 * GIB, 4096, ()))

    assert '"processes": []' in text
    assert json.loads(text)['processes'] == []


@pytest.mark.parametrize("name", [
    'say "hello".exe',
    'C:\\temp\\tool.exe',
    'tab\there',
    'line\nbreak\r\x00\x1f',
    'caf\u00e9 \u30c6\u30b9\u30c8',
])
def test_special_characters_in_names_stay_valid_json(name):
    snapshot = Snapshot(GIB, 0, 4096, (ProcessSample(1, name, MIB),))

    document = json.loads(SnapshotSerializer().serialize(snapshot))

    assert document['processes'][0]['name'] == name


def test_without_pid(sample_snapshot):
    document = json.loads(SnapshotSerializer(include_pid=False).serialize(sample_snapshot))

    assert document['processes'][0] == {'name': 'System', 'memory': 120 * MIB}


def test_gigabyte_presentation(sample_snapshot):
    text = SnapshotSerializer(units='gb').serialize(sample_snapshot)
    document = json.loads(text)

    assert list(document.keys()) == EXPECTED_KEYS
    assert '"totalMemory": 16.00' in text
    assert '"usedMemory": 8.00' in text
    assert '"memoryUsagePercent": 50.0,' in text
    assert document['processes'][1]['memory'] == 512.0


def test_large_process_list_is_not_truncated():
    processes = tuple(ProcessSample(pid, f"worker-{pid}.exe", pid * 1024) for pid in range(5000))
    snapshot = Snapshot(64 * GIB, 32 * GIB, 4096, processes)

    document = json.loads(SnapshotSerializer().serialize(snapshot))

    assert len(document['processes']) == 5000
    assert document['processes'][-1]['name'] == "worker-4999.exe"


def test_serialization_is_deterministic(sample_snapshot):
    serializer = SnapshotSerializer()

    assert serializer.serialize(sample_snapshot) == serializer.serialize(sample_snapshot)


def test_unknown_units_rejected():
    with pytest.raises(ValueError):
        SnapshotSerializer(units='kb')
