"""
JSON encoding of memory snapshots for the API response and the push stream.
"""
import json
from typing import List

from memtrack.monitoring import Snapshot, ProcessSample
from memtrack.utils import bytes_to_gb, bytes_to_mb

SUPPORTED_UNITS = ('bytes', 'gb')


class SnapshotSerializer:
    """
    Turns a :class:`Snapshot` into a JSON document.

    Keys are written in a fixed order: ``totalMemory, usedMemory,
    availableMemory, pageSize, pageCount, memoryUsagePercent, processes``.
    With ``units='bytes'`` sizes are integer byte counts and the usage
    percentage carries two decimals. ``units='gb'`` renders totals in GB
    (two decimals), usage with one decimal and process memory in MB.

    All strings are encoded with :func:`json.dumps`, so process names with
    quotes, backslashes or control characters always yield valid JSON.
    """

    def __init__(self, include_pid: bool = True, units: str = 'bytes'):
        """
        :param include_pid: Emit ``pid`` for each process entry
        :type include_pid: bool
        :param units: ``'bytes'`` or ``'gb'``
        :type units: str
        :raises ValueError: If units is not supported
        """
        if units not in SUPPORTED_UNITS:
            raise ValueError(f"Unsupported units '{units}'. Expected one of: {', '.join(SUPPORTED_UNITS)}")
        self.include_pid = include_pid
        self.units = units

    def serialize(self, snapshot: Snapshot) -> str:
        """
        Encodes a snapshot as JSON text.

        :param snapshot: Snapshot to encode
        :type snapshot: Snapshot
        :return: JSON document
        :rtype: str
        """
        if self.units == 'gb':
            members = [
                ('totalMemory', f"{bytes_to_gb(snapshot.total_physical_bytes):.2f}"),
                ('usedMemory', f"{bytes_to_gb(snapshot.used_physical_bytes):.2f}"),
                ('availableMemory', f"{bytes_to_gb(snapshot.available_physical_bytes):.2f}"),
                ('pageSize', str(snapshot.page_size_bytes)),
                ('pageCount', str(snapshot.page_count)),
                ('memoryUsagePercent', f"{snapshot.usage_percent:.1f}"),
            ]
        else:
            members = [
                ('totalMemory', str(snapshot.total_physical_bytes)),
                ('usedMemory', str(snapshot.used_physical_bytes)),
                ('availableMemory', str(snapshot.available_physical_bytes)),
                ('pageSize', str(snapshot.page_size_bytes)),
                ('pageCount', str(snapshot.page_count)),
                ('memoryUsagePercent', f"{snapshot.usage_percent:.2f}"),
            ]

        parts: List[str] = [f"{json.dumps(key)}: {value}" for key, value in members]
        entries = ", ".join(self._encode_process(process) for process in snapshot.processes)
        parts.append(f"\"processes\": [{entries}]")
        return "{" + ", ".join(parts) + "}"

    def _encode_process(self, process: ProcessSample) -> str:
        if self.units == 'gb':
            memory = f"{bytes_to_mb(process.working_set_bytes):.1f}"
        else:
            memory = str(process.working_set_bytes)

        fields = []
        if self.include_pid:
            fields.append(f"\"pid\": {process.pid}")
        fields.append(f"\"name\": {json.dumps(process.name)}")
        fields.append(f"\"memory\": {memory}")
        return "{" + ", ".join(fields) + "}"
