"""
Resource sampling for host physical memory and running processes.
"""
import mmap
import psutil
from typing import List, Optional, Tuple

from memtrack.monitoring.snapshot import ProcessSample, SamplerPolicy, Snapshot
from memtrack.utils import get_logger, format_bytes

logger = get_logger(__name__)


class ResourceSampler:
    """
    Class responsible for producing point-in-time memory snapshots.

    Host-wide totals come from ``psutil.virtual_memory()`` and the process list
    from ``psutil.process_iter()``. The process list is shaped by a
    :class:`SamplerPolicy` chosen by the caller: an unbounded scan for the
    API and push stream, or a threshold-and-top-N scan for compact views.

    Sampling never raises. An unavailable memory API yields zeroed totals, an
    unavailable process API yields an empty list, and processes that vanish or
    deny access during the scan are skipped.
    """

    def __init__(self, policy: Optional[SamplerPolicy] = None, page_size: Optional[int] = None):
        """
        Initialize the resource sampler.

        :param policy: Process filter policy, defaults to :meth:`SamplerPolicy.unbounded`
        :type policy: Optional[SamplerPolicy]
        :param page_size: OS page size override in bytes, defaults to the host page size
        :type page_size: Optional[int]
        """
        self.policy = policy or SamplerPolicy.unbounded()
        self.page_size = page_size if page_size is not None else mmap.PAGESIZE
        logger.debug(f"ResourceSampler initialized with policy={self.policy}, page_size={self.page_size}")

    def sample(self) -> Snapshot:
        """
        Takes a fresh snapshot of memory totals and processes.

        :return: Immutable snapshot of the current host state
        :rtype: Snapshot
        """
        total, available = self._query_memory_totals()
        processes = self._collect_processes()
        snapshot = Snapshot(
            total_physical_bytes=total,
            available_physical_bytes=available,
            page_size_bytes=self.page_size,
            processes=tuple(processes),
        )
        logger.debug(f"Snapshot sampled: total={format_bytes(total)}, available={format_bytes(available)}, processes={len(processes)}")
        return snapshot

    def _query_memory_totals(self) -> Tuple[int, int]:
        """
        Reads total and available physical memory.

        :return: Tuple (total_bytes, available_bytes), zeros if the query fails
        :rtype: Tuple[int, int]
        """
        try:
            virtual_mem = psutil.virtual_memory()
            total = max(int(virtual_mem.total), 0)
            available = min(max(int(virtual_mem.available), 0), total)
            return total, available
        except Exception as e:
            logger.error(f"Error querying physical memory totals: {e}", exc_info=True)
            return 0, 0

    def _collect_processes(self) -> List[ProcessSample]:
        """
        Enumerates running processes and applies the sampling policy.

        :return: Retained process samples in OS enumeration order
        :rtype: List[ProcessSample]
        """
        processes: List[ProcessSample] = []
        skipped = 0
        try:
            for proc in psutil.process_iter(['pid', 'name']):
                if len(processes) >= self.policy.max_processes:
                    break
                try:
                    working_set = proc.memory_info().rss
                except psutil.Error:
                    skipped += 1
                    continue

                if not self.policy.accepts(working_set):
                    continue

                pinfo = proc.info
                processes.append(ProcessSample(
                    pid=int(pinfo.get('pid') or proc.pid),
                    name=pinfo.get('name') or "",
                    working_set_bytes=int(working_set),
                ))
        except Exception as e:
            logger.error(f"Error enumerating processes: {e}", exc_info=True)
            return []

        if skipped:
            logger.debug(f"Skipped {skipped} processes that could not be inspected")
        return processes
