"""
Point-in-time records of host memory and process state.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from memtrack.utils import MIB


@dataclass(frozen=True)
class ProcessSample:
    """
    Memory footprint of one process at the instant of sampling.

    :ivar pid: Process identifier. Only unique at sampling time, the OS reuses PIDs.
    :ivar name: Executable file name without its path, empty if unresolvable.
    :ivar working_set_bytes: Resident memory attributed to the process.
    """
    pid: int
    name: str
    working_set_bytes: int


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable record of physical memory totals and the sampled process list.

    Snapshots carry no identity and are never related to each other; each call
    to the sampler produces a fresh one that is consumed and discarded.
    """
    total_physical_bytes: int
    available_physical_bytes: int
    page_size_bytes: int
    processes: Tuple[ProcessSample, ...] = field(default_factory=tuple)

    @property
    def used_physical_bytes(self) -> int:
        return self.total_physical_bytes - self.available_physical_bytes

    @property
    def page_count(self) -> int:
        if self.page_size_bytes <= 0:
            return 0
        return self.used_physical_bytes // self.page_size_bytes

    @property
    def usage_percent(self) -> float:
        if self.total_physical_bytes <= 0:
            return 0.0
        percent = self.used_physical_bytes / self.total_physical_bytes * 100
        return min(max(percent, 0.0), 100.0)


@dataclass(frozen=True)
class SamplerPolicy:
    """
    Filter applied to the process list while sampling.

    :ivar max_processes: Upper bound on retained entries; enumeration stops once reached.
    :ivar min_working_set_bytes: When set, keep only processes whose working set is strictly above it.
    """
    max_processes: int = 1024
    min_working_set_bytes: Optional[int] = None

    def __post_init__(self):
        if self.max_processes <= 0:
            raise ValueError(f"max_processes must be positive, got {self.max_processes}")
        if self.min_working_set_bytes is not None and self.min_working_set_bytes < 0:
            raise ValueError(f"min_working_set_bytes must not be negative, got {self.min_working_set_bytes}")

    def accepts(self, working_set_bytes: int) -> bool:
        if self.min_working_set_bytes is None:
            return True
        return working_set_bytes > self.min_working_set_bytes

    @classmethod
    def unbounded(cls) -> 'SamplerPolicy':
        """Every inspectable process, capped at 1024 entries."""
        return cls(max_processes=1024, min_working_set_bytes=None)

    @classmethod
    def top_consumers(cls) -> 'SamplerPolicy':
        """At most 10 processes, each using more than 50 MB."""
        return cls(max_processes=10, min_working_set_bytes=50 * MIB)
