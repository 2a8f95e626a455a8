"""
Monitoring components for the memtrack host memory monitor.
"""
from memtrack.monitoring.snapshot import ProcessSample, SamplerPolicy, Snapshot
from memtrack.monitoring.resource_sampler import ResourceSampler

__all__ = [
    'ProcessSample',
    'SamplerPolicy',
    'Snapshot',
    'ResourceSampler'
]
