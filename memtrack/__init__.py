"""
memtrack - host memory monitor.

Samples physical memory and process working sets and delivers them as JSON
over TCP, either once per request or as a push stream after an upgrade
handshake.

Main components:
- ResourceSampler: Produces immutable memory snapshots
- SnapshotSerializer: Encodes snapshots as JSON
- ConnectionServer: Serves the API, the push stream and static files
- ConfigManager: Loads monitor configuration
"""

from .version import __version__, __app_name__

from .monitoring import ResourceSampler, SamplerPolicy, Snapshot, ProcessSample

from .communication import ConnectionServer, ServerStartupError, SnapshotSerializer, StaticFileDelivery

from .config import ConfigManager

__all__ = [
    '__version__',
    '__app_name__',

    'ResourceSampler',
    'SamplerPolicy',
    'Snapshot',
    'ProcessSample',

    'ConnectionServer',
    'ServerStartupError',
    'SnapshotSerializer',
    'StaticFileDelivery',

    'ConfigManager'
]
