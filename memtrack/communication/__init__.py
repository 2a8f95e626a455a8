"""
Network delivery components for the memtrack host memory monitor.
"""
from memtrack.communication.serializer import SnapshotSerializer
from memtrack.communication.static_files import StaticFileDelivery, StaticFile
from memtrack.communication.connection_server import ConnectionServer, ServerStartupError

__all__ = [
    'SnapshotSerializer',
    'StaticFileDelivery',
    'StaticFile',
    'ConnectionServer',
    'ServerStartupError'
]
