"""
Single-threaded TCP server delivering memory snapshots.

One accepted connection is serviced at a time. A plain request line is
answered once (memory API or static file) and the connection is closed. An
upgrade handshake switches the connection into push mode, where a fresh
snapshot is written every interval until the client goes away.

Pushed payloads are raw JSON text without WebSocket frame headers; only the
handshake follows the WebSocket upgrade protocol. Clients must read the raw
TCP stream.
"""
import socket
import threading
from typing import Optional, Tuple

from memtrack.communication.http_protocol import (
    Request,
    parse_request,
    build_response,
    build_handshake_response,
)
from memtrack.communication.serializer import SnapshotSerializer
from memtrack.communication.static_files import StaticFileDelivery
from memtrack.core import ConnectionState
from memtrack.monitoring import ResourceSampler
from memtrack.utils import get_logger

logger = get_logger(__name__)

API_MEMORY_PATH = '/api/memory'
NOT_FOUND_BODY = b"404 Not Found"

DEFAULT_BACKLOG = 5
DEFAULT_READ_BUFFER_SIZE = 8192
ACCEPT_POLL_INTERVAL_SEC = 0.5


class ServerStartupError(RuntimeError):
    """Raised when the listening socket cannot be created, bound or put into listen mode."""


class ConnectionServer:
    """
    Accepts one client at a time and serves it over one of two delivery modes.

    :ivar sampler: Source of snapshots
    :ivar serializer: Snapshot to JSON encoder
    :ivar static_files: Fallback delivery for non-API paths
    :ivar push_interval: Seconds between two pushed snapshots
    :ivar read_timeout: Seconds to wait for the first client buffer, None waits forever
    """

    def __init__(self,
                 host: str,
                 port: int,
                 sampler: ResourceSampler,
                 serializer: SnapshotSerializer,
                 static_files: StaticFileDelivery,
                 push_interval: float = 1.0,
                 backlog: int = DEFAULT_BACKLOG,
                 read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
                 read_timeout: Optional[float] = 10.0):
        self.host = host
        self.port = port
        self.sampler = sampler
        self.serializer = serializer
        self.static_files = static_files
        self.push_interval = push_interval
        self.backlog = backlog
        self.read_buffer_size = read_buffer_size
        self.read_timeout = read_timeout

        self._server_socket: Optional[socket.socket] = None
        self._stop_event = threading.Event()
        self._state = ConnectionState.CLOSED
        self._state_lock = threading.Lock()

    @property
    def server_address(self) -> Tuple[str, int]:
        """
        Address the listening socket is bound to.

        :raises RuntimeError: If the server has not been opened
        """
        if self._server_socket is None:
            raise RuntimeError("Server socket is not open.")
        return self._server_socket.getsockname()[:2]

    def get_state(self) -> ConnectionState:
        with self._state_lock:
            return self._state

    def _set_state(self, new_state: ConnectionState):
        with self._state_lock:
            if self._state != new_state:
                logger.debug(f"Connection state: {self._state.name} -> {new_state.name}")
                self._state = new_state

    def open(self):
        """
        Creates the listening socket.

        :raises ServerStartupError: If socket creation, bind or listen fails
        """
        if self._server_socket is not None:
            logger.warning("Server socket already open.")
            return

        try:
            server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            logger.critical(f"Socket creation failed: {e}")
            raise ServerStartupError(f"Socket creation failed: {e}") from e

        try:
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
        except OSError as e:
            server_socket.close()
            logger.critical(f"Bind to {self.host}:{self.port} failed: {e}")
            raise ServerStartupError(f"Bind to {self.host}:{self.port} failed: {e}") from e

        try:
            server_socket.listen(self.backlog)
        except OSError as e:
            server_socket.close()
            logger.critical(f"Listen on {self.host}:{self.port} failed: {e}")
            raise ServerStartupError(f"Listen on {self.host}:{self.port} failed: {e}") from e

        server_socket.settimeout(ACCEPT_POLL_INTERVAL_SEC)
        self._server_socket = server_socket
        self._stop_event.clear()
        host, port = self.server_address
        logger.info(f"Server started on {host}:{port}")

    def serve_forever(self):
        """
        Main accept loop. Runs until :meth:`stop` is called.

        Accept errors are logged and the loop continues. Each client is fully
        serviced and closed before the next one is accepted.
        """
        if self._server_socket is None:
            self.open()

        while not self._stop_event.is_set():
            server_socket = self._server_socket
            if server_socket is None:
                break
            self._set_state(ConnectionState.LISTENING)
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop_event.is_set():
                    break
                logger.error(f"Accept failed: {e}")
                self._stop_event.wait(0.1)
                continue

            logger.info(f"Client connected from {client_address[0]}:{client_address[1]}")
            try:
                self.handle_connection(client_socket, client_address)
            except Exception as e:
                logger.error(f"Unexpected error while serving {client_address}: {e}", exc_info=True)
            finally:
                self._close_client(client_socket)

        logger.info("Server accept loop finished.")

    def handle_connection(self, client_socket: socket.socket, client_address=None):
        """
        Reads the first buffer from a client and dispatches it.

        :param client_socket: Accepted client socket, closed by the caller
        :type client_socket: socket.socket
        :param client_address: Peer address, used for logging
        """
        self._set_state(ConnectionState.ACCEPTED)
        client_socket.settimeout(self.read_timeout)
        try:
            data = client_socket.recv(self.read_buffer_size)
        except socket.timeout:
            logger.warning(f"No request received from {client_address} within {self.read_timeout}s. Closing.")
            return
        except OSError as e:
            logger.warning(f"Failed to read from {client_address}: {e}")
            return

        request = parse_request(data)
        if request is None:
            logger.debug(f"Empty or unparsable request from {client_address}. Closing.")
            return

        client_socket.settimeout(None)
        if request.is_websocket_upgrade:
            self._set_state(ConnectionState.WS_UPGRADE)
            self._handle_upgrade(client_socket, request)
        else:
            self._set_state(ConnectionState.HTTP_REQUEST)
            self._handle_http_request(client_socket, request)

    def _handle_http_request(self, client_socket: socket.socket, request: Request):
        """
        Routes a plain request and sends exactly one response.
        """
        path = request.route_path
        logger.debug(f"{request.method} {request.path}")

        if path == API_MEMORY_PATH:
            snapshot = self.sampler.sample()
            body = self.serializer.serialize(snapshot).encode('utf-8')
            response = build_response(200, 'application/json', body)
        else:
            static_file = self.static_files.fetch(path)
            if static_file is None:
                logger.info(f"Static file not found: {path}")
                response = build_response(404, 'text/plain', NOT_FOUND_BODY)
            else:
                response = build_response(200, static_file.content_type, static_file.content)

        self._set_state(ConnectionState.RESPONDING)
        try:
            client_socket.sendall(response)
        except OSError as e:
            logger.warning(f"Failed to send response for {path}: {e}")

    def _handle_upgrade(self, client_socket: socket.socket, request: Request):
        """
        Completes the upgrade handshake and pushes snapshots until the client disconnects.
        """
        try:
            client_socket.sendall(build_handshake_response(request.websocket_key))
        except OSError as e:
            logger.warning(f"Failed to send handshake response: {e}")
            return

        logger.info(f"Push stream started, interval {self.push_interval}s")
        self._set_state(ConnectionState.RESPONDING)
        sent = 0
        while not self._stop_event.is_set():
            snapshot = self.sampler.sample()
            payload = self.serializer.serialize(snapshot).encode('utf-8')
            try:
                client_socket.sendall(payload)
            except OSError as e:
                logger.info(f"Push stream ended after {sent} snapshots: {e}")
                break
            sent += 1
            if self._stop_event.wait(self.push_interval):
                break

    def _close_client(self, client_socket: socket.socket):
        try:
            client_socket.close()
        except OSError as e:
            logger.warning(f"Error closing client socket: {e}")
        finally:
            self._set_state(ConnectionState.CLOSED)

    def stop(self):
        """
        Signals the accept loop and any push stream to stop and closes the listening socket.
        """
        logger.info("Stopping server...")
        self._stop_event.set()
        if self._server_socket is not None:
            try:
                self._server_socket.close()
            except OSError as e:
                logger.warning(f"Error closing server socket: {e}")
            finally:
                self._server_socket = None
