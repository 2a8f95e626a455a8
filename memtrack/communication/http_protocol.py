"""
Minimal HTTP/1.1 request parsing and response building for the connection server.
"""
import base64
import hashlib
from dataclasses import dataclass, field
from typing import Dict, Optional

WEBSOCKET_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"

HTTP_REASONS = {
    101: "Switching Protocols",
    200: "OK",
    404: "Not Found",
}


@dataclass(frozen=True)
class Request:
    """
    Head of a client request. Only the path and the upgrade headers are
    interpreted, the method is carried along unvalidated.
    """
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    @property
    def route_path(self) -> str:
        """Path with query string and fragment removed."""
        return self.path.split('?', 1)[0].split('#', 1)[0]

    @property
    def is_websocket_upgrade(self) -> bool:
        upgrade = self.header('upgrade', '') or ''
        tokens = [token.strip().lower() for token in upgrade.split(',')]
        return 'websocket' in tokens and bool(self.websocket_key)

    @property
    def websocket_key(self) -> str:
        return (self.header('sec-websocket-key', '') or '').strip()


def parse_request(data: bytes) -> Optional[Request]:
    """
    Parses the request line and headers from the first buffer read off a connection.

    :param data: Raw bytes received from the client
    :type data: bytes
    :return: Parsed request, or None if no request line with a method and path is present
    :rtype: Optional[Request]
    """
    if not data:
        return None

    text = data.decode('latin-1')
    head = text.split('\r\n\r\n', 1)[0].split('\n\n', 1)[0]
    lines = head.splitlines()
    if not lines:
        return None

    request_line = lines[0].split()
    if len(request_line) < 2:
        return None
    method, path = request_line[0], request_line[1]

    headers: Dict[str, str] = {}
    for line in lines[1:]:
        name, sep, value = line.partition(':')
        if not sep or not name.strip():
            continue
        headers[name.strip().lower()] = value.strip()

    return Request(method=method, path=path, headers=headers)


def compute_accept_key(client_key: str) -> str:
    """
    Computes the ``Sec-WebSocket-Accept`` value for a client handshake key.

    :param client_key: Value of the client's ``Sec-WebSocket-Key`` header
    :type client_key: str
    :return: Base64 encoded SHA-1 of the key concatenated with the WebSocket GUID
    :rtype: str
    """
    digest = hashlib.sha1((client_key + WEBSOCKET_GUID).encode('latin-1')).digest()
    return base64.b64encode(digest).decode('ascii')


def build_response(status: int, content_type: str, body: bytes) -> bytes:
    """
    Builds a complete single-shot HTTP response. The connection is always closed after it.

    :param status: HTTP status code
    :type status: int
    :param content_type: Value for the Content-Type header
    :type content_type: str
    :param body: Response body
    :type body: bytes
    :return: Encoded response head and body
    :rtype: bytes
    """
    head = (
        f"HTTP/1.1 {status} {HTTP_REASONS.get(status, 'Unknown')}\r\n"
        f"Content-Type: {content_type}\r\n"
        "Access-Control-Allow-Origin: *\r\n"
        "Connection: close\r\n"
        f"Content-Length: {len(body)}\r\n"
        "\r\n"
    )
    return head.encode('latin-1') + body


def build_handshake_response(client_key: str) -> bytes:
    """
    Builds the ``101 Switching Protocols`` response for an upgrade request.

    :param client_key: Value of the client's ``Sec-WebSocket-Key`` header
    :type client_key: str
    :return: Encoded response head
    :rtype: bytes
    """
    return (
        "HTTP/1.1 101 Switching Protocols\r\n"
        "Upgrade: websocket\r\n"
        "Connection: Upgrade\r\n"
        f"Sec-WebSocket-Accept: {compute_accept_key(client_key)}\r\n"
        "\r\n"
    ).encode('latin-1')
