"""
Defines the states a client connection passes through on the server.
"""
from enum import Enum, auto

class ConnectionState(Enum):
    """
    Enumeration of connection lifecycle states.

    The server handles one connection at a time and moves it through these
    states before returning to LISTENING for the next client.

    States:
        LISTENING: Waiting in accept for the next client
        ACCEPTED: A client connected, its first buffer has not been read yet
        HTTP_REQUEST: The buffer held a plain request line, answered once
        WS_UPGRADE: The buffer held an upgrade handshake, snapshots are pushed
        RESPONDING: Response or push stream is being written
        CLOSED: Connection closed, terminal for that client
    """
    LISTENING = auto()
    ACCEPTED = auto()
    HTTP_REQUEST = auto()
    WS_UPGRADE = auto()
    RESPONDING = auto()
    CLOSED = auto()
