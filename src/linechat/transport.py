"""
Transports for the Line Chat Client

A transport is an opened duplex stream that exchanges one text line at a
time with the chat server. The client never touches sockets directly; it
only calls ``read_line``, ``write_line`` and ``close`` on a transport
created by a factory.

Architecture:
    - TcpTransport: plain TCP socket, newline terminated UTF-8 lines
    - WebSocketTransport: one WebSocket text frame per line, using the
      synchronous client from the ``websockets`` package
    - Factories are plain callables ``(host, port) -> Transport`` so tests
      can inject an in-memory transport
"""

import logging
import socket
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    InvalidHandshake,
    InvalidURI,
)
from websockets.sync.client import ClientConnection, connect as ws_connect

from .errors import (
    ConnectIOError,
    ServerNotListeningError,
    TransportError,
    UnknownHostError,
)
from .protocol import LINE_TERMINATOR, strip_terminator

logger = logging.getLogger(__name__)

UNKNOWN_HOST_MESSAGE = "Unknown host"
NOT_LISTENING_MESSAGE = "No chat server listening on given port"
CONNECT_IO_MESSAGE = "I/O error for the socket"

ENCODING = "utf-8"


class Transport(ABC):
    """Abstract duplex line stream."""

    @classmethod
    @abstractmethod
    def open(cls, host: str, port: int) -> "Transport":
        """
        Open a stream to the server.

        Raises:
            UnknownHostError: If the host name cannot be resolved
            ServerNotListeningError: If the connection was refused
            ConnectIOError: For any other failure while connecting
        """

    @abstractmethod
    def read_line(self) -> Optional[str]:
        """
        Block until one line arrives.

        Returns:
            The line without its terminator, or None at end of stream

        Raises:
            TransportError: If the stream failed
        """

    @abstractmethod
    def write_line(self, line: str) -> None:
        """
        Send one line; the terminator is added by the transport.

        Raises:
            TransportError: If the stream failed
        """

    @abstractmethod
    def close(self) -> None:
        """Close the stream and unblock any pending ``read_line``."""


def _connect_error(error: OSError, host: str, port: int):
    """Map a socket level connect failure onto the ConnectError taxonomy."""
    if isinstance(error, socket.gaierror):
        return UnknownHostError(f"{UNKNOWN_HOST_MESSAGE}: {host}")
    if isinstance(error, ConnectionRefusedError):
        return ServerNotListeningError(
            f"{NOT_LISTENING_MESSAGE}: {host}:{port}"
        )
    return ConnectIOError(f"{CONNECT_IO_MESSAGE}: {error}")


class TcpTransport(Transport):
    """Newline delimited UTF-8 lines over a TCP socket."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._reader = sock.makefile(
            "r", encoding=ENCODING, errors="replace", newline="\n"
        )

    @classmethod
    def open(cls, host: str, port: int) -> "TcpTransport":
        try:
            sock = socket.create_connection((host, port))
        except OSError as e:
            logger.error("Failed to connect to %s:%s: %s", host, port, e)
            raise _connect_error(e, host, port) from e
        return cls(sock)

    def read_line(self) -> Optional[str]:
        try:
            line = self._reader.readline()
        except (OSError, ValueError) as e:
            # ValueError is raised when the file was closed under us
            raise TransportError(f"Read failed: {e}") from e
        if not line:
            return None
        return strip_terminator(line)

    def write_line(self, line: str) -> None:
        try:
            self._sock.sendall((line + LINE_TERMINATOR).encode(ENCODING))
        except OSError as e:
            raise TransportError(f"Write failed: {e}") from e

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            logger.debug("Socket was already shut down")
        try:
            self._reader.close()
        finally:
            self._sock.close()


class WebSocketTransport(Transport):
    """One text frame per protocol line over a WebSocket connection."""

    path = "/"

    def __init__(self, connection: ClientConnection):
        self._connection = connection

    @classmethod
    def open(cls, host: str, port: int) -> "WebSocketTransport":
        uri = f"ws://{host}:{port}{cls.path}"
        try:
            connection = ws_connect(uri)
        except OSError as e:
            logger.error("Failed to connect to %s: %s", uri, e)
            raise _connect_error(e, host, port) from e
        except InvalidURI as e:
            raise UnknownHostError(f"{UNKNOWN_HOST_MESSAGE}: {host}") from e
        except (InvalidHandshake, TimeoutError) as e:
            logger.error("WebSocket handshake with %s failed: %s", uri, e)
            raise ConnectIOError(f"{CONNECT_IO_MESSAGE}: {e}") from e
        return cls(connection)

    def read_line(self) -> Optional[str]:
        try:
            frame = self._connection.recv()
        except ConnectionClosedOK:
            return None
        except ConnectionClosed as e:
            raise TransportError(f"Read failed: {e}") from e
        if isinstance(frame, bytes):
            frame = frame.decode(ENCODING, errors="replace")
        return strip_terminator(frame)

    def write_line(self, line: str) -> None:
        try:
            self._connection.send(line)
        except ConnectionClosed as e:
            raise TransportError(f"Write failed: {e}") from e

    def close(self) -> None:
        self._connection.close()


TransportFactory = Callable[[str, int], Transport]

TRANSPORTS: Dict[str, TransportFactory] = {
    "tcp": TcpTransport.open,
    "websocket": WebSocketTransport.open,
}


def get_transport_factory(name: str) -> TransportFactory:
    """
    Look up a transport factory by name.

    Args:
        name: ``tcp`` or ``websocket``

    Raises:
        ValueError: If the name is not a known transport
    """
    try:
        return TRANSPORTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown transport '{name}' "
            f"(expected one of: {', '.join(sorted(TRANSPORTS))})"
        ) from None
