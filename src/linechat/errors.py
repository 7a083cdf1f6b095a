"""
Error Types for the Chat Client

Connection failures are surfaced to the caller of ``ChatClient.connect``.
Transport and protocol errors never reach the caller: the client converts
them into a teardown or a logged, ignored line.
"""


class ChatClientError(Exception):
    """Base class for all chat client errors."""


class ConnectError(ChatClientError, ConnectionError):
    """Opening a session with the chat server failed."""


class UnknownHostError(ConnectError):
    """The server address could not be resolved."""


class ServerNotListeningError(ConnectError):
    """Nothing is listening on the given host and port."""


class ConnectIOError(ConnectError):
    """Any other stream failure while connecting."""


class AlreadyConnectedError(ConnectError):
    """A session is already active on this client."""


class TransportError(ChatClientError):
    """Reading from or writing to an open transport failed."""


class ProtocolError(ChatClientError, ValueError):
    """
    An incoming line could not be turned into an event.

    Attributes:
        line: The raw line that was rejected
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line
