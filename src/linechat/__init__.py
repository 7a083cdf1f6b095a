"""
Line Chat Client Package

This package provides a client for a text based, line oriented chat
protocol: connection lifecycle, command encoding, response parsing and
event dispatch to registered listeners.

Schemas are organized in the `schemas` subpackage by direction:
    - commands: requests sent to the server
    - events: notifications received from the server
"""

from .chat_client import ChatClient
from .config import ClientConfig
from .errors import (
    AlreadyConnectedError,
    ChatClientError,
    ConnectError,
    ConnectIOError,
    ProtocolError,
    ServerNotListeningError,
    TransportError,
    UnknownHostError,
)
from .listener import ChatListener, ListenerRegistry
from .parser import ResponseParser
from .transport import TcpTransport, Transport, WebSocketTransport
from .schemas import (
    # Base classes
    BaseCommand,
    BaseEvent,
    # Command schemas
    LoginCommand,
    PublicMessageCommand,
    PrivateMessageCommand,
    UserListCommand,
    HelpCommand,
    # Event schemas
    LoginResult,
    Disconnected,
    UserList,
    MessageReceived,
    MessageError,
    CommandError,
    SupportedCommands,
)

__all__ = [
    # Client classes
    "ChatClient",
    "ChatListener",
    "ListenerRegistry",
    "ResponseParser",
    "ClientConfig",
    # Transports
    "Transport",
    "TcpTransport",
    "WebSocketTransport",
    # Errors
    "ChatClientError",
    "ConnectError",
    "UnknownHostError",
    "ServerNotListeningError",
    "ConnectIOError",
    "AlreadyConnectedError",
    "TransportError",
    "ProtocolError",
    # Base schema classes
    "BaseCommand",
    "BaseEvent",
    # Command schemas
    "LoginCommand",
    "PublicMessageCommand",
    "PrivateMessageCommand",
    "UserListCommand",
    "HelpCommand",
    # Event schemas
    "LoginResult",
    "Disconnected",
    "UserList",
    "MessageReceived",
    "MessageError",
    "CommandError",
    "SupportedCommands",
]
