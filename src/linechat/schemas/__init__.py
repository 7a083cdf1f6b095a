"""
Schemas Package

This package contains the protocol schemas for client-server communication.
Schemas are organized by direction: outgoing commands and incoming events.

The package provides base classes (BaseCommand, BaseEvent) that keep line
serialization and listener dispatch out of the concrete schemas.
"""

from .base import BaseCommand, BaseEvent
from .commands import (
    LoginCommand,
    PublicMessageCommand,
    PrivateMessageCommand,
    UserListCommand,
    HelpCommand,
)
from .events import (
    LoginResult,
    Disconnected,
    UserList,
    MessageReceived,
    MessageError,
    CommandError,
    SupportedCommands,
)

__all__ = [
    # Base classes
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
