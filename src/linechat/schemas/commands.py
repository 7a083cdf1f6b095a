"""
Command Schema Definitions

This module defines the outgoing requests a client can send to the chat
server.
"""

from dataclasses import dataclass

from .. import protocol
from .base import BaseCommand


@dataclass
class LoginCommand(BaseCommand):
    """
    Request to log in with a username.

    Attributes:
        username: Username to log in as
    """

    username: str

    @property
    def _command_word(self) -> str:
        return protocol.CMD_LOGIN


@dataclass
class PublicMessageCommand(BaseCommand):
    """
    Request to send a message to every connected user.

    Attributes:
        text: The message text
    """

    text: str

    @property
    def _command_word(self) -> str:
        return protocol.CMD_PUBLIC_MESSAGE


@dataclass
class PrivateMessageCommand(BaseCommand):
    """
    Request to send a message to a single user.

    Attributes:
        recipient: Username of the receiving user
        text: The message text
    """

    recipient: str
    text: str

    @property
    def _command_word(self) -> str:
        return protocol.CMD_PRIVATE_MESSAGE


@dataclass
class UserListCommand(BaseCommand):
    """Request for the list of currently connected users."""

    @property
    def _command_word(self) -> str:
        return protocol.CMD_USERS


@dataclass
class HelpCommand(BaseCommand):
    """Request for the list of commands the server supports."""

    @property
    def _command_word(self) -> str:
        return protocol.CMD_HELP
