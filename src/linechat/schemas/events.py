"""
Event Schema Definitions

Events describe information received from the chat server. They are
immutable and are created only by the response parser.
"""

from dataclasses import dataclass
from typing import Tuple

from .base import BaseEvent


@dataclass(frozen=True)
class LoginResult(BaseEvent):
    """
    Outcome of a login request.

    Attributes:
        success: True if the server accepted the login
        error_message: Error description, empty on success
    """

    success: bool
    error_message: str = ""

    def deliver(self, listener) -> None:
        listener.on_login_result(self.success, self.error_message)


@dataclass(frozen=True)
class Disconnected(BaseEvent):
    """The session with the server has ended."""

    def deliver(self, listener) -> None:
        listener.on_disconnect()


@dataclass(frozen=True)
class UserList(BaseEvent):
    """
    Usernames currently connected to the server.

    Attributes:
        users: Usernames in the order the server sent them
    """

    users: Tuple[str, ...] = ()

    def deliver(self, listener) -> None:
        listener.on_user_list(list(self.users))


@dataclass(frozen=True)
class MessageReceived(BaseEvent):
    """
    A chat message from another user.

    Attributes:
        is_private: True for a private message, False for a public one
        sender: Username of the sender
        text: Message text
    """

    is_private: bool
    sender: str
    text: str

    def deliver(self, listener) -> None:
        listener.on_message_received(self.is_private, self.sender, self.text)


@dataclass(frozen=True)
class MessageError(BaseEvent):
    """
    The server could not deliver our message.

    Attributes:
        error_message: Reason given by the server
    """

    error_message: str

    def deliver(self, listener) -> None:
        listener.on_message_error(self.error_message)


@dataclass(frozen=True)
class CommandError(BaseEvent):
    """
    The server did not understand a command.

    Attributes:
        error_message: Reason given by the server
    """

    error_message: str

    def deliver(self, listener) -> None:
        listener.on_command_error(self.error_message)


@dataclass(frozen=True)
class SupportedCommands(BaseEvent):
    """
    Commands supported by the server, as returned for a help request.

    Attributes:
        commands: Command words in the order the server sent them
    """

    commands: Tuple[str, ...] = ()

    def deliver(self, listener) -> None:
        listener.on_supported_commands(list(self.commands))
