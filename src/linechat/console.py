"""
Console Front End

A minimal terminal front end: ConsoleListener prints server events and
ConsoleSession maps typed input onto ChatClient calls.

Input:
    /login <name>            log in
    /users                   request the user list
    /help                    request the supported commands
    /privmsg <user> <text>   send a private message
    /error                   show the last error
    /quit                    disconnect and exit
    anything else            send a public message
"""

import logging
from typing import Callable, List

from .chat_client import ChatClient
from .listener import ChatListener

logger = logging.getLogger(__name__)

USAGE = (
    "Commands: /login <name>, /users, /help, /privmsg <user> <text>, "
    "/error, /quit"
)


class ConsoleListener(ChatListener):
    """Listener that writes every event to the console."""

    def __init__(self, output: Callable[[str], None] = print):
        self._output = output

    def on_login_result(self, success: bool, error_message: str) -> None:
        if success:
            self._output("* Logged in")
        else:
            self._output(f"* Login failed: {error_message}")

    def on_disconnect(self) -> None:
        self._output("* Disconnected from server")

    def on_user_list(self, users: List[str]) -> None:
        self._output(f"* Users online: {', '.join(users) or '(none)'}")

    def on_message_received(
        self, is_private: bool, sender: str, text: str
    ) -> None:
        if is_private:
            self._output(f"[private] {sender}: {text}")
        else:
            self._output(f"{sender}: {text}")

    def on_message_error(self, error_message: str) -> None:
        self._output(f"* Message not delivered: {error_message}")

    def on_command_error(self, error_message: str) -> None:
        self._output(f"* Command error: {error_message}")

    def on_supported_commands(self, commands: List[str]) -> None:
        self._output(f"* Supported commands: {' '.join(commands)}")


class ConsoleSession:
    """
    Translates console input into client operations.

    Attributes:
        client: The connected chat client
    """

    def __init__(
        self, client: ChatClient, output: Callable[[str], None] = print
    ):
        self.client = client
        self._output = output

    def handle_input(self, line: str) -> bool:
        """
        Handle one line typed by the user.

        Args:
            line: Raw input line

        Returns:
            False when the user asked to quit, True otherwise
        """
        line = line.strip()
        if not line:
            return True

        if not line.startswith("/"):
            if not self.client.send_public_message(line):
                self._output(f"* Not sent: {self.client.last_error}")
            return True

        command, _, args = line.partition(" ")
        args = args.strip()

        if command == "/quit":
            self.client.disconnect()
            return False
        if command == "/login" and args:
            self.client.login(args)
        elif command == "/users":
            self.client.refresh_user_list()
        elif command == "/help":
            self.client.ask_supported_commands()
        elif command == "/privmsg" and " " in args:
            recipient, text = args.split(" ", 1)
            if not self.client.send_private_message(recipient, text):
                self._output(f"* Not sent: {self.client.last_error}")
        elif command == "/error":
            self._output(f"* Last error: {self.client.last_error or '(none)'}")
        else:
            logger.debug("Unknown console command: %s", line)
            self._output(USAGE)
        return True
