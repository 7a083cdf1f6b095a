"""
Chat Client for the Line Protocol

This module provides the ChatClient facade. It owns the single session with
the chat server, encodes outgoing commands, runs the background reader and
fans received events out to the registered listeners.

Architecture:
    - Transports are created through an injectable factory (for testing)
    - One daemon reader thread per session parses lines into events
    - Teardown is serialized by a re-entrant lock shared by the caller
      thread and the reader thread, so Disconnected is dispatched once
    - Send operations never raise; failures are reported through the
      return value or the last-error field

Usage:
    client = ChatClient()
    client.add_listener(my_listener)
    client.connect("localhost", 1300)
    client.login("alice")
    client.send_public_message("hello")
    client.disconnect()
"""

import logging
import threading
from typing import Optional

from .errors import AlreadyConnectedError, ConnectError, TransportError
from .listener import ChatListener, ListenerRegistry
from .parser import ResponseParser
from .protocol import is_single_line
from .schemas import (
    BaseCommand,
    BaseEvent,
    CommandError,
    Disconnected,
    HelpCommand,
    LoginCommand,
    LoginResult,
    MessageError,
    PrivateMessageCommand,
    PublicMessageCommand,
    UserListCommand,
)
from .transport import TcpTransport, Transport, TransportFactory

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "Not connected to a chat server"
MULTILINE_MESSAGE = "Command arguments must not contain line breaks"
INVALID_NAME_MESSAGE = "Usernames must be non-empty and contain no spaces"

READER_THREAD_NAME = "linechat-reader"


def _is_valid_name(name: str) -> bool:
    return bool(name) and " " not in name and is_single_line(name)


class ChatClient:
    """
    Client for a line based chat server.

    At most one session is active at a time. All state shared with the
    reader thread (transport handle and reader) is guarded by ``_lock``.

    Attributes:
        listeners: Registry of listeners notified about server events
        parser: Parser turning received lines into events
    """

    def __init__(self, transport_factory: Optional[TransportFactory] = None):
        """
        Initialize the chat client.

        Args:
            transport_factory: Optional callable ``(host, port) -> Transport``
                               (for dependency injection/testing). Defaults
                               to a plain TCP connection.
        """
        self._transport_factory = transport_factory or TcpTransport.open
        self._transport: Optional[Transport] = None
        self._reader: Optional[threading.Thread] = None
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._last_error: Optional[str] = None

        self.listeners = ListenerRegistry()
        self.parser = ResponseParser()

    # Lifecycle

    def connect(
        self, host: str, port: int, start_listener: bool = True
    ) -> None:
        """
        Open a session with the chat server.

        Args:
            host: Host name or IP address of the chat server
            port: TCP port of the chat server
            start_listener: Start the background reader right away. Pass
                            False to register listeners first and call
                            ``start_listen_thread`` afterwards.

        Raises:
            AlreadyConnectedError: If a session is already active
            UnknownHostError: If the host cannot be resolved
            ServerNotListeningError: If no server listens on the port
            ConnectIOError: For other stream failures
        """
        if self.is_active:
            self._reject_second_session()

        # The network connect runs outside the lock; the session is
        # published only after the transport is open.
        logger.info("Connecting to %s:%s...", host, port)
        try:
            transport = self._transport_factory(host, port)
        except ConnectError as e:
            self._last_error = str(e)
            raise

        with self._lock:
            lost_race = self._transport is not None
            if not lost_race:
                self._transport = transport
                self._reader = None
                logger.info("Connected to %s:%s", host, port)

        if lost_race:
            transport.close()
            self._reject_second_session()

        if start_listener:
            self.start_listen_thread()

    def _reject_second_session(self) -> None:
        self._last_error = "Already connected"
        raise AlreadyConnectedError(
            "A session is already active; disconnect first"
        )

    def disconnect(self) -> None:
        """
        Close the session and notify listeners with Disconnected.

        Safe to call from any thread and any number of times: only the call
        that finds the session active closes the transport and dispatches
        the event; every other call is a logged no-op.
        """
        with self._lock:
            transport = self._transport
            if transport is None:
                logger.info("No connection to close")
                return

            try:
                transport.close()
            except Exception:
                logger.exception("Error while closing the transport")
            finally:
                self._transport = None

            logger.info("Disconnected from chat server")
            self.listeners.dispatch(Disconnected())

    def close(self) -> None:
        """Alias for ``disconnect``."""
        self.disconnect()

    def __enter__(self) -> "ChatClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.disconnect()

    @property
    def is_active(self) -> bool:
        """True if a session currently holds an open transport."""
        with self._lock:
            return self._transport is not None

    @property
    def last_error(self) -> str:
        """The most recent failure description, or "" if none occurred."""
        return self._last_error or ""

    def get_last_error(self) -> str:
        return self.last_error

    # Listeners

    def add_listener(self, listener: ChatListener) -> None:
        """Register a listener for server events."""
        self.listeners.add(listener)

    def remove_listener(self, listener: ChatListener) -> None:
        """Unregister a listener."""
        self.listeners.remove(listener)

    # Send operations

    def login(self, username: str) -> None:
        """
        Send a login request.

        The outcome arrives asynchronously as a LoginResult event.

        Args:
            username: Username to log in as
        """
        if not _is_valid_name(username):
            self._last_error = INVALID_NAME_MESSAGE
            logger.warning("Refusing to log in as %r", username)
            return
        if not self._send_command(LoginCommand(username)):
            logger.warning("Unable to log in: %s", self.last_error)

    def send_public_message(self, text: str) -> bool:
        """
        Send a message to every connected user.

        Args:
            text: Message text

        Returns:
            True if the message was written to the server, False otherwise
        """
        if not is_single_line(text):
            self._last_error = MULTILINE_MESSAGE
            return False
        return self._send_command(PublicMessageCommand(text))

    def send_private_message(self, recipient: str, text: str) -> bool:
        """
        Send a message to a single user.

        Args:
            recipient: Username of the receiving user
            text: Message text

        Returns:
            True if the message was written to the server, False otherwise
        """
        if not _is_valid_name(recipient):
            self._last_error = INVALID_NAME_MESSAGE
            return False
        if not is_single_line(text):
            self._last_error = MULTILINE_MESSAGE
            return False
        return self._send_command(PrivateMessageCommand(recipient, text))

    def refresh_user_list(self) -> None:
        """Ask for the connected users; the reply arrives as UserList."""
        self._send_command(UserListCommand())

    def ask_supported_commands(self) -> None:
        """Ask for the supported commands; the reply is SupportedCommands."""
        self._send_command(HelpCommand())

    def _send_command(self, command: BaseCommand) -> bool:
        """
        Write one command to the server.

        A write failure means the stream is broken, so it tears the session
        down exactly like a read failure.

        Returns:
            True if the line was written, False otherwise
        """
        with self._lock:
            transport = self._transport
        if transport is None:
            self._last_error = NOT_CONNECTED_MESSAGE
            logger.debug("Not sending %r: no active session", command)
            return False

        line = command.to_line()
        # One writer at a time so concurrent lines are never interleaved
        with self._send_lock:
            try:
                transport.write_line(line)
                error = None
            except TransportError as e:
                error = e

        if error is not None:
            if self._is_current(transport):
                self._last_error = str(error)
                logger.error("Failed to send command: %s", error)
            self._disconnect_session(transport)
            return False

        logger.debug("CLIENT: %s", line)
        return True

    # Reader

    def start_listen_thread(self) -> None:
        """
        Start reading server responses in a background thread.

        Does nothing if there is no session or its reader already runs.
        """
        with self._lock:
            transport = self._transport
            if transport is None:
                logger.warning("Cannot start reader: not connected")
                return
            if self._reader is not None:
                logger.debug("Reader already running for this session")
                return
            self._reader = threading.Thread(
                target=self._read_loop,
                args=(transport,),
                name=READER_THREAD_NAME,
                daemon=True,
            )
            self._reader.start()

    def join_listen_thread(self, timeout: Optional[float] = None) -> None:
        """Wait for the current reader thread to finish."""
        with self._lock:
            reader = self._reader
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout)

    def _read_loop(self, transport: Transport) -> None:
        """
        Read lines until the session ends.

        Args:
            transport: Transport of the session this reader belongs to
        """
        logger.info("Starting response reader")
        while self._is_current(transport):
            try:
                line = transport.read_line()
            except TransportError as e:
                if self._is_current(transport):
                    self._last_error = str(e)
                    logger.error("Connection to server lost: %s", e)
                self._disconnect_session(transport)
                break

            if line is None:
                logger.info("Server closed the connection")
                self._disconnect_session(transport)
                break

            logger.debug("SERVER: %s", line)
            self._handle_line(line, transport)

        logger.info("Response reader stopped")

    def _handle_line(self, line: str, transport: Transport) -> None:
        event = self.parser.parse_or_none(line)
        if event is None:
            return
        self._record_error(event)
        with self._lock:
            # Drop events that raced with teardown
            if self._transport is not transport:
                return
            self.listeners.dispatch(event)

    def _record_error(self, event: BaseEvent) -> None:
        if isinstance(event, LoginResult) and not event.success:
            self._last_error = event.error_message
        elif isinstance(event, (MessageError, CommandError)):
            self._last_error = event.error_message

    def _is_current(self, transport: Transport) -> bool:
        with self._lock:
            return self._transport is transport

    def _disconnect_session(self, transport: Transport) -> None:
        """
        Tear down the session only if it still uses the given transport.

        Used by the reader so a late failure from an old session cannot
        close a newer one.
        """
        with self._lock:
            if self._transport is transport:
                self.disconnect()
