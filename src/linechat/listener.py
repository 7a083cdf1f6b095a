"""
Chat Listener and Listener Registry

Listeners are notified about events received from the chat server. The
registry keeps listeners in registration order, holds each one at most
once, and notifies them synchronously on the calling thread.
"""

import logging
import threading
from typing import List

from .schemas import BaseEvent

logger = logging.getLogger(__name__)


class ChatListener:
    """
    Observer for chat events.

    Every callback is a no-op by default so a listener only overrides the
    events it cares about.

    Callbacks run on the client's reader thread while the client holds its
    session lock. They may call back into the client on that thread, but
    must not block waiting for another thread that uses the client (for
    example a UI thread calling ``is_active`` or a send): that thread waits
    for the callback to return, and the two deadlock. Hand such work off
    without waiting for it.
    """

    def on_login_result(self, success: bool, error_message: str) -> None:
        """Login finished, either successfully or with an error."""

    def on_disconnect(self) -> None:
        """The connection was closed, locally or by the remote end."""

    def on_user_list(self, users: List[str]) -> None:
        """The server sent the list of connected users."""

    def on_message_received(
        self, is_private: bool, sender: str, text: str
    ) -> None:
        """A public or private message arrived."""

    def on_message_error(self, error_message: str) -> None:
        """Our message was not delivered."""

    def on_command_error(self, error_message: str) -> None:
        """The server did not understand a command."""

    def on_supported_commands(self, commands: List[str]) -> None:
        """The server sent the commands it supports."""


class ListenerRegistry:
    """
    Ordered set of listeners keyed by identity.

    The registry does not own listener lifetime; it only keeps references
    until they are removed.
    """

    def __init__(self):
        self._listeners: List[ChatListener] = []
        self._lock = threading.Lock()

    def add(self, listener: ChatListener) -> None:
        """
        Register a listener. Registering the same listener twice is a no-op.

        Args:
            listener: Listener to add
        """
        with self._lock:
            if any(existing is listener for existing in self._listeners):
                return
            self._listeners.append(listener)

    def remove(self, listener: ChatListener) -> None:
        """
        Unregister a listener. Unknown listeners are ignored.

        Args:
            listener: Listener to remove
        """
        with self._lock:
            self._listeners = [
                existing
                for existing in self._listeners
                if existing is not listener
            ]

    def snapshot(self) -> List[ChatListener]:
        """Return the current members in registration order."""
        with self._lock:
            return list(self._listeners)

    def dispatch(self, event: BaseEvent) -> None:
        """
        Notify every listener registered when dispatch starts.

        A listener that raises is logged and skipped; the remaining
        listeners still receive the event.

        Args:
            event: Event to deliver
        """
        for listener in self.snapshot():
            try:
                event.deliver(listener)
            except Exception:
                logger.exception(
                    "Listener %r failed while handling %s",
                    listener,
                    type(event).__name__,
                )

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        with self._lock:
            return any(existing is listener for existing in self._listeners)
