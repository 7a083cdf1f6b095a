"""
Shared Test Fixtures

Provides an in-memory transport that replays scripted server lines and
records everything the client writes, plus a listener that records every
callback it receives.
"""

import queue
import threading

import pytest

from linechat import ChatClient, ChatListener, Transport, TransportError

# Sentinels queued into FakeTransport to script stream endings
END_OF_STREAM = object()
READ_FAILURE = object()


class FakeTransport(Transport):
    """Scripted transport for tests."""

    def __init__(self):
        self.incoming = queue.Queue()
        self.written = []
        self.close_count = 0
        self.fail_writes = False
        self.closed = threading.Event()

    @classmethod
    def open(cls, host, port):
        return cls()

    def feed(self, *lines):
        for line in lines:
            self.incoming.put(line)

    def end(self):
        self.incoming.put(END_OF_STREAM)

    def fail(self):
        self.incoming.put(READ_FAILURE)

    def read_line(self):
        item = self.incoming.get(timeout=5)
        if item is END_OF_STREAM:
            return None
        if item is READ_FAILURE:
            raise TransportError("Read failed: connection reset")
        return item

    def write_line(self, line):
        if self.fail_writes or self.closed.is_set():
            raise TransportError("Write failed: broken pipe")
        self.written.append(line)

    def close(self):
        self.close_count += 1
        self.closed.set()
        # Unblock a pending read the way closing a socket does
        self.incoming.put(END_OF_STREAM)


class RecordingListener(ChatListener):
    """Listener that records every callback as a tuple."""

    def __init__(self):
        self.calls = []
        self.disconnected = threading.Event()

    def on_login_result(self, success, error_message):
        self.calls.append(("login", success, error_message))

    def on_disconnect(self):
        self.calls.append(("disconnect",))
        self.disconnected.set()

    def on_user_list(self, users):
        self.calls.append(("users", users))

    def on_message_received(self, is_private, sender, text):
        self.calls.append(("message", is_private, sender, text))

    def on_message_error(self, error_message):
        self.calls.append(("msgerr", error_message))

    def on_command_error(self, error_message):
        self.calls.append(("cmderr", error_message))

    def on_supported_commands(self, commands):
        self.calls.append(("supported", commands))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def client(transport, listener):
    """A client wired to the fake transport, connected without a reader."""
    chat_client = ChatClient(transport_factory=lambda host, port: transport)
    chat_client.add_listener(listener)
    chat_client.connect("localhost", 1300, start_listener=False)
    yield chat_client
    chat_client.disconnect()
    chat_client.join_listen_thread(timeout=5)
