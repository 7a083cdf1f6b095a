"""
Tests for the Chat Client

Covers the connection lifecycle, send operations, the background reader
and the teardown guarantees shared by the caller and reader threads.
"""

import socket
import threading
import time

import pytest

from linechat import (
    AlreadyConnectedError,
    ChatClient,
    ChatListener,
    ServerNotListeningError,
    TcpTransport,
    TransportError,
    UnknownHostError,
)
from linechat.chat_client import (
    INVALID_NAME_MESSAGE,
    MULTILINE_MESSAGE,
    NOT_CONNECTED_MESSAGE,
)

from conftest import FakeTransport, RecordingListener


def run_reader(client, transport, *lines):
    """Feed lines followed by end of stream and wait for the reader."""
    transport.feed(*lines)
    transport.end()
    client.start_listen_thread()
    client.join_listen_thread(timeout=5)


# Lifecycle


class TestConnect:
    """Tests for opening a session."""

    def test_new_client_is_inactive(self):
        """A client starts without a session and without errors."""
        client = ChatClient()
        assert not client.is_active
        assert client.last_error == ""
        assert client.get_last_error() == ""

    def test_connect_activates_session(self, client):
        """A successful connect makes the client active."""
        assert client.is_active

    def test_connect_passes_host_and_port(self):
        """The transport factory receives the connect arguments."""
        calls = []

        def factory(host, port):
            calls.append((host, port))
            return FakeTransport()

        client = ChatClient(transport_factory=factory)
        client.connect("chat.example.com", 1300, start_listener=False)
        assert calls == [("chat.example.com", 1300)]
        client.disconnect()

    @pytest.mark.parametrize(
        "error",
        [
            UnknownHostError("Unknown host: nowhere"),
            ServerNotListeningError("No chat server listening"),
        ],
    )
    def test_failed_connect_leaves_no_state(self, error):
        """A failed connect raises and keeps the client inactive."""

        def factory(host, port):
            raise error

        client = ChatClient(transport_factory=factory)
        with pytest.raises(type(error)):
            client.connect("nowhere", 1300)
        assert not client.is_active
        assert client.last_error == str(error)

    def test_connect_twice_is_rejected(self, client, transport):
        """Only one session may be active per client."""
        with pytest.raises(AlreadyConnectedError):
            client.connect("localhost", 1300)
        assert client.is_active
        assert transport.close_count == 0

    def test_connect_does_not_hold_lock_while_opening(self):
        """Other threads can query the client while the transport opens."""
        seen = []

        def query():
            seen.append(client.is_active)

        def factory(host, port):
            other = threading.Thread(target=query)
            other.start()
            other.join(timeout=5)
            return FakeTransport()

        client = ChatClient(transport_factory=factory)
        client.connect("localhost", 1300, start_listener=False)
        assert seen == [False]
        client.disconnect()

    def test_connect_race_keeps_first_session(self):
        """A connect that finishes second closes its transport and fails."""
        first, second = FakeTransport(), FakeTransport()
        calls = []

        def factory(host, port):
            if not calls:
                calls.append(host)
                client.connect(host, port, start_listener=False)
                return second
            return first

        client = ChatClient(transport_factory=factory)
        with pytest.raises(AlreadyConnectedError):
            client.connect("localhost", 1300, start_listener=False)

        assert client.is_active
        assert second.close_count == 1
        assert first.close_count == 0
        client.disconnect()

    def test_reconnect_after_disconnect(self, listener):
        """A new session can be opened once the old one is closed."""
        transports = [FakeTransport(), FakeTransport()]
        client = ChatClient(transport_factory=lambda h, p: transports.pop(0))
        client.add_listener(listener)

        client.connect("localhost", 1300, start_listener=False)
        client.disconnect()
        client.connect("localhost", 1300, start_listener=False)
        assert client.is_active
        client.disconnect()
        assert listener.calls == [("disconnect",), ("disconnect",)]


class TestDisconnect:
    """Tests for tearing a session down."""

    def test_disconnect_closes_and_notifies(self, client, transport, listener):
        """Disconnect closes the transport and dispatches Disconnected."""
        client.disconnect()
        assert not client.is_active
        assert transport.close_count == 1
        assert listener.calls == [("disconnect",)]

    def test_second_disconnect_is_noop(self, client, transport, listener):
        """Disconnecting twice closes and notifies only once."""
        client.disconnect()
        client.disconnect()
        assert transport.close_count == 1
        assert listener.calls == [("disconnect",)]

    def test_disconnect_without_session_is_noop(self, listener):
        """Disconnect on a fresh client dispatches nothing."""
        client = ChatClient()
        client.add_listener(listener)
        client.disconnect()
        assert listener.calls == []

    def test_concurrent_disconnect_notifies_once(
        self, client, transport, listener
    ):
        """Racing disconnect calls close and notify exactly once."""
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            client.disconnect()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert transport.close_count == 1
        assert listener.calls == [("disconnect",)]

    def test_listener_may_disconnect_from_callback(self, client, transport):
        """Calling disconnect inside on_disconnect does not deadlock."""

        class Reentrant(ChatListener):
            def on_disconnect(self):
                client.disconnect()

        client.add_listener(Reentrant())
        client.disconnect()
        assert transport.close_count == 1

    def test_close_failure_still_tears_down(self, client, transport, listener):
        """A transport that fails to close still ends the session."""

        def broken_close():
            transport.close_count += 1
            raise OSError("close failed")

        transport.close = broken_close
        client.disconnect()
        assert not client.is_active
        assert listener.calls == [("disconnect",)]

    def test_context_manager_disconnects(self, transport, listener):
        """Leaving a with block closes the session."""
        with ChatClient(transport_factory=lambda h, p: transport) as client:
            client.add_listener(listener)
            client.connect("localhost", 1300, start_listener=False)
        assert not client.is_active
        assert listener.calls == [("disconnect",)]


# Send operations


class TestSendOperations:
    """Tests for the command encoder and send gating."""

    def test_each_operation_writes_one_line(self, client, transport):
        """Every operation produces its protocol line."""
        client.login("alice")
        assert client.send_public_message("hello all") is True
        assert client.send_private_message("bob", "secret plan") is True
        client.refresh_user_list()
        client.ask_supported_commands()

        assert transport.written == [
            "login alice",
            "msg hello all",
            "privmsg bob secret plan",
            "users",
            "help",
        ]

    def test_sends_fail_without_session(self, client, transport):
        """After disconnect nothing is written and sends report failure."""
        client.disconnect()

        assert client.send_public_message("hello") is False
        assert client.send_private_message("bob", "hi") is False
        client.login("alice")
        client.refresh_user_list()
        client.ask_supported_commands()

        assert transport.written == []
        assert client.last_error == NOT_CONNECTED_MESSAGE

    def test_multiline_text_is_rejected(self, client, transport):
        """Text with line breaks is refused before reaching the server."""
        assert client.send_public_message("one\nusers") is False
        assert client.send_private_message("bob", "a\r\nb") is False
        assert transport.written == []
        assert client.last_error == MULTILINE_MESSAGE

    @pytest.mark.parametrize("name", ["", "two words", "bad\nname"])
    def test_invalid_names_are_rejected(self, client, transport, name):
        """Usernames and recipients must be single tokens."""
        client.login(name)
        assert client.send_private_message(name, "hi") is False
        assert transport.written == []
        assert client.last_error == INVALID_NAME_MESSAGE

    def test_write_failure_tears_down(self, client, transport, listener):
        """A failed write is fatal and disconnects the session."""
        transport.fail_writes = True
        assert client.send_public_message("hello") is False
        assert not client.is_active
        assert "Write failed" in client.last_error
        assert listener.calls == [("disconnect",)]

    def test_stale_write_failure_keeps_new_session(self, listener):
        """A write failing on an old session leaves the new one alone."""
        new_transport = FakeTransport()

        class ReplacedTransport(FakeTransport):
            def write_line(self, line):
                client.disconnect()
                client.connect("localhost", 1300, start_listener=False)
                raise TransportError("Write failed: broken pipe")

        transports = [ReplacedTransport(), new_transport]
        client = ChatClient(transport_factory=lambda h, p: transports.pop(0))
        client.add_listener(listener)
        client.connect("localhost", 1300, start_listener=False)

        assert client.send_public_message("hello") is False
        assert client.is_active
        assert new_transport.close_count == 0
        assert listener.calls == [("disconnect",)]
        assert "Write failed" not in client.last_error
        client.disconnect()

    def test_concurrent_sends_are_not_interleaved(self):
        """Large lines sent from two threads arrive whole."""
        local, peer = socket.socketpair()
        client = ChatClient(transport_factory=lambda h, p: TcpTransport(local))
        client.connect("localhost", 1300, start_listener=False)
        size = 1_000_000
        received = []

        def read_peer():
            with peer.makefile("rb") as stream:
                for _ in range(4):
                    received.append(stream.readline())

        reader = threading.Thread(target=read_peer)
        reader.start()
        senders = [
            threading.Thread(
                target=client.send_public_message, args=(char * size,)
            )
            for char in "ABAB"
        ]
        for sender in senders:
            sender.start()
        for sender in senders:
            sender.join(timeout=30)
        reader.join(timeout=30)
        client.disconnect()
        peer.close()

        assert len(received) == 4
        for line in received:
            body = line.rstrip(b"\n")[len(b"msg "):]
            assert len(body) == size
            assert body == body[:1] * size

    def test_void_write_failure_records_error(self, client, transport):
        """Operations without a result record write failures too."""
        transport.fail_writes = True
        client.refresh_user_list()
        assert "Write failed" in client.last_error
        assert not client.is_active


# Reader


class TestReader:
    """Tests for the background response reader."""

    def test_lines_become_events_in_order(self, client, transport, listener):
        """Events are dispatched in the order lines arrive."""
        run_reader(
            client,
            transport,
            "loginok",
            "users alice bob carol",
            "msg alice hello there",
            "privmsg bob secret plan",
            "supported msg privmsg users help",
        )

        assert listener.calls == [
            ("login", True, ""),
            ("users", ["alice", "bob", "carol"]),
            ("message", False, "alice", "hello there"),
            ("message", True, "bob", "secret plan"),
            ("supported", ["msg", "privmsg", "users", "help"]),
            ("disconnect",),
        ]

    def test_event_count_matches_valid_lines(self, client, transport, listener):
        """Unknown, acknowledgement and malformed lines produce no event."""
        run_reader(
            client,
            transport,
            "users",
            "msgok",
            "bogus line",
            "msg",
            "users alice",
            "privmsg bob",
            "cmderr",
            "msgerr no such user",
        )

        assert listener.calls == [
            ("users", ["alice"]),
            ("msgerr", "no such user"),
            ("disconnect",),
        ]

    def test_bare_users_does_not_stop_reader(self, client, transport, listener):
        """A payload-less users line is skipped and reading continues."""
        run_reader(client, transport, "users", "loginok")
        assert listener.calls == [("login", True, ""), ("disconnect",)]

    def test_error_events_update_last_error(self, client, transport):
        """msgerr, cmderr and loginerr record their text as last error."""
        run_reader(client, transport, "msgerr no such user")
        assert client.last_error == "no such user"

    def test_last_error_is_latest_wins(self, client, transport):
        """Each new failure overwrites the previous one."""
        run_reader(
            client, transport, "msgerr no such user", "cmderr bad", "loginerr"
        )
        assert client.last_error == "A login error occurred!"

    def test_read_failure_disconnects_once(self, client, transport, listener):
        """A failing read ends the loop with a single Disconnected."""
        transport.feed("loginok")
        transport.fail()
        client.start_listen_thread()
        client.join_listen_thread(timeout=5)

        assert listener.calls == [("login", True, ""), ("disconnect",)]
        assert not client.is_active
        assert transport.close_count == 1
        assert "Read failed" in client.last_error

    def test_end_of_stream_disconnects(self, client, transport, listener):
        """The server closing the stream ends the session."""
        run_reader(client, transport)
        assert not client.is_active
        assert listener.calls == [("disconnect",)]

    def test_explicit_disconnect_stops_reader(self, transport, listener):
        """Closing the session unblocks and ends the reader."""
        client = ChatClient(transport_factory=lambda h, p: transport)
        client.add_listener(listener)
        client.connect("localhost", 1300)

        client.disconnect()
        client.join_listen_thread(timeout=5)

        assert listener.calls == [("disconnect",)]
        assert transport.close_count == 1

    def test_no_events_after_disconnect(self, client, transport, listener):
        """A line read before teardown finished is not dispatched."""
        client.disconnect()
        client._handle_line("msg alice too late", transport)
        assert listener.calls == [("disconnect",)]

    def test_reader_starts_once_per_session(self, client, transport):
        """Starting the reader twice keeps a single thread."""
        client.start_listen_thread()
        first = client._reader
        client.start_listen_thread()
        assert client._reader is first

    def test_listener_may_send_from_callback(self, client, transport):
        """Callbacks run on the reader thread and may send commands."""

        class AutoRefresh(ChatListener):
            def on_login_result(self, success, error_message):
                client.refresh_user_list()

        client.add_listener(AutoRefresh())
        transport.feed("loginok")
        client.start_listen_thread()

        for _ in range(50):
            if transport.written:
                break
            time.sleep(0.1)
        assert transport.written == ["users"]

    def test_start_reader_without_session(self):
        """Starting the reader without a session does nothing."""
        client = ChatClient()
        client.start_listen_thread()
        assert client._reader is None


def test_listeners_can_be_removed(client, transport):
    """A removed listener no longer receives events."""
    other = RecordingListener()
    client.add_listener(other)
    client.remove_listener(other)
    client.disconnect()
    assert other.calls == []
