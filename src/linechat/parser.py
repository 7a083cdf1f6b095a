"""
Response Parser

Turns one line received from the chat server into at most one typed event.

Lines with an unknown command word and acknowledgements such as ``msgok``
produce no event. Lines whose command word requires a payload that is
missing are protocol violations: ``parse`` raises ProtocolError for them
and ``parse_or_none`` logs and drops them.
"""

import logging
from typing import Optional

from . import protocol
from .errors import ProtocolError
from .protocol import ParsedLine
from .schemas import (
    BaseEvent,
    CommandError,
    LoginResult,
    MessageError,
    MessageReceived,
    SupportedCommands,
    UserList,
)

logger = logging.getLogger(__name__)

LOGIN_ERROR_MESSAGE = "A login error occurred!"


class ResponseParser:
    """
    Parser for inbound protocol lines.

    The parser is stateless; one instance can be shared by any number of
    readers.
    """

    def __init__(self):
        self._handlers = {
            protocol.RESP_LOGIN_OK: self._login_ok,
            protocol.RESP_LOGIN_ERROR: self._login_error,
            protocol.RESP_USERS: self._user_list,
            protocol.RESP_PUBLIC_MESSAGE: self._public_message,
            protocol.RESP_PRIVATE_MESSAGE: self._private_message,
            protocol.RESP_MESSAGE_OK: self._message_ok,
            protocol.RESP_MESSAGE_ERROR: self._message_error,
            protocol.RESP_COMMAND_ERROR: self._command_error,
            protocol.RESP_SUPPORTED: self._supported,
        }

    def parse(self, line: str) -> Optional[BaseEvent]:
        """
        Parse a single line into an event.

        Args:
            line: Raw line received from the server

        Returns:
            The event for this line, or None if the line carries no event

        Raises:
            ProtocolError: If the command word is known but its payload
                           is missing or malformed
        """
        parsed = protocol.parse_line(line)
        handler = self._handlers.get(parsed.word)
        if handler is None:
            logger.warning("Unable to interpret server response: %r", line)
            return None
        return handler(parsed, line)

    def parse_or_none(self, line: str) -> Optional[BaseEvent]:
        """Parse a line, logging and dropping protocol violations."""
        try:
            return self.parse(line)
        except ProtocolError as e:
            logger.warning("Ignoring malformed line %r: %s", e.line, e)
            return None

    @staticmethod
    def _require_payload(parsed: ParsedLine, line: str) -> str:
        if parsed.payload is None:
            raise ProtocolError(
                f"'{parsed.word}' received without a payload", line
            )
        return parsed.payload

    def _login_ok(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return LoginResult(success=True, error_message="")

    def _login_error(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return LoginResult(success=False, error_message=LOGIN_ERROR_MESSAGE)

    def _user_list(self, parsed: ParsedLine, line: str) -> BaseEvent:
        payload = self._require_payload(parsed, line)
        return UserList(users=tuple(protocol.split_tokens(payload)))

    def _chat_message(
        self, parsed: ParsedLine, line: str, is_private: bool
    ) -> BaseEvent:
        payload = self._require_payload(parsed, line)
        if protocol.SEPARATOR not in payload:
            raise ProtocolError(
                f"'{parsed.word}' payload has no message text", line
            )
        sender, text = payload.split(protocol.SEPARATOR, 1)
        if not sender:
            raise ProtocolError(f"'{parsed.word}' payload has no sender", line)
        return MessageReceived(is_private=is_private, sender=sender, text=text)

    def _public_message(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return self._chat_message(parsed, line, is_private=False)

    def _private_message(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return self._chat_message(parsed, line, is_private=True)

    def _message_ok(self, parsed: ParsedLine, line: str) -> None:
        logger.debug("Message delivery acknowledged by server")
        return None

    def _message_error(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return MessageError(error_message=self._require_payload(parsed, line))

    def _command_error(self, parsed: ParsedLine, line: str) -> BaseEvent:
        return CommandError(error_message=self._require_payload(parsed, line))

    def _supported(self, parsed: ParsedLine, line: str) -> BaseEvent:
        payload = self._require_payload(parsed, line)
        return SupportedCommands(commands=tuple(protocol.split_tokens(payload)))
