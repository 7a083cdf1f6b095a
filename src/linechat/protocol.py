"""
Wire Protocol for the Line Chat Client

Every message is a single UTF-8 text line terminated by a newline. A line
starts with a command word, optionally followed by a single space and a
payload whose shape depends on the command.

Message Format:
    <word>
    <word> <payload>

Outgoing commands:
    login <user>, msg <text>, privmsg <recipient> <text>, users, help

Incoming commands:
    loginok, loginerr, users <u1> <u2> ..., msg <sender> <text>,
    privmsg <sender> <text>, msgok, msgerr <reason>, cmderr <reason>,
    supported <cmd1> <cmd2> ...
"""

from dataclasses import dataclass
from typing import List, Optional

# Outgoing command words
CMD_LOGIN = "login"
CMD_PUBLIC_MESSAGE = "msg"
CMD_PRIVATE_MESSAGE = "privmsg"
CMD_USERS = "users"
CMD_HELP = "help"

# Incoming command words
RESP_LOGIN_OK = "loginok"
RESP_LOGIN_ERROR = "loginerr"
RESP_USERS = "users"
RESP_PUBLIC_MESSAGE = "msg"
RESP_PRIVATE_MESSAGE = "privmsg"
RESP_MESSAGE_OK = "msgok"
RESP_MESSAGE_ERROR = "msgerr"
RESP_COMMAND_ERROR = "cmderr"
RESP_SUPPORTED = "supported"

LINE_TERMINATOR = "\n"
SEPARATOR = " "


@dataclass(frozen=True)
class ParsedLine:
    """
    One inbound line split into its command word and payload.

    Attributes:
        word: The command word (everything before the first space)
        payload: Everything after the first space, or None when the line
                 carried no payload at all
    """

    word: str
    payload: Optional[str] = None

    @property
    def has_payload(self) -> bool:
        return self.payload is not None


def strip_terminator(line: str) -> str:
    """Remove a trailing ``\\n`` or ``\\r\\n`` from a received line."""
    return line.rstrip("\r\n")


def parse_line(line: str) -> ParsedLine:
    """
    Tokenize a received line on its first space.

    Args:
        line: A single protocol line, with or without its terminator

    Returns:
        ParsedLine with the command word and the optional payload
    """
    line = strip_terminator(line)
    if SEPARATOR not in line:
        return ParsedLine(word=line)
    word, payload = line.split(SEPARATOR, 1)
    return ParsedLine(word=word, payload=payload)


def split_tokens(payload: str) -> List[str]:
    """Split a space separated payload, dropping empty tokens."""
    return [token for token in payload.split(SEPARATOR) if token]


def is_single_line(text: str) -> bool:
    """Return True if text can be embedded in one protocol line."""
    return "\n" not in text and "\r" not in text
