"""
Base Schema Classes

This module provides the base classes for outgoing commands and incoming
events so each concrete schema only declares its fields and command word.
"""

from dataclasses import astuple, fields
from typing import TYPE_CHECKING, Tuple

from ..protocol import SEPARATOR

if TYPE_CHECKING:
    from ..listener import ChatListener


class BaseCommand:
    """
    Base class for outgoing command schemas.

    Provides serialization of a command object into one protocol line.
    """

    def to_line(self) -> str:
        """
        Convert to a protocol line without its terminator.

        Returns:
            The command word followed by the space separated arguments.
            If the command has no fields, only the command word is returned.
        """
        parts = (self._command_word,) + self._arguments()
        return SEPARATOR.join(parts)

    def _arguments(self) -> Tuple[str, ...]:
        """
        Arguments placed after the command word, in field order.

        Subclasses with non-string fields should override this.
        """
        if hasattr(self, "__dataclass_fields__") and fields(self):
            return tuple(str(value) for value in astuple(self))
        return ()

    @property
    def _command_word(self) -> str:
        """
        Command word identifying the request.

        Should be overridden by subclasses to provide the specific word.
        """
        raise NotImplementedError("Subclasses must define _command_word")


class BaseEvent:
    """
    Base class for event schemas.

    Each event knows which listener callback it maps to, so dispatch does
    not need a type switch.
    """

    def deliver(self, listener: "ChatListener") -> None:
        """
        Invoke the matching callback on a listener.

        Args:
            listener: The listener to notify
        """
        raise NotImplementedError("Subclasses must implement deliver")
