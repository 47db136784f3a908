"""ICB packet models.

Every ICB packet is identified by a single ASCII character. The payload
following it is a list of fields separated by ``DELIMITER``.
"""

from enum import Enum
from typing import NamedTuple


DELIMITER = b"\x01"
TERMINATOR = b"\x00"

# Largest body (type + payload + terminator) a one-byte length prefix can count
MAX_BODY_SIZE = 255


class PacketType(str, Enum):
    """ICB packet types."""

    LOGIN = "a"
    LOGIN_OK = "a"
    OPEN = "b"
    PERSONAL = "c"
    STATUS = "d"
    ERROR = "e"
    ALERT = "f"
    EXIT = "g"
    COMMAND = "h"
    COMMAND_OUTPUT = "i"
    PROTOCOL = "j"
    BEEP = "k"
    PING = "l"
    PONG = "m"

    # Echoes of our own messages
    OWN_OPEN = "n"
    OWN_PERSONAL = "o"

    @classmethod
    def lookup(cls, code: str) -> "PacketType | None":
        """Return the packet type for ``code``, or None if it is unknown."""
        try:
            return cls(code)
        except ValueError:
            return None


class Message(NamedTuple):
    """A decoded packet: its type character and its payload fields.

    Being a tuple, a message unpacks as ``packet_type, fields = message``
    and compares equal to the plain ``(type, fields)`` pair.
    """

    type: str
    fields: list[str]

    @property
    def packet_type(self) -> PacketType | None:
        return PacketType.lookup(self.type)

    def is_type(self, packet_type: PacketType) -> bool:
        """Check whether this message carries the given packet type."""
        return self.type == packet_type.value
