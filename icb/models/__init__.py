"""Data models for ICB packets."""

from .packet import DELIMITER, TERMINATOR, Message, PacketType

__all__ = [
    "DELIMITER",
    "TERMINATOR",
    "Message",
    "PacketType",
]
