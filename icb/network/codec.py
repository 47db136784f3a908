"""ICB packet codec.

The ICB wire format is a one-byte length prefix followed by the packet
body:

- 1 byte: N, the number of bytes that follow (2..255)
- 1 byte: packet type character
- N-2 bytes: payload, fields separated by 0x01
- 1 byte: 0x00 terminator

Nothing in this module performs I/O.
"""

from collections.abc import Sequence

from ..models.packet import DELIMITER, MAX_BODY_SIZE, TERMINATOR, Message


class PacketError(Exception):
    """Base exception for ICB packet errors."""


class PacketTooLarge(PacketError):
    """Raised when an encoded packet body would not fit the length prefix."""


def frame(packet: bytes) -> bytes:
    """Terminate a packet and add its length prefix.

    Args:
        packet: Packet type byte followed by the payload

    Returns:
        Bytes ready to be written to the socket

    Raises:
        PacketError: If the packet has no type byte
        PacketTooLarge: If the terminated packet exceeds 255 bytes
    """
    if not packet:
        raise PacketError("Cannot frame a packet without a type byte")

    body = packet + TERMINATOR
    if len(body) > MAX_BODY_SIZE:
        raise PacketTooLarge(f"Packet body is {len(body)} bytes, limit is {MAX_BODY_SIZE}")

    return bytes([len(body)]) + body


def encode(packet_type: str, fields: Sequence[str], encoding: str = "utf-8") -> bytes:
    """Encode a packet to ICB wire format.

    Args:
        packet_type: Single character identifying the packet
        fields: Payload fields, joined with the field delimiter
        encoding: Text encoding for the type and the fields

    Returns:
        Length-prefixed, null-terminated frame

    Raises:
        PacketError: If the packet type is not a single byte
        PacketTooLarge: If the packet does not fit in 255 bytes
    """
    type_byte = packet_type.encode(encoding)
    if len(packet_type) != 1 or len(type_byte) != 1:
        raise PacketError(f"Packet type must be a single byte, got {packet_type!r}")

    payload = DELIMITER.join(field.encode(encoding) for field in fields)
    return frame(type_byte + payload)


def decode(body: bytes, encoding: str = "utf-8") -> Message:
    """Decode a packet body into a message.

    The body is everything after the length prefix. A single trailing
    terminator is removed; empty fields, trailing ones included, are kept.
    An empty payload yields no fields at all.

    Args:
        body: Packet body as read from the socket
        encoding: Text encoding for the type and the fields

    Returns:
        Decoded message

    Raises:
        PacketError: If the body is empty
    """
    if not body:
        raise PacketError("Cannot decode an empty packet")

    packet_type = body[:1].decode(encoding, errors="replace")
    payload = body[1:]
    if payload.endswith(TERMINATOR):
        payload = payload[:-1]

    if not payload:
        return Message(packet_type, [])

    fields = [field.decode(encoding, errors="replace") for field in payload.split(DELIMITER)]
    return Message(packet_type, fields)
