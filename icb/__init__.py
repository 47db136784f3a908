"""ICB - Internet Citizen's Band protocol client."""

__version__ = "1.0.1"
__description__ = "A client library for the ICB chat protocol"

from typing import Final


# Default server endpoint
DEFAULT_HOST: Final[str] = "default.icb.net"
DEFAULT_PORT: Final[int] = 7326

from .config import ConnectionConfig  # noqa: E402
from .models.packet import Message, PacketType  # noqa: E402
from .network import (  # noqa: E402
    ConnectFailure,
    Connection,
    ConnectionClosed,
    ConnectionState,
    ICBConnectionError,
    PacketError,
    PacketTooLarge,
    ReadFailure,
    ShortWrite,
    TruncatedPacket,
    WriteFailure,
    connect,
)


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "ConnectFailure",
    "Connection",
    "ConnectionClosed",
    "ConnectionConfig",
    "ConnectionState",
    "ICBConnectionError",
    "Message",
    "PacketError",
    "PacketTooLarge",
    "PacketType",
    "ReadFailure",
    "ShortWrite",
    "TruncatedPacket",
    "WriteFailure",
    "connect",
]
