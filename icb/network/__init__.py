"""Network layer for the ICB client."""

from .codec import PacketError, PacketTooLarge, decode, encode, frame
from .connection import (
    ConnectFailure,
    Connection,
    ConnectionClosed,
    ConnectionState,
    ConnectionStats,
    DiagnosticSink,
    ICBConnectionError,
    ReadFailure,
    ShortWrite,
    TruncatedPacket,
    WriteFailure,
    connect,
)

__all__ = [
    "PacketError",
    "PacketTooLarge",
    "decode",
    "encode",
    "frame",
    "ConnectFailure",
    "Connection",
    "ConnectionClosed",
    "ConnectionState",
    "ConnectionStats",
    "DiagnosticSink",
    "ICBConnectionError",
    "ReadFailure",
    "ShortWrite",
    "TruncatedPacket",
    "WriteFailure",
    "connect",
]
