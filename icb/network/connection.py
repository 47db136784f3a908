"""Connection management for ICB servers.

A connection owns one blocking TCP socket. Every operation runs on the
caller's thread; there are no background tasks and no internal locks.
Reads block without a timeout. To abort a blocked ``read_message`` from
another thread, call ``close()``: the pending read then fails with
``ConnectionClosed`` or ``ReadFailure``.

Concurrent sends from several threads must be serialized by the caller.
"""

import socket
import time
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from ..config.models import ConnectionConfig
from ..models.packet import Message, PacketType
from ..utils.logging import get_logger
from .codec import decode, encode, frame


class DiagnosticSink(Protocol):
    """Anything that can record a debug line, e.g. a structlog logger."""

    def debug(self, event: str, **kwargs: Any) -> Any: ...


class ICBConnectionError(Exception):
    """Base exception for ICB transport errors."""


class ConnectFailure(ICBConnectionError):
    """The TCP connection to the server could not be established."""


class WriteFailure(ICBConnectionError):
    """Writing a packet to the socket failed."""


class ShortWrite(WriteFailure):
    """The socket accepted fewer bytes than the packet frame holds."""


class ReadFailure(ICBConnectionError):
    """Reading a packet from the socket failed."""


class ConnectionClosed(ReadFailure):
    """The stream is closed, by the peer or locally."""


class TruncatedPacket(ConnectionClosed):
    """The stream ended in the middle of a packet."""


class ConnectionState(Enum):
    """Connection state enumeration."""

    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class ConnectionStats:
    """Connection statistics tracking."""

    packets_sent: int = 0
    packets_received: int = 0
    bytes_sent: int = 0
    bytes_received: int = 0
    pongs_sent: int = 0
    connection_time: float = 0
    last_error: str | None = None


class Connection:
    """A logged-in connection to an ICB server."""

    def __init__(self, config: ConnectionConfig, logger: DiagnosticSink | None = None):
        """Initialize an unconnected connection.

        Args:
            config: Server address and login identity
            logger: Optional diagnostic sink; a structlog logger is used if omitted
        """
        self.config = config
        self.logger = logger if logger is not None else get_logger(__name__)
        self.state = ConnectionState.UNCONNECTED
        self.stats = ConnectionStats()
        self._sock: socket.socket | None = None

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __iter__(self) -> Iterator[Message]:
        """Yield messages until the server says goodbye or the stream closes.

        A stream that ends between packets stops the iteration; one that ends
        inside a packet raises ``TruncatedPacket``.
        """
        while self.is_active():
            try:
                message = self.read_message()
            except TruncatedPacket:
                raise
            except ConnectionClosed:
                return
            yield message
            if message.is_type(PacketType.EXIT):
                return

    def connect(self) -> None:
        """Open the TCP stream and send the login packet.

        The server's login acknowledgement is not awaited; it arrives
        through ``read_message`` like any other packet.

        Raises:
            ConnectFailure: If the server cannot be reached
            WriteFailure: If the login packet cannot be written
        """
        if self.state != ConnectionState.UNCONNECTED:
            raise ICBConnectionError(f"Cannot connect from state {self.state.value}")

        address = (self.config.host, self.config.port)
        self.state = ConnectionState.CONNECTING
        self.logger.debug("Connecting", host=address[0], port=address[1])

        try:
            self._sock = socket.create_connection(address)
        except OSError as e:
            self.state = ConnectionState.CLOSED
            self.stats.last_error = str(e)
            raise ConnectFailure(f"Cannot connect to {address[0]}:{address[1]}: {e}") from e

        try:
            self._login()
        except Exception:
            self.close()
            raise

        self.state = ConnectionState.ACTIVE
        self.stats.connection_time = time.time()
        self.logger.debug("Connected", host=address[0], port=address[1], user=self.config.user)

    def close(self) -> None:
        """Release the socket. Safe to call any number of times."""
        sock, self._sock = self._sock, None
        self.state = ConnectionState.CLOSED
        if sock is None:
            return

        try:
            # Wakes up a read blocked in another thread
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
        self.logger.debug("Connection closed")

    def is_active(self) -> bool:
        """Check if the connection is logged in and open."""
        return self.state == ConnectionState.ACTIVE

    def send_open(self, text: str) -> None:
        """Send an open message to the current group."""
        self._send_packet(PacketType.OPEN, [text])

    def send_private(self, nick: str, message: str) -> None:
        """Send a personal message to ``nick``."""
        self.send_command("m", nick, message)

    def send_command(self, cmd: str, *args: str) -> None:
        """Send a command for the server to process.

        The arguments are joined with spaces, not field delimiters.
        """
        self._send_packet(PacketType.COMMAND, [cmd, " ".join(args)])

    def send_pong(self) -> None:
        """Answer a server ping."""
        self._send_packet(PacketType.PONG, [])
        self.stats.pongs_sent += 1

    def send_raw(self, packet: bytes | str) -> None:
        """Send an assembled packet without inserting a packet type.

        Args:
            packet: Packet type character followed by the payload
        """
        self._require_active()
        if isinstance(packet, str):
            packet = packet.encode(self.config.encoding)
        self._write(frame(packet), packet[:1].decode(self.config.encoding, errors="replace"))

    def read_message(self) -> Message:
        """Read the next message from the server, blocking until one arrives.

        Pings are answered with a pong before being returned.

        Raises:
            ConnectionClosed: If the stream ends before the next packet
            TruncatedPacket: If the stream ends inside a packet
            ReadFailure: If the socket read fails
            WriteFailure: If the pong reply cannot be written
        """
        self._require_active()
        body = self._receive()
        message = decode(body, self.config.encoding)
        self.logger.debug(
            "Packet received", packet_type=message.type, size=len(body), fields=message.fields
        )

        if message.is_type(PacketType.PING):
            self.send_pong()

        return message

    def _login(self) -> None:
        self._write(
            encode(PacketType.LOGIN.value, self.config.login_fields(), self.config.encoding),
            PacketType.LOGIN.value,
        )

    def _require_active(self) -> None:
        if not self.is_active():
            raise ConnectionClosed(f"Connection is {self.state.value}")

    def _send_packet(self, packet_type: PacketType, fields: list[str]) -> None:
        self._require_active()
        self._write(encode(packet_type.value, fields, self.config.encoding), packet_type.value)

    def _write(self, data: bytes, packet_type: str) -> None:
        """Write one frame in a single send call."""
        sock = self._sock
        if sock is None:
            raise ConnectionClosed("Connection is closed")

        try:
            written = sock.send(data)
        except OSError as e:
            self._fail(f"Send failed: {e}")
            raise WriteFailure(f"Send failed: {e}") from e

        if written != len(data):
            self._fail(f"Wrote {written} of {len(data)} bytes")
            raise ShortWrite(f"Wrote {written} of {len(data)} bytes")

        self.stats.packets_sent += 1
        self.stats.bytes_sent += written
        self.logger.debug("Packet sent", packet_type=packet_type, size=written)

    def _receive(self) -> bytes:
        """Read one length-prefixed packet body."""
        length = self._read_exact(1)[0]
        body = self._read_exact(length, mid_packet=True)

        self.stats.packets_received += 1
        self.stats.bytes_received += length + 1
        return body

    def _read_exact(self, count: int, mid_packet: bool = False) -> bytes:
        sock = self._sock
        if sock is None:
            raise ConnectionClosed("Connection is closed")

        chunks = []
        remaining = count
        while remaining > 0:
            try:
                chunk = sock.recv(remaining)
            except OSError as e:
                self._fail(f"Receive failed: {e}")
                raise ReadFailure(f"Receive failed: {e}") from e

            if not chunk:
                if mid_packet or chunks:
                    self._fail("Connection closed inside a packet")
                    raise TruncatedPacket(
                        f"Connection closed after {count - remaining} of {count} bytes"
                    )
                self._fail("Connection closed by server")
                raise ConnectionClosed("Connection closed by server")

            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)

    def _fail(self, reason: str) -> None:
        """Record a fatal I/O error and close the connection."""
        self.stats.last_error = reason
        self.logger.debug("Connection failed", error=reason)
        self.close()


def connect(
    config: ConnectionConfig | None = None,
    *,
    logger: DiagnosticSink | None = None,
    **options: Any,
) -> Connection:
    """Connect and log in to an ICB server.

    Either pass a ready ``ConnectionConfig`` or the options to build one
    (``host``, ``port``, ``user``, ``nick``, ``group``, ``cmd``, ``passwd``,
    ``encoding``). Unknown options are rejected.

    Raises:
        ValueError: If both a config and options are given
        pydantic.ValidationError: If the options are invalid
        ConnectFailure: If the server cannot be reached
    """
    if config is None:
        config = ConnectionConfig(**options)
    elif options:
        raise ValueError("Pass either a config or connection options, not both")

    connection = Connection(config, logger=logger)
    connection.connect()
    return connection
