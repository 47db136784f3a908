"""Pytest configuration and fixtures for ICB client tests."""

import socket
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from icb.config import ConnectionConfig
from icb.network import connect


class FakeServer:
    """Server end of a socket pair, speaking raw ICB frames."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def recv_exact(self, count: int) -> bytes:
        data = b""
        while len(data) < count:
            chunk = self.sock.recv(count - len(data))
            if not chunk:
                raise EOFError("client closed the stream")
            data += chunk
        return data

    def read_frame(self) -> bytes:
        """Read one frame, length prefix included."""
        length = self.recv_exact(1)
        return length + self.recv_exact(length[0])

    def send(self, data: bytes) -> None:
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()


@pytest.fixture
def config():
    """Connection config for a local test server."""
    return ConnectionConfig(host="127.0.0.1", port=7326, user="alice")


@pytest.fixture
def socket_pair():
    """Connected client/server sockets; the server side never blocks forever."""
    client, server = socket.socketpair()
    server.settimeout(5)
    yield client, server
    client.close()
    server.close()


@pytest.fixture
def server(socket_pair):
    """Fake ICB server attached to the client socket."""
    return FakeServer(socket_pair[1])


@pytest.fixture
def connection(config, socket_pair, server):
    """Logged-in connection whose login packet has already been consumed."""
    with patch("icb.network.connection.socket.create_connection", return_value=socket_pair[0]):
        conn = connect(config)
    server.read_frame()
    yield conn
    conn.close()
