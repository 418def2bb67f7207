"""Shared fixtures: a scripted stand-in for the TCP connection."""

from __future__ import annotations

import pytest

from armpi_mcp.client import ArmClient
from armpi_mcp.errors import ConnectionLost


class FakeConnection:
    """Replays queued response bytes and records every frame written."""

    def __init__(self, *replies: bytes) -> None:
        self.sent: list[bytes] = []
        self.read_timeout: float | None = None
        self.opened = False
        self.closed = False
        self.broken = False
        self._incoming = bytearray(b"".join(replies))

    def queue(self, *replies: bytes) -> None:
        self._incoming += b"".join(replies)

    def open(self) -> FakeConnection:
        self.opened = True
        return self

    def is_valid(self) -> bool:
        return self.opened and not self.closed and not self.broken

    def set_read_timeout(self, timeout: float | None) -> None:
        self.read_timeout = timeout

    def write(self, data: bytes) -> None:
        if self.closed or self.broken:
            raise ConnectionLost("Not connected to arm")
        self.sent.append(bytes(data))

    def read_exact(self, length: int) -> bytes:
        if len(self._incoming) < length:
            self.broken = True
            raise ConnectionLost(
                f"Connection closed by arm after {len(self._incoming)} of {length} bytes"
            )
        data = bytes(self._incoming[:length])
        del self._incoming[:length]
        return data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def client(fake_conn: FakeConnection, sleeps: list[float]) -> ArmClient:
    """A connected client talking to ``fake_conn``."""
    arm = ArmClient(
        "arm.local",
        connection_factory=lambda *args: fake_conn,
        sleep=sleeps.append,
    )
    arm.connect()
    return arm
