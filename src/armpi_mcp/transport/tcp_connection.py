"""TCP connection to the ArmPi controller.

The controller runs a single-client TCP server (default port 5000) on the
Raspberry Pi. The protocol has no request IDs, so exactly one request may
be outstanding at a time; serialising calls is the caller's job.
"""

from __future__ import annotations

import logging
import socket

from ..errors import ArmConnectionError, ConnectionLost

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5000
CONNECT_TIMEOUT_S = 5.0


class TCPConnection:
    """Manages the TCP session to the arm controller.

    Usage::

        conn = TCPConnection("192.168.149.1")
        conn.open()
        conn.write(frame_bytes)
        header = conn.read_exact(5)
        conn.close()

    ``read_timeout`` defaults to ``None``: reads block until the device
    answers, so a stalled controller stalls the caller.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float = CONNECT_TIMEOUT_S,
        read_timeout: float | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._sock: socket.socket | None = None
        self._broken = False

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def read_timeout(self) -> float | None:
        return self._read_timeout

    def open(self) -> TCPConnection:
        """Open the connection.

        Returns:
            The connection itself, for chaining.

        Raises:
            ArmConnectionError: On timeout, refusal, or name resolution failure.
        """
        if self._sock is not None:
            return self

        try:
            sock = socket.create_connection(
                (self._host, self._port), timeout=self._connect_timeout
            )
        except OSError as e:
            raise ArmConnectionError(
                f"Could not connect to arm at {self._host}:{self._port}: {e}"
            ) from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(self._read_timeout)
        self._sock = sock
        self._broken = False
        logger.info("Connected to arm at %s:%d", self._host, self._port)
        return self

    def is_valid(self) -> bool:
        """True if the socket is open and no reset or EOF has been seen."""
        return self._sock is not None and not self._broken

    def set_read_timeout(self, timeout: float | None) -> None:
        """Change the read timeout; ``None`` blocks indefinitely."""
        self._read_timeout = timeout
        if self._sock is not None:
            self._sock.settimeout(timeout)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._sock is None:
            return

        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
        finally:
            self._sock = None
            self._broken = False
            logger.info("Disconnected from %s:%d", self._host, self._port)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise ConnectionLost("Not connected to arm")
        if self._broken:
            raise ConnectionLost("Connection to arm was lost; reconnect first")
        return self._sock

    def write(self, data: bytes) -> None:
        """Send all of ``data``.

        Raises:
            ConnectionLost: If the socket is closed or the send fails.
        """
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except OSError as e:
            self._broken = True
            raise ConnectionLost(f"Write failed: {e}") from e
        logger.debug("Sent %d bytes: %s", len(data), data.hex(" "))

    def read_exact(self, length: int) -> bytes:
        """Read exactly ``length`` bytes.

        Raises:
            ConnectionLost: If the peer closes the connection, the socket
                errors, or the read timeout expires first.
        """
        sock = self._require_socket()
        buf = bytearray()
        while len(buf) < length:
            try:
                chunk = sock.recv(length - len(buf))
            except socket.timeout as e:
                self._broken = True
                raise ConnectionLost(
                    f"Timed out after {self._read_timeout}s waiting for "
                    f"{length - len(buf)} of {length} bytes"
                ) from e
            except OSError as e:
                self._broken = True
                raise ConnectionLost(f"Read failed: {e}") from e
            if not chunk:
                self._broken = True
                raise ConnectionLost(
                    f"Connection closed by arm after {len(buf)} of {length} bytes"
                )
            buf += chunk
        return bytes(buf)


def connect(
    host: str,
    port: int = DEFAULT_PORT,
    timeout: float = CONNECT_TIMEOUT_S,
    read_timeout: float | None = None,
) -> TCPConnection:
    """Open and return a connection to the arm controller."""
    return TCPConnection(host, port, timeout, read_timeout).open()
