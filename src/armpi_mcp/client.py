"""High-level command client for the ArmPi mini.

Every operation is a synchronous request/response over one TCP session.
Failures after the connection is up are returned as a failed
:class:`CommandResult`; only :meth:`ArmClient.connect` raises.
"""

from __future__ import annotations

import logging
import threading
import time
import warnings
from enum import Enum
from typing import Callable

from .config import ArmConfig
from .errors import ArgumentError, ArmError, ValidationWarning
from .protocol.commands import (
    ANGLE_LIMITS,
    DEFAULT_MOVE_DURATION_MS,
    XYZ_LIMITS,
    Command,
    encode_move_angles,
    encode_move_xyz,
    out_of_range,
)
from .protocol.framing import (
    HEADER_SIZE,
    Response,
    build_request,
    parse_response_header,
)
from .protocol.parser import (
    CommandResult,
    parse_command_result,
    parse_position,
    parse_text_result,
)
from .transport.tcp_connection import CONNECT_TIMEOUT_S, DEFAULT_PORT, TCPConnection

logger = logging.getLogger(__name__)

HOME_SETTLE_S = 1.5


class ClientState(Enum):
    """Connection lifecycle of an :class:`ArmClient`."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ArmClient:
    """Command client for a single arm controller.

    Usage::

        with ArmClient("192.168.149.1") as arm:
            arm.move_xyz(0, 10, 15)
            ok, position = arm.get_position()

    The context manager connects on entry and runs :meth:`shutdown` on exit.
    Calls from several threads are serialised; only one request is ever
    on the wire.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float = CONNECT_TIMEOUT_S,
        read_timeout: float | None = None,
        pad_move_payloads: bool = False,
        home_timeout: float = 5.0,
        connection_factory: Callable[..., TCPConnection] = TCPConnection,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._pad_move_payloads = pad_move_payloads
        self._home_timeout = home_timeout
        self._connection_factory = connection_factory
        self._sleep = sleep
        self._connection: TCPConnection | None = None
        self._state = ClientState.DISCONNECTED
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ArmConfig, **kwargs) -> ArmClient:
        return cls(
            config.host,
            port=config.port,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            pad_move_payloads=config.pad_move_payloads,
            home_timeout=config.home_timeout,
            **kwargs,
        )

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def state(self) -> ClientState:
        return self._state

    def __enter__(self) -> ArmClient:
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    # ─── SESSION ──────────────────────────────────────────────────────

    def connect(self) -> None:
        """Open the session to the controller.

        Raises:
            ArmConnectionError: If the controller cannot be reached.
        """
        with self._lock:
            if self._state is ClientState.CONNECTED:
                return
            self._state = ClientState.CONNECTING
            connection = self._connection_factory(
                self._host, self._port, self._connect_timeout, self._read_timeout
            )
            try:
                connection.open()
            except Exception:
                self._state = ClientState.DISCONNECTED
                raise
            self._connection = connection
            self._state = ClientState.CONNECTED
        logger.info("Arm client ready at %s:%d", self._host, self._port)

    def is_valid(self) -> bool:
        """True while connected and the session has seen no failure."""
        return (
            self._state is ClientState.CONNECTED
            and self._connection is not None
            and self._connection.is_valid()
        )

    def close(self) -> None:
        """Release the session without homing. Safe to call repeatedly."""
        with self._lock:
            self._drop_connection()

    def shutdown(
        self, home_timeout: float | None = None, settle_s: float = HOME_SETTLE_S
    ) -> None:
        """Home the arm if possible, then always release the session.

        The homing attempt waits at most ``home_timeout`` seconds for the
        reply. Any failure is logged and swallowed.
        """
        if home_timeout is None:
            home_timeout = self._home_timeout
        try:
            if self.is_valid():
                self._connection.set_read_timeout(home_timeout)
                result = self.home()
                if result.success:
                    if settle_s > 0:
                        self._sleep(settle_s)
                else:
                    logger.warning("Homing during shutdown failed: %s", result.message)
        except Exception as e:
            logger.warning("Homing during shutdown failed: %s", e)
        finally:
            self.close()

    def _drop_connection(self) -> None:
        # Caller holds self._lock.
        connection, self._connection = self._connection, None
        self._state = ClientState.DISCONNECTED
        if connection is not None:
            connection.close()

    # ─── COMMAND PRIMITIVE ────────────────────────────────────────────

    def send_command(self, command: Command, payload: bytes = b"") -> CommandResult:
        """Send one command and wait for its reply.

        The reply is decoded as a float vector when its length is a
        multiple of 8, otherwise as text. I/O and framing errors are
        returned as a failed result and drop the session.
        """
        return self._request(command, payload, parse_command_result)

    def _request(
        self,
        command: Command,
        payload: bytes,
        interpret: Callable[[Response], CommandResult],
    ) -> CommandResult:
        with self._lock:
            if self._state is not ClientState.CONNECTED or self._connection is None:
                return CommandResult(False, "Not connected to arm")
            try:
                response = self._exchange(self._connection, command, payload)
            except (ArmError, OSError) as e:
                logger.warning("%s failed: %s", _command_name(command), e)
                self._drop_connection()
                return CommandResult(False, f"Communication error: {e}")
        return interpret(response)

    @staticmethod
    def _exchange(
        connection: TCPConnection, command: Command, payload: bytes
    ) -> Response:
        connection.write(build_request(int(command), payload))
        success, length = parse_response_header(connection.read_exact(HEADER_SIZE))
        message = connection.read_exact(length) if length else b""
        logger.debug(
            "%s -> success=%s, %d byte reply", _command_name(command), success, length
        )
        return Response(success=success, payload=message)

    # ─── OPERATIONS ───────────────────────────────────────────────────

    def move_xyz(
        self,
        x: float,
        y: float,
        z: float,
        duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    ) -> CommandResult:
        """Move the end effector to (x, y, z) millimetres.

        Targets outside the recommended envelope produce a
        :class:`ValidationWarning` but are still sent. A duration that does
        not fit the int32 field is returned as a failed result.
        """
        _warn_out_of_range({"x": x, "y": y, "z": z}, XYZ_LIMITS)
        logger.info("Moving to X=%.2f, Y=%.2f, Z=%.2f (%dms)", x, y, z, duration_ms)
        try:
            payload = encode_move_xyz(
                x, y, z, duration_ms, pad_to_double=self._pad_move_payloads
            )
        except ArgumentError as e:
            return _log_move(CommandResult(False, str(e)))
        return _log_move(self.send_command(Command.MOVE_XYZ, payload))

    def move_with_angles(
        self,
        x: float,
        y: float,
        z: float,
        alpha: float,
        alpha1: float,
        alpha2: float,
        duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    ) -> CommandResult:
        """Move to (x, y, z) with explicit joint angles in degrees."""
        _warn_out_of_range(
            {"alpha": alpha, "alpha1": alpha1, "alpha2": alpha2}, ANGLE_LIMITS
        )
        logger.info(
            "Moving to X=%.2f, Y=%.2f, Z=%.2f, angles=(%.1f, %.1f, %.1f) (%dms)",
            x, y, z, alpha, alpha1, alpha2, duration_ms,
        )
        try:
            payload = encode_move_angles(
                x, y, z, alpha, alpha1, alpha2, duration_ms,
                pad_to_double=self._pad_move_payloads,
            )
        except ArgumentError as e:
            return _log_move(CommandResult(False, str(e)))
        result = self._request(Command.MOVE_ANGLES, payload, parse_text_result)
        return _log_move(result)

    def stop(self) -> CommandResult:
        """Stop the current motion.

        This queues behind any request already on the wire.
        """
        logger.info("Stopping arm")
        return self.send_command(Command.STOP)

    def get_position(self) -> CommandResult:
        """Read the current position.

        Returns:
            A result whose payload is a :class:`Position` on success, or the
            device's text/an error description on failure.
        """
        result = self._request(Command.GET_POSITION, b"", parse_position)
        if result.success:
            logger.info("Current position: %s", result.payload)
        else:
            logger.warning("Could not read position: %s", result.message)
        return result

    def home(self) -> CommandResult:
        """Return the arm to its home pose."""
        logger.info("Returning to home position")
        return self.send_command(Command.HOME)


def _warn_out_of_range(
    values: dict[str, float], limits: dict[str, tuple[float, float]]
) -> None:
    for problem in out_of_range(values, limits):
        logger.warning("%s", problem)
        warnings.warn(problem, ValidationWarning, stacklevel=3)


def _log_move(result: CommandResult) -> CommandResult:
    if result.success:
        logger.info("Move completed")
    else:
        logger.warning("Move failed: %s", result.message)
    return result


def _command_name(command: int) -> str:
    try:
        return Command(command).name
    except ValueError:
        return f"command {command}"
