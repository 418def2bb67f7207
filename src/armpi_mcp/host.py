"""Lifecycle owner for the single arm client used by a host application.

An orchestration loop keeps one :class:`ArmHost`, calls :meth:`init` once,
passes the host to whatever needs the arm, and calls :meth:`cleanup` when
done.
"""

from __future__ import annotations

import logging
from typing import Callable

from .client import ArmClient
from .config import ArmConfig

logger = logging.getLogger(__name__)


class ArmHost:
    """Owns at most one connected :class:`ArmClient`."""

    def __init__(
        self,
        config: ArmConfig | None = None,
        client_factory: Callable[[ArmConfig], ArmClient] = ArmClient.from_config,
    ) -> None:
        self._config = config or ArmConfig()
        self._client_factory = client_factory
        self._client: ArmClient | None = None

    @property
    def config(self) -> ArmConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> ArmClient:
        """The connected client.

        Raises:
            RuntimeError: If :meth:`init` has not been called.
        """
        if self._client is None:
            raise RuntimeError("Arm not initialized. Call init() first.")
        return self._client

    def init(self) -> ArmClient:
        """Create and connect the client, replacing any previous one.

        Raises:
            ArmConnectionError: If the controller cannot be reached.
        """
        if self._client is not None:
            self.cleanup()
        client = self._client_factory(self._config)
        client.connect()
        self._client = client
        logger.info("Arm initialized at %s:%d", self._config.host, self._config.port)
        return client

    def cleanup(self) -> None:
        """Home the arm and release the connection. Safe to call repeatedly."""
        client, self._client = self._client, None
        if client is None:
            return
        client.shutdown(home_timeout=self._config.home_timeout)
        logger.info("Arm cleaned up")


def move_xyz_flag(
    host: ArmHost, x: float, y: float, z: float, duration_ms: int = 1500
) -> int:
    """Move the arm and report the outcome as 1 (success) or 0 (failure).

    Never raises, for use from control loops that only understand numbers.
    """
    if not host.initialized:
        logger.warning("Arm not initialized; call init() first")
        return 0
    client = host.client
    if not client.is_valid():
        logger.warning("Connection to arm lost")
        return 0
    try:
        result = client.move_xyz(x, y, z, duration_ms)
    except Exception as e:
        logger.warning("move_xyz failed: %s", e)
        return 0
    return 1 if result.success else 0
