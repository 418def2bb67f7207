"""Connection settings, with defaults overridable from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_HOST = "192.168.149.1"
DEFAULT_PORT = 5000

ENV_PREFIX = "ARMPI_"


@dataclass(frozen=True)
class ArmConfig:
    """Settings used to build an :class:`~armpi_mcp.client.ArmClient`."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    connect_timeout: float = 5.0
    read_timeout: float | None = None
    pad_move_payloads: bool = False
    home_timeout: float = 5.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ArmConfig:
        """Build a config from ``ARMPI_*`` environment variables.

        Recognised: ``ARMPI_HOST``, ``ARMPI_PORT``, ``ARMPI_CONNECT_TIMEOUT``,
        ``ARMPI_READ_TIMEOUT`` (empty or ``none`` disables it),
        ``ARMPI_PAD_MOVE_PAYLOADS``, ``ARMPI_HOME_TIMEOUT``.

        Raises:
            ValueError: If a variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        port = get("PORT")
        connect_timeout = get("CONNECT_TIMEOUT")
        home_timeout = get("HOME_TIMEOUT")
        read_timeout = get("READ_TIMEOUT")
        pad = get("PAD_MOVE_PAYLOADS")

        return cls(
            host=get("HOST") or defaults.host,
            port=_parse_port(port) if port else defaults.port,
            connect_timeout=(
                _parse_seconds("CONNECT_TIMEOUT", connect_timeout)
                if connect_timeout
                else defaults.connect_timeout
            ),
            read_timeout=(
                _parse_optional_seconds(read_timeout)
                if read_timeout is not None
                else defaults.read_timeout
            ),
            pad_move_payloads=_parse_bool(pad) if pad else defaults.pad_move_payloads,
            home_timeout=(
                _parse_seconds("HOME_TIMEOUT", home_timeout)
                if home_timeout
                else defaults.home_timeout
            ),
        )


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}PORT must be an integer, got {value!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"{ENV_PREFIX}PORT must be 1-65535, got {port}")
    return port


def _parse_seconds(name: str, value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be positive, got {seconds}")
    return seconds


def _parse_optional_seconds(value: str) -> float | None:
    if value.strip().lower() in ("", "none"):
        return None
    return _parse_seconds("READ_TIMEOUT", value)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{ENV_PREFIX}PAD_MOVE_PAYLOADS must be a boolean, got {value!r}")
