"""Exception and warning types raised by the ArmPi client."""

from __future__ import annotations


class ArmError(Exception):
    """Base exception for all ArmPi client errors."""


class ArmConnectionError(ArmError, ConnectionError):
    """Raised when the TCP connection to the arm cannot be established."""


class ConnectionLost(ArmConnectionError):
    """Raised when an open connection fails during a read or write."""


class ProtocolError(ArmError):
    """Raised when a frame header or length does not match its contents."""


class ArgumentError(ArmError, ValueError):
    """Raised for inconsistent trajectory inputs."""


class ValidationWarning(UserWarning):
    """Emitted when a target lies outside the recommended range.

    The firmware clamps internally, so the command is still sent.
    """
