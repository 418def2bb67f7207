"""TCP command client and MCP server for the ArmPi mini robotic arm."""

from .client import ArmClient, ClientState, CommandResult
from .config import ArmConfig
from .errors import (
    ArgumentError,
    ArmConnectionError,
    ArmError,
    ConnectionLost,
    ProtocolError,
    ValidationWarning,
)
from .models.position import Position
from .trajectory import TrajectoryResult, TrajectoryRunner

__version__ = "0.1.0"
