"""MCP server entry point for the ArmPi mini.

Exposes the arm operations as tools via the Model Context Protocol using
the official Python MCP SDK with stdio transport. The server works on an
:class:`~armpi_mcp.host.ArmHost` handed to :func:`create_server`.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import ArmClient
from .config import ArmConfig
from .errors import ArgumentError, ArmConnectionError
from .host import ArmHost
from .protocol.commands import ANGLE_LIMITS, DEFAULT_MOVE_DURATION_MS, XYZ_LIMITS
from .trajectory import DEFAULT_STEP_DURATION_MS, TrajectoryRunner

logger = logging.getLogger(__name__)

SERVER_NAME = "armpi-mini"
INSTRUCTIONS = (
    "Control an ArmPi mini robotic arm over TCP. Call 'connect' first. "
    "Recommended envelope: x {x}, y {y}, z {z} mm; "
    "alpha {alpha}, alpha1 {alpha1}, alpha2 {alpha2} degrees."
).format(**{k: list(v) for k, v in {**XYZ_LIMITS, **ANGLE_LIMITS}.items()})


def create_server(host: ArmHost) -> FastMCP:
    """Build a FastMCP server whose tools drive ``host``'s client."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)

    def _get_client() -> ArmClient:
        """Get the active client, raising if not connected."""
        if not host.initialized or not host.client.is_valid():
            raise RuntimeError("Not connected to arm. Use the 'connect' tool first.")
        return host.client

    # ─── CONNECTION TOOLS ─────────────────────────────────────────────

    @mcp.tool()
    def connect() -> dict[str, Any]:
        """Open the TCP connection to the arm controller.

        Reconnects if a previous connection was lost.
        """
        if host.initialized and host.client.is_valid():
            return {"connected": True, "message": "Already connected"}
        try:
            host.init()
        except ArmConnectionError as e:
            return {"connected": False, "error": str(e)}
        return {
            "connected": True,
            "host": host.config.host,
            "port": host.config.port,
        }

    @mcp.tool()
    def disconnect() -> dict[str, bool]:
        """Home the arm and close the connection."""
        host.cleanup()
        return {"disconnected": True}

    @mcp.tool()
    def get_status() -> dict[str, Any]:
        """Report connection state and target address."""
        status: dict[str, Any] = {
            "host": host.config.host,
            "port": host.config.port,
            "initialized": host.initialized,
        }
        if host.initialized:
            status["state"] = host.client.state.value
            status["valid"] = host.client.is_valid()
        return status

    # ─── MOTION TOOLS ─────────────────────────────────────────────────

    @mcp.tool()
    def move_xyz(
        x: float, y: float, z: float, duration_ms: int = DEFAULT_MOVE_DURATION_MS
    ) -> dict[str, Any]:
        """Move the end effector to a Cartesian position.

        Args:
            x: X in mm (recommended -5 to 5).
            y: Y in mm (recommended 6 to 18).
            z: Z in mm (recommended 13 to 18).
            duration_ms: Movement time in milliseconds.
        """
        return _get_client().move_xyz(x, y, z, duration_ms).to_dict()

    @mcp.tool()
    def move_with_angles(
        x: float,
        y: float,
        z: float,
        alpha: float,
        alpha1: float,
        alpha2: float,
        duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    ) -> dict[str, Any]:
        """Move to a position with explicit joint angles.

        Args:
            x, y, z: Target position in mm.
            alpha: Pitch of the end effector (-180 to 180 degrees).
            alpha1: Lower bound angle (-180 to 0 degrees).
            alpha2: Upper bound angle (0 to 180 degrees).
            duration_ms: Movement time in milliseconds.
        """
        client = _get_client()
        return client.move_with_angles(
            x, y, z, alpha, alpha1, alpha2, duration_ms
        ).to_dict()

    @mcp.tool()
    def stop() -> dict[str, Any]:
        """Stop the current motion."""
        return _get_client().stop().to_dict()

    @mcp.tool()
    def home() -> dict[str, Any]:
        """Return the arm to its home position."""
        return _get_client().home().to_dict()

    @mcp.tool()
    def get_position() -> dict[str, Any]:
        """Read the arm's current position."""
        return _get_client().get_position().to_dict()

    # ─── TRAJECTORY TOOLS ─────────────────────────────────────────────

    @mcp.tool()
    def run_trajectory(
        points: list[list[float]], duration_ms: int = DEFAULT_STEP_DURATION_MS
    ) -> dict[str, Any]:
        """Move through a list of [x, y, z] points, stopping at the first failure.

        Args:
            points: Ordered [x, y, z] targets in mm.
            duration_ms: Movement time per point in milliseconds.
        """
        runner = TrajectoryRunner(_get_client())
        try:
            return runner.run_trajectory(points, duration_ms).to_dict()
        except ArgumentError as e:
            return {"error": str(e)}

    @mcp.tool()
    def run_trajectory_with_angles(
        points: list[list[float]],
        angles: list[list[float]],
        duration_ms: int = DEFAULT_STEP_DURATION_MS,
    ) -> dict[str, Any]:
        """Move through [x, y, z] points with matching [alpha, alpha1, alpha2] rows.

        Args:
            points: Ordered [x, y, z] targets in mm.
            angles: One [alpha, alpha1, alpha2] row per point, in degrees.
            duration_ms: Movement time per point in milliseconds.
        """
        runner = TrajectoryRunner(_get_client())
        try:
            return runner.run_trajectory_with_angles(
                points, angles, duration_ms
            ).to_dict()
        except ArgumentError as e:
            return {"error": str(e)}

    return mcp


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    host = ArmHost(ArmConfig.from_env())
    server = create_server(host)
    try:
        server.run(transport="stdio")
    finally:
        host.cleanup()


if __name__ == "__main__":
    main()
