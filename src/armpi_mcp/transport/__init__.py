"""Transport layer: the TCP session to the arm controller."""

from .tcp_connection import TCPConnection, connect
