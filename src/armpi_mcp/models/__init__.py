"""Data models for arm state."""

from .position import Position
