"""WebSocket query service wrapping the hand engine."""

from .server import HandHost

__all__ = ["HandHost"]
