"""Room geometry module for wavefront simulation."""

from .room import WALLS, Room, Source

__all__ = ["Room", "Source", "WALLS"]
