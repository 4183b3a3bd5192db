"""
Room Geometry Module

This module defines the rectangular enclosure the wavefronts propagate in
and the point sources placed inside it.

Coordinates are corner-based:
- X: along the room length, 0 at the first wall
- Y: along the room width
- Z: up, 0 at the floor
"""

import logging
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from ..exceptions import InvalidRoomDimension

logger = logging.getLogger(__name__)

# Wall names in emission order; each entry is (name, axis index, high side?)
WALLS: Tuple[Tuple[str, int, bool], ...] = (
    ("x_low", 0, False),
    ("x_high", 0, True),
    ("y_low", 1, False),
    ("y_high", 1, True),
    ("z_low", 2, False),
    ("z_high", 2, True),
)


class Room:
    """
    Shoebox room with six perfectly reflecting, axis-aligned walls.

    The room is immutable once constructed: the dimension array is stored
    read-only and every accessor returns copies or plain floats.
    """

    def __init__(self, length: float, width: float, height: float):
        """
        Initialize the room.

        Args:
            length: Extent along X in meters
            width: Extent along Y in meters
            height: Extent along Z in meters
        """
        dims = np.array([length, width, height], dtype=float)
        if not np.all(np.isfinite(dims)):
            raise InvalidRoomDimension(
                f"Room dimensions must be finite numbers, got {dims.tolist()}")
        if np.any(dims <= 0):
            raise InvalidRoomDimension(
                f"All room dimension values must be positive, got {dims.tolist()}")
        dims.flags.writeable = False
        self._dimensions = dims

    @property
    def length(self) -> float:
        return float(self._dimensions[0])

    @property
    def width(self) -> float:
        return float(self._dimensions[1])

    @property
    def height(self) -> float:
        return float(self._dimensions[2])

    @property
    def dimensions(self) -> np.ndarray:
        """[length, width, height] as a float array (copy)."""
        return self._dimensions.copy()

    @property
    def center(self) -> np.ndarray:
        return self._dimensions / 2.0

    @property
    def max_dimension(self) -> float:
        return float(np.max(self._dimensions))

    @property
    def volume(self) -> float:
        return float(np.prod(self._dimensions))

    @property
    def surface_area(self) -> float:
        l, w, h = self._dimensions
        return float(2.0 * (l * w + l * h + w * h))

    def plane_coordinate(self, axis: int, high: bool) -> float:
        """Coordinate of the wall on ``axis``: 0 for the low side, the dimension for the high side."""
        return float(self._dimensions[axis]) if high else 0.0

    def planes(self) -> List[Tuple[str, int, float]]:
        """
        Return the six bounding planes as (name, axis, coordinate).

        Order is x_low, x_high, y_low, y_high, z_low, z_high.
        """
        return [(name, axis, self.plane_coordinate(axis, high))
                for name, axis, high in WALLS]

    def contains(self, point: Sequence[float], tolerance: float = 1e-9) -> bool:
        """Check whether a point lies within the room boundaries (inclusive)."""
        pt = np.asarray(point, dtype=float)
        if pt.shape != (3,):
            raise ValueError("point must be a length-3 iterable (x,y,z)")
        return bool(np.all(pt >= -tolerance) and
                    np.all(pt <= self._dimensions + tolerance))

    def get_room_info(self) -> Dict[str, Any]:
        """
        Return room metadata dict.
        """
        return {
            "dimensions": self._dimensions.tolist(),
            "volume_m3": self.volume,
            "surface_area_m2": self.surface_area,
            "max_dimension_m": self.max_dimension,
        }

    @classmethod
    def from_config(cls, config: Dict) -> 'Room':
        """
        Create a Room from a configuration dictionary.

        Args:
            config: Dictionary with a 'dimensions' key ([length, width, height])
        """
        if 'dimensions' not in config:
            raise InvalidRoomDimension(
                "room config must contain a 'dimensions' key [length, width, height]")
        dims = config['dimensions']
        try:
            if isinstance(dims, (str, bytes)):
                raise TypeError(dims)
            values = [float(d) for d in dims]
        except (TypeError, ValueError) as exc:
            raise InvalidRoomDimension(
                "room dimensions must be an iterable of three positive numbers "
                f"[length, width, height], got {dims!r}") from exc
        if len(values) != 3:
            raise InvalidRoomDimension(
                f"room dimensions must have exactly three values, got {len(values)}")
        return cls(*values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Room):
            return NotImplemented
        return bool(np.array_equal(self._dimensions, other._dimensions))

    def __hash__(self) -> int:
        return hash(tuple(self._dimensions.tolist()))

    def __repr__(self) -> str:
        return f"Room(length={self.length}, width={self.width}, height={self.height})"


class Source:
    """
    Omnidirectional point source with a reference SPL defined at 1 m.
    """

    def __init__(self, position: Sequence[float], spl_db: float):
        """
        Initialize the source.

        Args:
            position: [x, y, z] coordinates in meters
            spl_db: Sound pressure level in dB at the reference distance
        """
        pos = np.array(position, dtype=float)
        if pos.shape != (3,):
            raise ValueError("position must be a 3-element iterable [x,y,z].")
        if not np.all(np.isfinite(pos)):
            raise ValueError(f"Source position must be finite, got {pos.tolist()}")
        spl_db = float(spl_db)
        if not np.isfinite(spl_db):
            raise ValueError(f"Source SPL must be finite, got {spl_db}")
        pos.flags.writeable = False
        self._position = pos
        self._spl_db = spl_db

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def spl_db(self) -> float:
        return self._spl_db

    def check_inside(self, room: Room) -> bool:
        """
        Warn (but do not fail) when the source sits outside the room.

        Returns:
            True if the source lies within the room boundaries
        """
        inside = room.contains(self._position)
        if not inside:
            logger.warning(
                "Source position %s is outside room bounds %s; wavefronts may render oddly",
                self._position.tolist(), room.dimensions.tolist())
        return inside

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Source):
            return NotImplemented
        return (bool(np.array_equal(self._position, other._position))
                and self._spl_db == other._spl_db)

    def __hash__(self) -> int:
        return hash((tuple(self._position.tolist()), self._spl_db))

    def __repr__(self) -> str:
        x, y, z = self._position
        return f"Source(position=[{x:.3f}, {y:.3f}, {z:.3f}], spl_db={self._spl_db:.1f})"
