"""
Simulation Configuration

Explicit default resolution and validation for a simulation run. Missing
source points default to a single source at the room center, missing SPLs
default to 110 dB, and every value is checked before the core runs.
"""

import logging
import math
import numbers
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from .exceptions import (ConfigurationError, InvalidRoomDimension,
                         SourceCountMismatch)
from .propagation_model.clock import DEFAULT_TMAX
from .propagation_model.propagation import (MIN_RADIUS, REFERENCE_DISTANCE,
                                            SPEED_OF_SOUND)
from .room_geometry.room import Room, Source

logger = logging.getLogger(__name__)

DEFAULT_SPL_DB = 110.0


@dataclass
class RenderOptions:
    frame_delay: float = 0.1  # s between frames on screen
    face_alpha: float = 0.8
    sphere_resolution: int = 100
    elevation: float = 30.0
    azimuth: float = -37.5
    figsize: List[float] = field(default_factory=lambda: [8.0, 6.0])


@dataclass
class SimulationConfig:
    """
    All inputs of a simulation run.

    ``driving_frequency`` is accepted and carried through but currently has
    no effect on the computed wavefronts.
    """

    room_dimensions: List[float]
    source_points: Optional[List[List[float]]] = None
    spl_db: Optional[List[float]] = None
    driving_frequency: Optional[float] = None
    speed_of_sound: float = SPEED_OF_SOUND
    tmax: float = DEFAULT_TMAX
    reference_distance: float = REFERENCE_DISTANCE
    min_radius: float = MIN_RADIUS
    render: RenderOptions = field(default_factory=RenderOptions)

    def resolve(self) -> 'SimulationConfig':
        """
        Validate the configuration and fill in defaults.

        Returns:
            A new SimulationConfig with source points and SPLs populated
        """
        room = self.build_room()

        points = _normalize_points(self.source_points)
        levels = _normalize_levels(self.spl_db)

        if not points:
            points = [room.center.tolist()]
            logger.info("No source points given; using room center %s", points[0])
        if not levels:
            levels = [DEFAULT_SPL_DB] * len(points)
            logger.info("No SPL given; using %.1f dB for %d source(s)", DEFAULT_SPL_DB, len(points))
        elif isinstance(self.spl_db, numbers.Real):
            # scalar SPL applies to every source
            levels = levels * len(points)

        if len(points) != len(levels):
            raise SourceCountMismatch(len(points), len(levels))

        _require_positive("speed_of_sound", self.speed_of_sound)
        _require_positive("reference_distance", self.reference_distance)
        if not _is_finite_number(self.tmax) or float(self.tmax) < 0:
            raise ConfigurationError(f"tmax must be a non-negative number, got {self.tmax!r}")
        if not _is_finite_number(self.min_radius) or float(self.min_radius) < 0:
            raise ConfigurationError(f"min_radius must be a non-negative number, got {self.min_radius!r}")
        if self.driving_frequency is not None:
            _require_positive("driving_frequency", self.driving_frequency)

        render = self.render
        if not _is_finite_number(render.face_alpha) or not 0.0 <= float(render.face_alpha) <= 1.0:
            raise ConfigurationError(f"face_alpha must be within [0, 1], got {render.face_alpha!r}")
        if not _is_finite_number(render.frame_delay) or float(render.frame_delay) < 0:
            raise ConfigurationError(
                f"frame_delay must be a non-negative number, got {render.frame_delay!r}")
        if (not _is_finite_number(render.sphere_resolution)
                or isinstance(render.sphere_resolution, bool)
                or int(float(render.sphere_resolution)) < 3):
            raise ConfigurationError(
                f"sphere_resolution must be an integer of at least 3, got {render.sphere_resolution!r}")
        for name in ("elevation", "azimuth"):
            if not _is_finite_number(getattr(render, name)):
                raise ConfigurationError(f"{name} must be a number, got {getattr(render, name)!r}")
        render = replace(
            render,
            face_alpha=float(render.face_alpha),
            frame_delay=float(render.frame_delay),
            sphere_resolution=int(float(render.sphere_resolution)),
            elevation=float(render.elevation),
            azimuth=float(render.azimuth),
        )

        return replace(
            self,
            room_dimensions=room.dimensions.tolist(),
            source_points=points,
            spl_db=levels,
            driving_frequency=None if self.driving_frequency is None else float(self.driving_frequency),
            speed_of_sound=float(self.speed_of_sound),
            tmax=float(self.tmax),
            reference_distance=float(self.reference_distance),
            min_radius=float(self.min_radius),
            render=render,
        )

    def build_room(self) -> Room:
        return Room.from_config({'dimensions': self.room_dimensions})

    def build_sources(self) -> List[Source]:
        """Build Source objects; call on a resolved configuration."""
        if self.source_points is None or self.spl_db is None:
            raise ConfigurationError("Configuration must be resolved before building sources")
        if len(self.source_points) != len(self.spl_db):
            raise SourceCountMismatch(len(self.source_points), len(self.spl_db))
        return [Source(p, level) for p, level in zip(self.source_points, self.spl_db)]

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'SimulationConfig':
        """
        Create a SimulationConfig from a nested configuration dictionary.

        Expected sections: ``room`` (dimensions), ``sources`` (points, spl_db,
        driving_frequency), ``simulation`` (speed_of_sound, tmax, ...) and
        ``render``. Unknown keys are ignored with a warning.
        """
        if not isinstance(config, dict):
            raise ConfigurationError("configuration must be a mapping")
        if 'room' not in config or not isinstance(config['room'], dict):
            raise ConfigurationError("Missing required config section: 'room'")
        room_cfg = config['room']
        if 'dimensions' not in room_cfg:
            raise InvalidRoomDimension(
                "room config must contain a 'dimensions' key [length, width, height]")

        sources_cfg = config.get('sources') or {}
        sim_cfg = config.get('simulation') or {}
        render_cfg = config.get('render') or {}

        for section, known in (
            ('sources', {'points', 'spl_db', 'driving_frequency'}),
            ('simulation', {'speed_of_sound', 'tmax', 'reference_distance', 'min_radius'}),
            ('render', set(RenderOptions.__dataclass_fields__)),
        ):
            extra = set(config.get(section) or {}) - known
            if extra:
                logger.warning("Ignoring unknown keys in '%s' section: %s", section, sorted(extra))

        kwargs = {k: sim_cfg[k] for k in
                  ('speed_of_sound', 'tmax', 'reference_distance', 'min_radius') if k in sim_cfg}
        render_kwargs = {k: v for k, v in render_cfg.items() if k in RenderOptions.__dataclass_fields__}

        return cls(
            room_dimensions=room_cfg['dimensions'],
            source_points=sources_cfg.get('points'),
            spl_db=sources_cfg.get('spl_db'),
            driving_frequency=sources_cfg.get('driving_frequency'),
            render=RenderOptions(**render_kwargs),
            **kwargs,
        )

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> 'SimulationConfig':
        """Load a configuration from a YAML file."""
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open('r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        return cls.from_dict(config)


def _is_finite_number(value: Any) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _require_positive(name: str, value: Any) -> None:
    if not _is_finite_number(value) or float(value) <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")


def _normalize_points(points: Optional[Sequence]) -> List[List[float]]:
    if points is None:
        return []
    try:
        pts = list(points)
    except TypeError as exc:
        raise ConfigurationError(f"source_points must be a list of [x, y, z], got {points!r}") from exc
    # a single flat [x, y, z] is accepted as one source
    if len(pts) == 3 and all(isinstance(c, numbers.Real) for c in pts):
        pts = [pts]
    normalized = []
    for i, p in enumerate(pts):
        try:
            p = list(p)
        except TypeError as exc:
            raise ConfigurationError(f"Source point {i} must be an [x, y, z] triple, got {p!r}") from exc
        if len(p) != 3:
            raise ConfigurationError(f"Source point {i} must have 3 coordinates, got {p!r}")
        try:
            normalized.append([float(c) for c in p])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Source point {i} must be numeric, got {p!r}") from exc
    return normalized


def _normalize_levels(levels: Union[None, float, Sequence[float]]) -> List[float]:
    if levels is None:
        return []
    if isinstance(levels, (str, bytes)):
        raise ConfigurationError(
            f"spl_db must be a number or a list of numbers, got the string {levels!r}")
    if isinstance(levels, numbers.Real):
        levels = [levels]
    try:
        return [float(v) for v in levels]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"spl_db must be numeric, got {levels!r}") from exc
