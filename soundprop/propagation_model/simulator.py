"""
Wavefront Simulator Module

This module ties the propagation model, the reflection expander and the
SPL classifier together. For each time step it emits one frame: the direct
wavefront of every source followed by its six first-order reflections, each
tagged with the color of the direct wavefront's SPL bucket.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import SourceCountMismatch
from ..room_geometry.room import Room, Source
from .classifier import classify
from .clock import DEFAULT_TMAX, SimulationClock
from .propagation import (MIN_RADIUS, REFERENCE_DISTANCE, SPEED_OF_SOUND,
                          PropagationModel)
from .reflections import ReflectionExpander

logger = logging.getLogger(__name__)

DIRECT = "direct"


@dataclass(frozen=True, eq=False)
class FrameElement:
    """One sphere to draw: geometry, color and where it came from."""

    center: np.ndarray
    radius: float
    rgb: Tuple[float, float, float]
    spl: float
    source_index: int
    kind: str = DIRECT


@dataclass(frozen=True, eq=False)
class Frame:
    """All spheres of one time step, in draw order."""

    time: float
    step: int
    elements: List[FrameElement] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.elements)


class WavefrontSimulator:
    """
    Computes the wavefront geometry of every source in a room over time.

    Frames are independent of each other; the simulator holds no state that
    changes between steps.
    """

    def __init__(
        self,
        room: Room,
        sources: Sequence[Source],
        speed_of_sound: float = SPEED_OF_SOUND,
        tmax: float = DEFAULT_TMAX,
        reference_distance: float = REFERENCE_DISTANCE,
        min_radius: float = MIN_RADIUS,
        driving_frequency: Optional[float] = None
    ):
        """
        Initialize the simulator.

        Args:
            room: Enclosure with perfectly reflecting walls
            sources: Point sources, emitted in this order every frame
            speed_of_sound: Propagation speed in m/s
            tmax: Last simulated time in seconds
            reference_distance: Distance at which source SPLs are defined
            min_radius: Radius below which wavefronts are skipped
            driving_frequency: Inert; kept for a future frequency-dependent model
        """
        if not isinstance(room, Room):
            raise TypeError("room must be a Room instance")
        self.room = room
        self.sources: List[Source] = list(sources)
        if not self.sources:
            raise ValueError("At least one source is required")
        for src in self.sources:
            src.check_inside(room)

        self.model = PropagationModel(
            speed_of_sound=speed_of_sound,
            reference_distance=reference_distance,
            min_radius=min_radius,
            driving_frequency=driving_frequency,
        )
        self.reflections = ReflectionExpander(room)
        self.clock = SimulationClock.for_room(room, tmax)

        if driving_frequency is not None:
            logger.info(
                "Driving frequency %s Hz recorded; it does not affect propagation", driving_frequency)

    def compute_frame(self, t: float, step: int = 0) -> Frame:
        """
        Compute every sphere to draw at time ``t``.

        Sources whose wavefront is still degenerate (t=0) contribute nothing.

        Returns:
            Frame with up to 7 * num_sources elements
        """
        elements: List[FrameElement] = []
        for index, source in enumerate(self.sources):
            direct = self.model.compute_direct_wavefront(source, t)
            if direct is None:
                continue
            rgb = classify(direct.spl).rgb
            elements.append(FrameElement(
                center=direct.center,
                radius=direct.radius,
                rgb=rgb,
                spl=direct.spl,
                source_index=index,
            ))
            for image in self.reflections.compute_reflections(direct):
                elements.append(FrameElement(
                    center=image.center,
                    radius=image.radius,
                    rgb=rgb,
                    spl=image.spl,
                    source_index=index,
                    kind=image.wall,
                ))
        logger.debug("t=%.6f s: %d wavefronts", t, len(elements))
        return Frame(time=t, step=step, elements=elements)

    def compute_step(self, step: int) -> Frame:
        """Compute the frame for integer step ``step`` of the clock."""
        return self.compute_frame(self.clock.time_at(step), step)

    def iter_frames(self) -> Iterator[Frame]:
        """Yield frames for 0, dt, 2dt, ... tmax."""
        for step, t in enumerate(self.clock):
            yield self.compute_frame(t, step)

    @property
    def num_steps(self) -> int:
        return self.clock.num_steps

    def get_simulation_info(self) -> Dict[str, Any]:
        """
        Return simulation metadata dict.
        """
        info = {
            "room": self.room.get_room_info(),
            "sources": [
                {"source_id": i, "position_xyz": s.position.tolist(), "spl_db": s.spl_db}
                for i, s in enumerate(self.sources)
            ],
            "dx_m": self.clock.dx,
            "dt_s": self.clock.dt,
            "tmax_s": self.clock.tmax,
            "num_steps": self.clock.num_steps,
        }
        info.update(self.model.get_model_info())
        return info

    @classmethod
    def from_lists(
        cls,
        room: Room,
        source_points: Sequence[Sequence[float]],
        spl_db: Sequence[float],
        **kwargs
    ) -> 'WavefrontSimulator':
        """
        Build a simulator from parallel lists of positions and SPLs.

        The lists must have equal length.
        """
        points = [list(p) for p in source_points]
        levels = list(spl_db)
        if len(points) != len(levels):
            raise SourceCountMismatch(len(points), len(levels))
        sources = [Source(p, level) for p, level in zip(points, levels)]
        return cls(room, sources, **kwargs)

    @classmethod
    def from_config(cls, config) -> 'WavefrontSimulator':
        """
        Create a WavefrontSimulator from a resolved SimulationConfig.
        """
        return cls(
            room=config.build_room(),
            sources=config.build_sources(),
            speed_of_sound=config.speed_of_sound,
            tmax=config.tmax,
            reference_distance=config.reference_distance,
            min_radius=config.min_radius,
            driving_frequency=config.driving_frequency,
        )
