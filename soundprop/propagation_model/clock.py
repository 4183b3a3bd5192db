"""
Simulation Clock

The time step is tied to the spatial resolution of the room, not to the
acoustic wavelength: dx = max_dimension / 100 and dt = dx / 100.
"""

import math
from typing import Iterator, Optional

from ..room_geometry.room import Room

DEFAULT_TMAX = 0.1  # s
GRID_DIVISIONS = 100
STEPS_PER_CELL = 100


class SimulationClock:
    """
    Integer-indexed time axis 0, dt, 2dt, ... up to and including tmax.

    Times are computed as ``k * dt`` rather than by repeated addition, so the
    last step does not drift.
    """

    def __init__(self, dt: float, tmax: float = DEFAULT_TMAX, dx: Optional[float] = None):
        if not dt > 0 or not math.isfinite(dt):
            raise ValueError(f"dt must be a positive finite number, got {dt}")
        if tmax < 0 or not math.isfinite(tmax):
            raise ValueError(f"tmax must be a non-negative finite number, got {tmax}")
        self.dt = float(dt)
        self.tmax = float(tmax)
        self.dx = dx
        # tolerance keeps tmax when it lands on a step boundary up to rounding
        self.num_steps = int(math.floor(self.tmax / self.dt + 1e-9)) + 1

    @classmethod
    def for_room(cls, room: Room, tmax: float = DEFAULT_TMAX) -> 'SimulationClock':
        """Build a clock whose step derives from the room's grid spacing."""
        dx = room.max_dimension / GRID_DIVISIONS
        return cls(dx / STEPS_PER_CELL, tmax, dx=dx)

    def time_at(self, step: int) -> float:
        if step < 0 or step >= self.num_steps:
            raise IndexError(f"Step {step} out of range [0, {self.num_steps - 1}]")
        return step * self.dt

    def __len__(self) -> int:
        return self.num_steps

    def __iter__(self) -> Iterator[float]:
        for step in range(self.num_steps):
            yield step * self.dt

    def __repr__(self) -> str:
        return f"SimulationClock(dt={self.dt:g}, tmax={self.tmax:g}, num_steps={self.num_steps})"
