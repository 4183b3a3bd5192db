"""
Wavefront value types.

Wavefronts are ephemeral: they are recomputed for every source at every
time step and never cached.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Wavefront:
    """Spherical wavefront: center point, radius (m) and SPL (dB) at that radius."""

    center: np.ndarray
    radius: float
    spl: float

    def __post_init__(self):
        center = np.array(self.center, dtype=float)
        if center.shape != (3,):
            raise ValueError("center must be a 3-element iterable [x,y,z].")
        center.flags.writeable = False
        object.__setattr__(self, "center", center)


@dataclass(frozen=True, eq=False)
class ReflectedWavefront(Wavefront):
    """Wavefront mirrored across one wall by the image-source construction."""

    wall: str = ""
    axis: int = 0
