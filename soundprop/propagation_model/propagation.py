"""
Direct Wavefront Propagation Module

This module computes the direct spherical wavefront of a point source at a
given time: the sphere expands at the speed of sound and its SPL falls off
with the inverse-square law relative to the source's 1 m reference level.
"""

import logging
from typing import Any, Dict, Optional

from ..room_geometry.room import Source
from ..utils.levels import inverse_square_spl
from .wavefront import Wavefront

logger = logging.getLogger(__name__)

SPEED_OF_SOUND = 343.0  # m/s, air at ~20 degC
REFERENCE_DISTANCE = 1.0  # m
MIN_RADIUS = 1e-6  # m, wavefronts smaller than this are not emitted


class PropagationModel:
    """
    Free-field propagation of a spherical wavefront from a point source.

    The model is stateless: every call is a pure function of (source, t).
    """

    def __init__(
        self,
        speed_of_sound: float = SPEED_OF_SOUND,
        reference_distance: float = REFERENCE_DISTANCE,
        min_radius: float = MIN_RADIUS,
        driving_frequency: Optional[float] = None
    ):
        """
        Initialize the propagation model.

        Args:
            speed_of_sound: Propagation speed in m/s
            reference_distance: Distance at which source SPLs are defined (m)
            min_radius: Radius below which no wavefront is emitted (m)
            driving_frequency: Source frequency in Hz. Accepted for interface
                stability only; it does not affect the computed wavefronts.
        """
        if speed_of_sound <= 0:
            raise ValueError("speed_of_sound must be positive")
        if reference_distance <= 0:
            raise ValueError("reference_distance must be positive")
        if min_radius < 0:
            raise ValueError("min_radius must be non-negative")
        self.speed_of_sound = float(speed_of_sound)
        self.reference_distance = float(reference_distance)
        self.min_radius = float(min_radius)
        self.driving_frequency = driving_frequency

    def radius_at(self, t: float) -> float:
        """Radius of the wavefront after ``t`` seconds."""
        if t < 0:
            raise ValueError(f"Simulation time must be non-negative, got {t}")
        return self.speed_of_sound * t

    def compute_direct_wavefront(self, source: Source, t: float) -> Optional[Wavefront]:
        """
        Compute the direct wavefront of ``source`` at time ``t``.

        At t=0 the sphere collapses to a point and log10(0) has no finite
        value, so wavefronts with radius below ``min_radius`` are skipped:
        the method returns None and nothing is drawn for that source.

        Args:
            source: Emitting point source
            t: Elapsed time in seconds (>= 0)

        Returns:
            Wavefront centered on the source, or None for a degenerate radius
        """
        radius = self.radius_at(t)
        if radius < self.min_radius or radius == 0.0:
            logger.debug("Skipping degenerate wavefront at t=%g (r=%g m)", t, radius)
            return None
        spl = float(inverse_square_spl(source.spl_db, radius, self.reference_distance))
        return Wavefront(center=source.position, radius=radius, spl=spl)

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "speed_of_sound_m_s": self.speed_of_sound,
            "reference_distance_m": self.reference_distance,
            "min_radius_m": self.min_radius,
            "driving_frequency_hz": self.driving_frequency,
        }
