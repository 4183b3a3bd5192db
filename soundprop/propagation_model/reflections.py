"""
First-Order Reflection Module

This module mirrors a direct wavefront across each wall of a shoebox room
using the Image Source Method (ISM). Each wall contributes one image source;
the image sphere shares the direct wavefront's radius and SPL, which models
a perfectly reflecting wall with no path-length correction.

Image spheres are returned whole. Only the part beyond the wall corresponds
to the physical reflection; clipping is left to the renderer.
"""

from typing import List

import numpy as np

from ..room_geometry.room import Room
from .wavefront import ReflectedWavefront, Wavefront


def image_coordinate(plane: float, source_coord: float, center_coord: float) -> float:
    """
    Mirror one coordinate across a wall plane.

    Args:
        plane: Wall coordinate on the mirrored axis
        source_coord: Source coordinate on that axis
        center_coord: Direct wavefront center coordinate on that axis

    Returns:
        2 * (plane - source_coord) + center_coord
    """
    return 2.0 * (plane - source_coord) + center_coord


class ReflectionExpander:
    """
    Expands a direct wavefront into its six first-order image wavefronts.
    """

    def __init__(self, room: Room):
        """
        Args:
            room: Room whose walls the wavefronts reflect off
        """
        self.room = room

    def compute_reflections(self, direct: Wavefront) -> List[ReflectedWavefront]:
        """
        Compute the image wavefronts of ``direct`` for all six walls.

        The direct wavefront is centered on its source, so the source
        coordinate and the center coordinate coincide.

        Returns:
            Six reflected wavefronts ordered x_low, x_high, y_low, y_high,
            z_low, z_high
        """
        return compute_reflections(direct, self.room)


def compute_reflections(direct: Wavefront, room: Room) -> List[ReflectedWavefront]:
    """
    Mirror ``direct`` across every wall of ``room``.

    Walls are independent of each other, and the radius and SPL are copied
    unchanged from the direct wavefront.
    """
    source = direct.center
    reflections = []
    for wall, axis, plane in room.planes():
        center = np.array(direct.center, dtype=float)
        center[axis] = image_coordinate(plane, source[axis], direct.center[axis])
        reflections.append(ReflectedWavefront(
            center=center,
            radius=direct.radius,
            spl=direct.spl,
            wall=wall,
            axis=axis,
        ))
    return reflections
