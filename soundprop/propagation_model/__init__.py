"""Propagation model module for wavefront simulation."""

from .classifier import SPL_BUCKETS, ColorBucket, classify
from .clock import SimulationClock
from .propagation import PropagationModel
from .reflections import ReflectionExpander, compute_reflections
from .simulator import Frame, FrameElement, WavefrontSimulator
from .wavefront import ReflectedWavefront, Wavefront

__all__ = [
    "ColorBucket",
    "Frame",
    "FrameElement",
    "PropagationModel",
    "ReflectedWavefront",
    "ReflectionExpander",
    "SPL_BUCKETS",
    "SimulationClock",
    "Wavefront",
    "WavefrontSimulator",
    "classify",
    "compute_reflections",
]
