"""Visualization module for wavefront frames."""

from .renderer import WavefrontRenderer, sphere_surface

__all__ = ["WavefrontRenderer", "sphere_surface"]
