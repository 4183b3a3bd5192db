"""
Room Wavefront Simulator — computes and animates the spherical wavefronts
of point sources in a shoebox room, with first-order wall reflections and
SPL-based coloring.
"""
__version__ = "1.0.0"

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import SimulationConfig  # type: ignore
    from .driver import AnimationDriver  # type: ignore
    from .exceptions import (InvalidRoomDimension,  # type: ignore
                             SourceCountMismatch)
    from .propagation_model.simulator import \
        WavefrontSimulator  # type: ignore
    from .room_geometry.room import Room, Source  # type: ignore
    from .visualization.renderer import WavefrontRenderer  # type: ignore
else:
    _lazy_map = {
        "Room": "room_geometry.room",
        "Source": "room_geometry.room",
        "WavefrontSimulator": "propagation_model.simulator",
        "SimulationConfig": "config",
        "WavefrontRenderer": "visualization.renderer",
        "AnimationDriver": "driver",
        "InvalidRoomDimension": "exceptions",
        "SourceCountMismatch": "exceptions",
    }

    def __getattr__(name: str):
        if name in _lazy_map:
            mod_path = f"{__name__}.{_lazy_map[name]}"
            try:
                module = importlib.import_module(mod_path)
                obj = getattr(module, name)
                globals()[name] = obj
                return obj
            except Exception as exc:
                raise ImportError(
                    f"Failed to import '{name}' from '{mod_path}' while importing package '{__name__}': {exc}"
                ) from exc
        raise AttributeError(f"module {__name__} has no attribute {name}")

    def __dir__():
        return sorted(set(globals()) | set(_lazy_map.keys()))

__all__ = [
    "Room",
    "Source",
    "WavefrontSimulator",
    "SimulationConfig",
    "WavefrontRenderer",
    "AnimationDriver",
    "InvalidRoomDimension",
    "SourceCountMismatch",
]
