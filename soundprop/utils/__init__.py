"""Utility modules for sound level conversion and frame export."""

from importlib import import_module
from types import ModuleType
from typing import Any, Dict, List

__all__ = [
    "inverse_square_spl",
    "spl_to_pressure",
    "db_to_linear",
    "P_REF",
    "FrameExporter",
    "create_run_manifest",
]

# symbol name -> submodule (relative)
_lazy_mapping = {
    "inverse_square_spl": "levels",
    "spl_to_pressure": "levels",
    "db_to_linear": "levels",
    "P_REF": "levels",
    "FrameExporter": "frame_export",
    "create_run_manifest": "frame_export",
}

_module_cache: Dict[str, ModuleType] = {}


def _import_attr(name: str) -> Any:
    """Import a public attribute on first access and cache it in globals()."""
    if name not in _lazy_mapping:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    submodule = _lazy_mapping[name]
    mod = _module_cache.get(submodule)
    if mod is None:
        try:
            mod = import_module(f".{submodule}", package=__package__)
        except Exception as exc:
            raise ImportError(
                f"Failed to import submodule '{submodule}' for attribute '{name}': {exc}"
            ) from exc
        _module_cache[submodule] = mod
    try:
        attr = getattr(mod, name)
    except AttributeError as exc:
        raise AttributeError(
            f"module '{mod.__name__}' has no attribute '{name}'") from exc
    globals()[name] = attr
    return attr


def __getattr__(name: str) -> Any:
    """Module-level lazy import hook (PEP 562)."""
    return _import_attr(name)


def __dir__() -> List[str]:
    names = set(globals().keys())
    names.update(__all__)
    return sorted(names)
