"""
Exceptions raised by the wavefront simulator.

Validation errors also derive from ValueError so callers that already
guard bad input with ``except ValueError`` keep working.
"""


class SoundPropError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(SoundPropError, ValueError):
    """Invalid simulation configuration value."""


class InvalidRoomDimension(ConfigurationError):
    """Room length, width or height is missing, non-finite or not positive."""


class SourceCountMismatch(ConfigurationError):
    """Explicit source list and SPL list have different lengths."""

    def __init__(self, num_sources: int, num_levels: int):
        self.num_sources = num_sources
        self.num_levels = num_levels
        super().__init__(
            f"Number of source points ({num_sources}) does not match "
            f"number of SPL values ({num_levels})")
