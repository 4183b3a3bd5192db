"""
Sound Level Utilities

Helpers for inverse-square attenuation and for converting SPL in dB to
sound pressure.
"""

from typing import Union

import numpy as np

# Reference sound pressure in Pascal (0 dB SPL)
P_REF = 20e-6

ArrayLike = Union[float, np.ndarray]


def inverse_square_spl(
    source_spl_db: ArrayLike,
    distance: ArrayLike,
    reference_distance: float = 1.0
) -> ArrayLike:
    """
    Attenuate a reference SPL to ``distance`` using the inverse-square law.

    Args:
        source_spl_db: SPL in dB measured at ``reference_distance``
        distance: Propagation distance in meters (> 0)
        reference_distance: Distance the reference SPL is defined at

    Returns:
        SPL in dB at ``distance``
    """
    if reference_distance <= 0:
        raise ValueError("reference_distance must be positive")
    if np.any(np.asarray(distance) <= 0):
        raise ValueError("distance must be positive")
    return source_spl_db - 20 * np.log10(distance / reference_distance)


def spl_to_pressure(spl_db: ArrayLike, p_ref: float = P_REF) -> ArrayLike:
    """
    Convert SPL in dB to RMS sound pressure in Pascal.
    """
    return p_ref * db_to_linear(spl_db)


def db_to_linear(db: ArrayLike) -> ArrayLike:
    """
    Convert decibels to linear (amplitude) scale.

    Args:
        db: Value in decibels

    Returns:
        Linear scale value
    """
    out = 10 ** (np.asarray(db, dtype=float) / 20)
    if out.ndim == 0:
        return float(out)
    return out
