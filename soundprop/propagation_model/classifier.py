"""
SPL Color Classification

Maps a sound pressure level onto one of six ordered color buckets.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ColorBucket:
    """
    Half-open SPL interval [lower_db, upper_db) with its display color.

    ``lower_db`` is None for the lowest bucket and ``upper_db`` is None for
    the highest one.
    """

    name: str
    lower_db: Optional[float]
    upper_db: Optional[float]
    rgb: Tuple[float, float, float]

    def contains(self, spl: float) -> bool:
        if self.lower_db is not None and spl < self.lower_db:
            return False
        if self.upper_db is not None and spl >= self.upper_db:
            return False
        return True


# Ordered loudest first; boundaries belong to the louder bucket.
SPL_BUCKETS: Tuple[ColorBucket, ...] = (
    ColorBucket("red", 100.0, None, (1.0, 0.0, 0.0)),
    ColorBucket("orange", 90.0, 100.0, (1.0, 0.5, 0.0)),
    ColorBucket("yellow", 80.0, 90.0, (0.9, 0.9, 0.1)),
    ColorBucket("green", 70.0, 80.0, (0.0, 1.0, 0.0)),
    ColorBucket("light_blue", 60.0, 70.0, (0.0, 1.0, 1.0)),
    ColorBucket("dark_blue", None, 60.0, (0.0, 0.0, 1.0)),
)


def classify(spl: float) -> ColorBucket:
    """
    Return the color bucket an SPL value falls into.

    Every real value, including +/-inf, lands in exactly one bucket.

    Args:
        spl: Sound pressure level in dB

    Returns:
        The matching ColorBucket
    """
    spl = float(spl)
    if math.isnan(spl):
        raise ValueError("Cannot classify NaN SPL")
    for bucket in SPL_BUCKETS:
        if bucket.lower_db is None or spl >= bucket.lower_db:
            return bucket
    # unreachable: the last bucket has no lower bound
    return SPL_BUCKETS[-1]
