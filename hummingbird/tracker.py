"""
Nearest flower tracking.

Linear scan over the area's flowers; the area holds a handful of
flowers so no spatial index is needed.
"""

from typing import Iterable, Optional

import numpy as np

from .flower import Flower


def find_nearest_flower(reference_point: np.ndarray, flowers: Iterable[Flower]) -> Optional[Flower]:
    """
    Find the closest flower that still has nectar.

    Args:
        reference_point: Point to measure from (the beak tip) [x, y, z]
        flowers: Flowers in registry order

    Returns:
        Nearest flower with nectar, or None if every flower is empty

    Tie-breaking:
        Equal distances keep the first flower encountered
    """
    reference_point = np.asarray(reference_point, dtype=np.float64)
    nearest = None
    min_distance = float('inf')

    for flower in flowers:
        if not flower.has_nectar:
            continue

        distance = float(np.linalg.norm(flower.position - reference_point))
        if distance < min_distance:
            min_distance = distance
            nearest = flower

    return nearest


def refresh_if_stale(
    current: Optional[Flower],
    reference_point: np.ndarray,
    flowers: Iterable[Flower]
) -> Optional[Flower]:
    """
    Recompute the target only when the current one has been drained.

    An unset target stays unset; it is recomputed at episode start.
    """
    if current is not None and not current.has_nectar:
        return find_nearest_flower(reference_point, flowers)
    return current
