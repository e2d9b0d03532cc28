"""
Observation encoding for the decision component.

Turns agent orientation and beak-to-flower geometry into a fixed
10-element float32 vector:

    [0:4]  agent rotation quaternion (x, y, z, w)
    [4:7]  unit vector from beak tip to nearest flower
    [7]    dot(to_flower, -flower_up): is the beak on the approach axis
    [8]    dot(beak_forward, -flower_up): is the beak pointing at the flower
    [9]    beak-to-flower distance / AREA_DIAMETER

All zeros means there is no flower with nectar left.
"""

from typing import Optional

import numpy as np
from scipy.spatial.transform import Rotation

from .constants import AREA_DIAMETER, OBSERVATION_SIZE
from .flower import Flower
from .geometry import normalize, unit


def encode_observation(
    rotation: Rotation,
    beak_tip: np.ndarray,
    beak_forward: np.ndarray,
    nearest_flower: Optional[Flower]
) -> np.ndarray:
    """
    Encode one observation.

    Args:
        rotation: Agent orientation
        beak_tip: World position of the beak tip
        beak_forward: World direction the beak points in
        nearest_flower: Current target, or None

    Returns:
        (10,) float32 observation
    """
    observation = np.zeros(OBSERVATION_SIZE, dtype=np.float32)
    if nearest_flower is None:
        return observation

    quat = unit(rotation.as_quat())
    to_flower, distance = normalize(nearest_flower.position - np.asarray(beak_tip, dtype=np.float64))
    approach_axis = -unit(nearest_flower.up_vector)

    observation[0:4] = quat
    observation[4:7] = to_flower
    observation[7] = np.dot(to_flower, approach_axis)
    observation[8] = np.dot(unit(beak_forward), approach_axis)
    observation[9] = distance / AREA_DIAMETER

    return observation
