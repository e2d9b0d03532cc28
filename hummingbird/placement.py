"""
Safe random placement of the agent.

Finds a pose that does not overlap any collider, either hovering in
front of a random flower (anchored) or floating freely above the area.
Retries are bounded; running out of attempts is an error surfaced to
the episode controller.
"""

import numpy as np

from .area import FlowerArea
from .collision import CollisionEngine
from .constants import (
    ANCHORED_DISTANCE_RANGE,
    FREE_HEIGHT_RANGE,
    FREE_PITCH_RANGE_DEG,
    FREE_RADIUS_RANGE,
    FREE_YAW_RANGE_DEG,
    MAX_SPAWN_ATTEMPTS,
    SAFE_OVERLAP_RADIUS,
    WORLD_FORWARD,
    WORLD_UP,
)
from .data_types import Pose
from .errors import PlacementExhaustedError
from .geometry import euler_rotation, look_rotation, unit
from .rng import uniform


def find_safe_pose(
    area: FlowerArea,
    colliders: CollisionEngine,
    rng: np.random.Generator,
    anchored: bool,
    max_attempts: int = MAX_SPAWN_ATTEMPTS
) -> Pose:
    """
    Find a collision-free agent pose.

    Args:
        area: Flower area to spawn in
        colliders: Collision collaborator used for the overlap check
        rng: Random generator (fixed seed gives a fixed pose sequence)
        anchored: Spawn in front of a random flower, beak pointing at it
        max_attempts: Attempt budget

    Returns:
        First candidate pose with no collider within SAFE_OVERLAP_RADIUS

    Raises:
        PlacementExhaustedError: every attempt overlapped something
    """
    if anchored and not area.flowers:
        raise PlacementExhaustedError(0, anchored)

    attempts_remaining = max_attempts
    while attempts_remaining > 0:
        attempts_remaining -= 1

        if anchored:
            candidate = _anchored_candidate(area, rng)
        else:
            candidate = _free_candidate(area, rng)

        if not colliders.overlap_query(candidate.position, SAFE_OVERLAP_RADIUS):
            attempts_used = max_attempts - attempts_remaining
            if attempts_used > 1:
                print(f"[WARN] Safe spawn found after {attempts_used} attempts")
            return candidate

    raise PlacementExhaustedError(max_attempts, anchored)


def _anchored_candidate(area: FlowerArea, rng: np.random.Generator) -> Pose:
    flower = area.flowers[int(rng.integers(0, len(area.flowers)))]

    distance = uniform(rng, ANCHORED_DISTANCE_RANGE)
    position = flower.position + unit(flower.up_vector) * distance

    to_flower = flower.position - position
    return Pose(position=position, rotation=look_rotation(to_flower, WORLD_UP))


def _free_candidate(area: FlowerArea, rng: np.random.Generator) -> Pose:
    height = uniform(rng, FREE_HEIGHT_RANGE)
    radius = uniform(rng, FREE_RADIUS_RANGE)
    direction = euler_rotation(0.0, uniform(rng, FREE_YAW_RANGE_DEG), 0.0)

    position = (area.origin
                + np.array(WORLD_UP, dtype=np.float64) * height
                + direction.apply(np.array(WORLD_FORWARD, dtype=np.float64)) * radius)

    pitch = uniform(rng, FREE_PITCH_RANGE_DEG)
    yaw = uniform(rng, FREE_YAW_RANGE_DEG)
    return Pose(position=position, rotation=euler_rotation(pitch, yaw, 0.0))
