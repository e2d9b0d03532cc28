"""
Deterministic RNG utilities for the foraging simulation.

Uses SHA256 hashing to derive stable seeds from hierarchical components
(run_seed, area_id, episode index, component_name). All randomness uses
numpy.random.Generator(PCG64) for reproducible cross-session results.
"""

import hashlib
import numpy as np
from typing import Any, Tuple


def make_seed(*components: Any) -> int:
    """
    Generate deterministic 64-bit seed from hierarchical components.

    Uses SHA256 to hash components into stable seed value.

    Args:
        *components: Seed components (run_seed, area_id, episode, etc.)

    Returns:
        64-bit integer seed for numpy RNG

    Example:
        episode_seed = make_seed(run_seed, area_id, episode)
        placement_seed = make_seed(episode_seed, "placement")
    """
    hash_input = ":".join(str(c) for c in components)

    hash_bytes = hashlib.sha256(hash_input.encode('utf-8')).digest()
    seed = int.from_bytes(hash_bytes[:8], byteorder='big')

    return seed


def make_rng(*components: Any) -> np.random.Generator:
    """Build a PCG64 generator seeded from hierarchical components"""
    return np.random.Generator(np.random.PCG64(make_seed(*components)))


def uniform(rng: np.random.Generator, value_range: Tuple[float, float]) -> float:
    """Draw one float uniformly from a (low, high) range"""
    low, high = value_range
    return float(rng.uniform(low, high))


def random_plant_euler(
    rng: np.random.Generator,
    tilt_range: Tuple[float, float],
    yaw_range: Tuple[float, float]
) -> Tuple[float, float, float]:
    """
    Draw a plant orientation as Euler angles (x, y, z) in degrees.

    Small tilt on x and z, full yaw on y. Draw order is x, y, z so a fixed
    seed always yields the same plant layout.
    """
    x = uniform(rng, tilt_range)
    y = uniform(rng, yaw_range)
    z = uniform(rng, tilt_range)
    return x, y, z
