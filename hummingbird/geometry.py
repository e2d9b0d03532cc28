"""
Geometry helper utilities for poses, orientation and contact checks.

This module provides small, focused functions with no simulation
state. All helpers operate on float64 numpy arrays and scipy
Rotation objects.

Frame convention: y is up, +z is forward, +x is right. Euler angles
follow the (pitch=x, yaw=y, roll=z) convention of the agent controls,
composed yaw first, then pitch, then roll.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .constants import WORLD_FORWARD, WORLD_UP


def as_vector(value) -> np.ndarray:
    """Coerce a 3-sequence to a float64 array (copy)"""
    return np.array(value, dtype=np.float64).reshape(3)


def distance_3d(pos_a: np.ndarray, pos_b: np.ndarray) -> float:
    """
    Calculate Euclidean distance between two 3D points.

    Args:
        pos_a: Position [x, y, z]
        pos_b: Position [x, y, z]

    Returns:
        Distance in meters
    """
    diff = np.asarray(pos_a, dtype=np.float64) - np.asarray(pos_b, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def normalize(vec: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Normalize vector to unit length.

    A zero-length vector normalizes to the zero vector.

    Args:
        vec: Vector to normalize [x, y, z]

    Returns:
        Tuple of (normalized vector, original length)
    """
    vec = np.asarray(vec, dtype=np.float64)
    length = float(np.sqrt(np.dot(vec, vec)))

    if length < 1e-9:
        return np.zeros_like(vec), 0.0

    return vec / length, length


def unit(vec: np.ndarray) -> np.ndarray:
    """Unit vector of vec (zero vector stays zero)"""
    return normalize(vec)[0]


def clamp01(value: float) -> float:
    return 0.0 if value < 0.0 else (1.0 if value > 1.0 else float(value))


def move_towards(current: float, target: float, max_delta: float) -> float:
    """Move current toward target by at most max_delta without overshooting"""
    if abs(target - current) <= max_delta:
        return float(target)
    return float(current + np.sign(target - current) * max_delta)


def wrap_angle(degrees: float) -> float:
    """Wrap an angle to (-180, 180]"""
    wrapped = (degrees + 180.0) % 360.0 - 180.0
    if wrapped == -180.0:
        return 180.0
    return wrapped


def euler_rotation(pitch: float, yaw: float, roll: float = 0.0) -> Rotation:
    """
    Build a rotation from Euler angles in degrees.

    Composed as yaw (y), then pitch (x), then roll (z), all intrinsic.
    """
    return Rotation.from_euler('YXZ', [yaw, pitch, roll], degrees=True)


def euler_angles(rotation: Rotation) -> Tuple[float, float, float]:
    """
    Decompose a rotation built by euler_rotation().

    Returns:
        (pitch, yaw, roll) in degrees; pitch lies in [-90, 90]
    """
    yaw, pitch, roll = rotation.as_euler('YXZ', degrees=True)
    return float(pitch), float(yaw), float(roll)


def forward_of(rotation: Rotation) -> np.ndarray:
    """World-space forward (+z) axis of a rotation"""
    return rotation.apply(np.array(WORLD_FORWARD, dtype=np.float64))


def up_of(rotation: Rotation) -> np.ndarray:
    """World-space up (+y) axis of a rotation"""
    return rotation.apply(np.array(WORLD_UP, dtype=np.float64))


def look_rotation(forward: np.ndarray, up: np.ndarray = WORLD_UP) -> Rotation:
    """
    Rotation whose +z axis points along forward, with +y as close to up as possible.

    Degenerate inputs (zero forward) give the identity. When forward is
    parallel to up, world forward is used as the secondary axis instead.
    """
    fwd, length = normalize(forward)
    if length == 0.0:
        return Rotation.identity()

    right, right_len = normalize(np.cross(as_vector(up), fwd))
    if right_len == 0.0:
        right = unit(np.cross(as_vector(WORLD_FORWARD), fwd))
        if not right.any():
            right = unit(np.cross(np.array([1.0, 0.0, 0.0]), fwd))

    true_up = np.cross(fwd, right)
    matrix = np.column_stack([right, true_up, fwd])
    return Rotation.from_matrix(matrix)


def closest_point_on_sphere(point: np.ndarray, center: np.ndarray, radius: float) -> np.ndarray:
    """
    Return the closest point on (or in) a solid sphere to point.

    Points inside the sphere are their own closest point.
    """
    point = np.asarray(point, dtype=np.float64)
    center = np.asarray(center, dtype=np.float64)
    direction, dist = normalize(point - center)
    if dist <= radius:
        return point.copy()
    return center + direction * radius
