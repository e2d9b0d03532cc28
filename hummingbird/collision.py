"""
Collision collaborator contract and a reference sphere-collider world.

The foraging core talks to physics only through CollisionEngine:
overlap queries, closest points, enable/disable and per-tick contact
events. SphereCollisionWorld implements that contract over sphere
colliders indexed with scipy.cKDTree, and RigidBody stands in for
rigid-body integration of the agent.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .constants import TAG_NECTAR, TAG_PETAL
from .data_types import ContactEvent, ContactKind, Scene, SceneNode
from .errors import SceneError
from .geometry import as_vector, closest_point_on_sphere, distance_3d, normalize, unit


CKDTREE_LEAFSIZE = 16
DEFAULT_BODY_ID = "agent"


class CollisionEngine(Protocol):
    """Narrow physics interface consumed by the simulation core"""

    def overlap_query(self, point: np.ndarray, radius: float) -> Set[str]:
        ...

    def closest_point(self, handle: str, point: np.ndarray) -> np.ndarray:
        ...

    def set_enabled(self, handle: str, enabled: bool) -> None:
        ...

    def move_collider(self, handle: str, center: np.ndarray) -> None:
        ...

    def tag_of(self, handle: str) -> Optional[str]:
        ...

    def detect_contacts(self, spheres: Sequence[Tuple[np.ndarray, float]],
                        body_id: str = DEFAULT_BODY_ID) -> List[ContactEvent]:
        ...

    def __contains__(self, handle: str) -> bool:
        ...


@dataclass
class SphereCollider:
    """
    Sphere collider.

    An inverted sphere is an enclosure: everything outside the sphere is
    solid (the area boundary).
    """
    handle: str
    center: np.ndarray
    radius: float
    tag: Optional[str] = None
    is_trigger: bool = False
    inverted: bool = False
    enabled: bool = True

    def overlaps(self, point: np.ndarray, radius: float) -> bool:
        dist = distance_3d(point, self.center)
        if self.inverted:
            return dist + radius >= self.radius
        return dist <= radius + self.radius


class SphereCollisionWorld:
    """
    Sphere colliders with a lazily rebuilt cKDTree.

    The tree holds every regular collider center; enabled state is
    filtered at query time so toggling a collider never forces a rebuild.
    Moving or adding a collider marks the tree dirty. Enclosures are few
    and always checked directly.
    """

    def __init__(self):
        self._colliders: Dict[str, SphereCollider] = {}
        self._handles: List[str] = []       # tree row -> handle
        self._enclosures: List[str] = []
        self._tree: Optional[cKDTree] = None
        self._max_radius: float = 0.0
        self._dirty: bool = True

        # Per body: handles touching it on its previous detect_contacts() call
        self._touching: Dict[str, Set[str]] = {}

    def __contains__(self, handle: str) -> bool:
        return handle in self._colliders

    def __len__(self) -> int:
        return len(self._colliders)

    def add_sphere(self, handle: str, center, radius: float, tag: Optional[str] = None,
                   is_trigger: bool = False, inverted: bool = False):
        if handle in self._colliders:
            raise SceneError(f"Duplicate collider handle: {handle}")
        self._colliders[handle] = SphereCollider(
            handle=handle,
            center=as_vector(center),
            radius=float(radius),
            tag=tag,
            is_trigger=is_trigger,
            inverted=inverted
        )
        if inverted:
            self._enclosures.append(handle)
        else:
            self._handles.append(handle)
            self._dirty = True

    def _collider(self, handle: str) -> SphereCollider:
        try:
            return self._colliders[handle]
        except KeyError:
            raise SceneError(f"Unknown collider handle: {handle}") from None

    def move_collider(self, handle: str, center: np.ndarray) -> None:
        self._collider(handle).center = as_vector(center)
        self._dirty = True

    def set_enabled(self, handle: str, enabled: bool) -> None:
        self._collider(handle).enabled = bool(enabled)

    def is_enabled(self, handle: str) -> bool:
        return self._collider(handle).enabled

    def tag_of(self, handle: str) -> Optional[str]:
        return self._collider(handle).tag

    def center_of(self, handle: str) -> np.ndarray:
        return self._collider(handle).center.copy()

    def closest_point(self, handle: str, point: np.ndarray) -> np.ndarray:
        collider = self._collider(handle)
        if collider.inverted:
            direction, dist = normalize(as_vector(point) - collider.center)
            if dist >= collider.radius:
                return as_vector(point)
            return collider.center + direction * collider.radius
        return closest_point_on_sphere(point, collider.center, collider.radius)

    def _rebuild(self):
        if self._handles:
            centers = np.array([self._colliders[h].center for h in self._handles], dtype=np.float64)
            self._tree = cKDTree(centers, leafsize=CKDTREE_LEAFSIZE)
            self._max_radius = max(self._colliders[h].radius for h in self._handles)
        else:
            self._tree = None
            self._max_radius = 0.0
        self._dirty = False

    def overlap_query(self, point: np.ndarray, radius: float) -> Set[str]:
        """
        Handles of enabled colliders intersecting the query sphere.

        The tree is searched with radius + largest collider radius, then
        every candidate is checked exactly against its own radius.
        """
        if self._dirty:
            self._rebuild()

        point = as_vector(point)
        hits = set()

        if self._tree is not None:
            for row in self._tree.query_ball_point(point, radius + self._max_radius):
                collider = self._colliders[self._handles[row]]
                if collider.enabled and collider.overlaps(point, radius):
                    hits.add(collider.handle)

        for handle in self._enclosures:
            collider = self._colliders[handle]
            if collider.enabled and collider.overlaps(point, radius):
                hits.add(handle)

        return hits

    def detect_contacts(self, spheres: Sequence[Tuple[np.ndarray, float]],
                        body_id: str = DEFAULT_BODY_ID) -> List[ContactEvent]:
        """
        Contact events for one body volume (union of spheres) this tick.

        Colliders overlapping now but not on this body's previous call are
        ENTER, overlapping on both calls are STAY. History is kept per
        body_id so several agents can share one world. Events are sorted
        by handle.
        """
        touching = set()
        for center, radius in spheres:
            touching |= self.overlap_query(center, radius)

        previous = self._touching.get(body_id, set())
        events = []
        for handle in sorted(touching):
            kind = ContactKind.STAY if handle in previous else ContactKind.ENTER
            events.append(ContactEvent(handle=handle, kind=kind))
        self._touching[body_id] = touching
        return events

    def clear_contacts(self, body_id: Optional[str] = None):
        """Forget contact history for one body (teleported), or for every body"""
        if body_id is None:
            self._touching = {}
        else:
            self._touching.pop(body_id, None)

    def resolve_penetration(self, body: 'RigidBody', radius: float) -> None:
        """
        Push a body sphere out of every solid collider it penetrates.

        The velocity component pointing into the collider is removed.
        """
        for handle in sorted(self.overlap_query(body.position, radius)):
            collider = self._colliders[handle]
            if collider.is_trigger:
                continue

            normal, dist = normalize(body.position - collider.center)
            if dist == 0.0:
                continue

            if collider.inverted:
                if dist + radius <= collider.radius:
                    continue
                body.position = collider.center + normal * (collider.radius - radius)
                normal = -normal
            else:
                body.position = collider.center + normal * (collider.radius + radius)

            inward = float(np.dot(body.velocity, normal))
            if inward < 0.0:
                body.velocity = body.velocity - inward * normal


@dataclass
class RigidBody:
    """Point-mass body integrated with semi-implicit Euler and linear drag"""
    position: np.ndarray
    velocity: np.ndarray
    mass: float = 1.0
    linear_drag: float = 1.0
    force: Optional[np.ndarray] = None

    def __post_init__(self):
        self.position = as_vector(self.position)
        self.velocity = as_vector(self.velocity)
        if self.force is None:
            self.force = np.zeros(3, dtype=np.float64)

    def apply_force(self, vector: np.ndarray):
        self.force = self.force + as_vector(vector)

    def integrate(self, dt: float):
        self.velocity = self.velocity + (self.force / self.mass) * dt
        self.velocity = self.velocity * max(0.0, 1.0 - self.linear_drag * dt)
        self.position = self.position + self.velocity * dt
        self.force = np.zeros(3, dtype=np.float64)

    def sleep(self):
        self.velocity = np.zeros(3, dtype=np.float64)
        self.force = np.zeros(3, dtype=np.float64)


def flower_collider_centers(position, up, petal_offset: float):
    """World centers of a flower's (nectar, petal) colliders"""
    position = as_vector(position)
    return position, position - unit(up) * petal_offset


def build_collision_world(scene: Scene) -> SphereCollisionWorld:
    """
    Register colliders for every flower and static obstacle in a scene.

    Flower poses here are the scene's initial poses; FlowerArea moves
    the colliders whenever it re-orients a plant.
    """
    world = SphereCollisionWorld()
    origin = as_vector(scene.origin)

    def visit(node: SceneNode, parent_offset: np.ndarray):
        offset = parent_offset + as_vector(node.position)
        if node.flower is not None:
            flower = node.flower
            position = offset + as_vector(flower.position)
            nectar_center, petal_center = flower_collider_centers(position, flower.up, flower.petal_offset)
            world.add_sphere(flower.nectar_handle, nectar_center, flower.nectar_radius,
                             tag=TAG_NECTAR, is_trigger=True)
            world.add_sphere(flower.petal_handle, petal_center, flower.petal_radius,
                             tag=TAG_PETAL)
        for child in node.children:
            visit(child, offset)

    visit(scene.root, origin)

    for obstacle in scene.obstacles:
        world.add_sphere(obstacle.id, origin + as_vector(obstacle.center), obstacle.radius,
                         tag=obstacle.tag, inverted=obstacle.inverted)

    return world
