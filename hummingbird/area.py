"""
Flower area: the registry of flowers and flower plants in one area.

Built once from a scene tree. Maps nectar collider handles to flowers
and resets the whole area (plant orientation, then nectar) between
episodes.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .collision import CollisionEngine, flower_collider_centers
from .constants import PLANT_TILT_RANGE_DEG, PLANT_YAW_RANGE_DEG, TAG_FLOWER_PLANT
from .data_types import FlowerDefinition, Scene, SceneNode
from .errors import FlowerLookupError, SceneError
from .flower import Flower
from .geometry import as_vector, euler_rotation
from .rng import random_plant_euler


@dataclass(eq=False)
class FlowerPlant:
    """
    Rigid parent of a cluster of flowers.

    Flower offsets and up vectors are stored in the plant's local frame
    so the whole cluster follows the plant when it is re-oriented.
    Plants may nest: a child plant's pivot and frame follow its parent,
    and its own rotation is applied on top of the parent's.
    """
    plant_id: str
    pivot: np.ndarray
    rotation: Rotation = field(default_factory=Rotation.identity)
    parent: Optional['FlowerPlant'] = field(default=None, repr=False)
    local_pivot: Optional[np.ndarray] = None
    children: List['FlowerPlant'] = field(default_factory=list)
    flowers: List[Flower] = field(default_factory=list)
    local_offsets: List[np.ndarray] = field(default_factory=list)
    local_ups: List[np.ndarray] = field(default_factory=list)
    petal_offsets: List[float] = field(default_factory=list)

    @property
    def world_rotation(self) -> Rotation:
        if self.parent is None:
            return self.rotation
        return self.parent.world_rotation * self.rotation

    def add_child(self, plant: 'FlowerPlant'):
        plant.parent = self
        plant.local_pivot = self.world_rotation.inv().apply(plant.pivot - self.pivot)
        self.children.append(plant)

    def attach(self, flower: Flower, petal_offset: float):
        inverse = self.world_rotation.inv()
        self.flowers.append(flower)
        self.local_offsets.append(inverse.apply(flower.position - self.pivot))
        self.local_ups.append(inverse.apply(flower.up_vector))
        self.petal_offsets.append(petal_offset)

    def orient(self, rotation: Rotation, colliders: Optional[CollisionEngine] = None):
        """Set the plant rotation and carry child flower poses (and colliders) along"""
        self.rotation = rotation
        self._place(colliders)

    def _place(self, colliders: Optional[CollisionEngine]):
        if self.parent is not None:
            self.pivot = self.parent.pivot + self.parent.world_rotation.apply(self.local_pivot)

        world = self.world_rotation
        for flower, offset, up, petal_offset in zip(
                self.flowers, self.local_offsets, self.local_ups, self.petal_offsets):
            flower.position = self.pivot + world.apply(offset)
            flower.up_vector = world.apply(up)
            if colliders is not None:
                nectar_center, petal_center = flower_collider_centers(
                    flower.position, flower.up_vector, petal_offset)
                colliders.move_collider(flower.nectar_handle, nectar_center)
                colliders.move_collider(flower.petal_handle, petal_center)

        for child in self.children:
            child._place(colliders)


class FlowerArea:
    """
    Registry of flowers in one area.

    Attributes:
        area_id: Scene area id
        origin: World position of the area center (free spawns are relative to it)
        flowers: Flowers in discovery order
        plants: Flower plants (clusters re-oriented on reset)
    """

    def __init__(
        self,
        area_id: str,
        origin: np.ndarray,
        flowers: List[Flower],
        plants: List[FlowerPlant],
        colliders: Optional[CollisionEngine] = None
    ):
        self.area_id = area_id
        self.origin = as_vector(origin)
        self.flowers: Tuple[Flower, ...] = tuple(flowers)
        self.plants: Tuple[FlowerPlant, ...] = tuple(plants)
        self.colliders = colliders

        nectar_flowers = {}
        for flower in self.flowers:
            if flower.nectar_handle in nectar_flowers:
                raise SceneError(f"Nectar collider {flower.nectar_handle} registered twice")
            nectar_flowers[flower.nectar_handle] = flower
        self._nectar_flowers: Mapping[str, Flower] = MappingProxyType(nectar_flowers)

    @classmethod
    def build(cls, scene: Scene, colliders: Optional[CollisionEngine] = None) -> 'FlowerArea':
        """
        Discover flowers and flower plants under the scene root.

        Depth-first: a node tagged flower_plant becomes a plant (nested
        under the enclosing plant, if any) and is recursed into; a node
        carrying a flower definition becomes a flower owned by the
        innermost plant; anything else is recursed into.

        Args:
            scene: Loaded scene
            colliders: Collision collaborator the flowers toggle on feed/reset

        Returns:
            FlowerArea with an immutable nectar handle lookup
        """
        origin = as_vector(scene.origin)
        flowers: List[Flower] = []
        plants: List[FlowerPlant] = []

        def find_child_flowers(node: SceneNode, offset: np.ndarray, plant: Optional[FlowerPlant]):
            for child in node.children:
                child_offset = offset + as_vector(child.position)
                if child.tag == TAG_FLOWER_PLANT:
                    child_plant = FlowerPlant(plant_id=child.node_id, pivot=child_offset)
                    if plant is not None:
                        plant.add_child(child_plant)
                    plants.append(child_plant)
                    find_child_flowers(child, child_offset, child_plant)
                elif child.flower is not None:
                    flower, petal_offset = _make_flower(child, child.flower, child_offset, colliders)
                    flowers.append(flower)
                    if plant is not None:
                        plant.attach(flower, petal_offset)
                else:
                    find_child_flowers(child, child_offset, plant)

        find_child_flowers(scene.root, origin + as_vector(scene.root.position), None)

        area = cls(scene.area_id, origin, flowers, plants, colliders)
        print(f"[OK] Flower area {scene.area_id}: {len(area.flowers)} flowers, "
              f"{len(area.plants)} plants")
        return area

    def get_flower_from_nectar(self, handle: str) -> Flower:
        """
        Get the flower that a nectar collider belongs to.

        Raises:
            FlowerLookupError: handle is not a registered nectar collider
        """
        try:
            return self._nectar_flowers[handle]
        except KeyError:
            raise FlowerLookupError(handle) from None

    def is_nectar(self, handle: str) -> bool:
        return handle in self._nectar_flowers

    @property
    def nectar_handles(self) -> Mapping[str, Flower]:
        return self._nectar_flowers

    def reset_flowers(self, rng: np.random.Generator):
        """
        Re-orient every plant, then refill every flower.

        Plants get a small random tilt on x and z and a full random yaw.
        """
        for plant in self.plants:
            x_rot, y_rot, z_rot = random_plant_euler(rng, PLANT_TILT_RANGE_DEG, PLANT_YAW_RANGE_DEG)
            plant.orient(euler_rotation(x_rot, y_rot, z_rot), self.colliders)

        for flower in self.flowers:
            flower.reset()

    def total_nectar(self) -> float:
        return float(sum(flower.nectar_amount for flower in self.flowers))

    def to_dict(self) -> dict:
        return {
            'area_id': self.area_id,
            'origin': self.origin.tolist(),
            'flowers': [flower.to_dict() for flower in self.flowers],
            'plants': [plant.plant_id for plant in self.plants],
        }


def _make_flower(node: SceneNode, definition: FlowerDefinition, offset: np.ndarray,
                 colliders: Optional[CollisionEngine]) -> Tuple[Flower, float]:
    if colliders is not None:
        for handle in (definition.nectar_handle, definition.petal_handle):
            if handle not in colliders:
                raise SceneError(f"Flower {node.node_id}: collider {handle} missing from the collision world")

    position = offset + as_vector(definition.position)
    flower = Flower(
        flower_id=node.node_id,
        nectar_handle=definition.nectar_handle,
        petal_handle=definition.petal_handle,
        position=position,
        up_vector=as_vector(definition.up),
        colliders=colliders
    )
    return flower, definition.petal_offset
