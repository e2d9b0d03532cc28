"""
Tests for the flower area registry.

Verifies:
- Depth-first discovery of plants and flowers (including nested grouping nodes)
- Nested plants follow their parent plant when it is re-oriented
- Nectar handle lookup, and the lookup error for unknown handles
- reset_flowers(): plant orientation ranges, flowers follow their plant,
  colliders move with them, every flower refilled
"""

import numpy as np
import pytest

from hummingbird.area import FlowerArea
from hummingbird.collision import SphereCollisionWorld
from hummingbird.data_types import SceneNode
from hummingbird.errors import FlowerLookupError, SceneError
from hummingbird.geometry import euler_angles, euler_rotation
from hummingbird.rng import make_rng
from hummingbird.tests.scene_harness import (
    build_area,
    flower_node,
    make_scene,
    plant_node,
)


def build_meadow_scene():
    return make_scene([
        plant_node("plant-a", [2.0, 0.0, 0.0], [
            flower_node("a0", [0.2, 0.5, 0.0], [1.0, 1.0, 0.0]),
            flower_node("a1", [-0.2, 0.8, 0.0], [-1.0, 1.0, 0.0]),
        ]),
        SceneNode(node_id="grouping", children=[
            SceneNode(node_id="deeper", position=[0.0, 0.0, 1.0], children=[
                flower_node("g0", [0.0, 0.3, 0.0]),
            ]),
            plant_node("plant-b", [-2.0, 0.0, 0.0], [
                flower_node("b0", [0.0, 0.6, 0.2], [0.0, 1.0, 1.0]),
            ]),
        ]),
        flower_node("lone", [0.0, 0.4, 0.0], node_position=[0.0, 0.0, -3.0]),
    ])


def test_build_discovers_flowers_in_depth_first_order():
    area, _ = build_area(build_meadow_scene())

    assert [f.flower_id for f in area.flowers] == ["a0", "a1", "g0", "b0", "lone"]
    assert [p.plant_id for p in area.plants] == ["plant-a", "plant-b"]


def test_build_resolves_world_positions():
    area, _ = build_area(build_meadow_scene())
    by_id = {f.flower_id: f for f in area.flowers}

    assert np.allclose(by_id["a0"].position, [2.2, 0.5, 0.0])
    assert np.allclose(by_id["g0"].position, [0.0, 0.3, 1.0])
    assert np.allclose(by_id["b0"].position, [-2.0, 0.6, 0.2])
    assert np.allclose(by_id["lone"].position, [0.0, 0.4, -3.0])


def test_plants_own_only_their_flowers():
    area, _ = build_area(build_meadow_scene())
    plant_a, plant_b = area.plants

    assert [f.flower_id for f in plant_a.flowers] == ["a0", "a1"]
    assert [f.flower_id for f in plant_b.flowers] == ["b0"]


def test_lookup_maps_every_nectar_handle():
    area, _ = build_area(build_meadow_scene())

    for flower in area.flowers:
        assert area.get_flower_from_nectar(flower.nectar_handle) is flower
    assert len(area.nectar_handles) == len(area.flowers)


def test_lookup_unknown_handle_raises():
    area, _ = build_area(build_meadow_scene())

    with pytest.raises(FlowerLookupError):
        area.get_flower_from_nectar("not-a-nectar")

    # Petal colliders are not harvestable and are not registered
    with pytest.raises(KeyError):
        area.get_flower_from_nectar("a0-petal")


def test_handle_map_is_read_only():
    area, _ = build_area(build_meadow_scene())

    with pytest.raises(TypeError):
        area.nectar_handles["extra"] = area.flowers[0]


def test_duplicate_nectar_handle_is_scene_error():
    scene = make_scene([
        flower_node("dup", [0.0, 0.5, 0.0]),
    ])
    scene.root.children.append(flower_node("dup", [1.0, 0.5, 0.0]))

    with pytest.raises(SceneError):
        FlowerArea.build(scene)


def test_reset_orientation_within_ranges():
    area, _ = build_area(build_meadow_scene())
    rng = make_rng(1, "orientation")

    for _ in range(50):
        area.reset_flowers(rng)
        for plant in area.plants:
            pitch, yaw, roll = euler_angles(plant.rotation)
            assert -5.0 - 1e-6 <= pitch <= 5.0 + 1e-6
            assert -5.0 - 1e-6 <= roll <= 5.0 + 1e-6
            assert -180.0 - 1e-6 <= yaw <= 180.0 + 1e-6


def test_reset_moves_flowers_with_their_plant():
    area, _ = build_area(build_meadow_scene())
    plant_a = area.plants[0]
    a0 = plant_a.flowers[0]
    radius_before = np.linalg.norm(a0.position - plant_a.pivot)
    lone_before = area.flowers[-1].position.copy()

    area.reset_flowers(make_rng(7, "move"))

    # Rigid rotation about the pivot keeps distances and unit up vectors
    assert np.isclose(np.linalg.norm(a0.position - plant_a.pivot), radius_before)
    assert np.isclose(np.linalg.norm(a0.up_vector), np.sqrt(2.0))
    assert np.allclose(a0.position, plant_a.pivot + plant_a.rotation.apply(plant_a.local_offsets[0]))
    # Flowers outside any plant stay put
    assert np.allclose(area.flowers[-1].position, lone_before)


def test_reset_moves_colliders_with_flowers():
    area, world = build_area(build_meadow_scene())

    area.reset_flowers(make_rng(3, "colliders"))

    for flower in area.flowers:
        assert np.allclose(world.center_of(flower.nectar_handle), flower.position)
        assert flower.nectar_handle in world.overlap_query(flower.position, 0.001)


def test_reset_refills_every_flower_after_orienting():
    area, world = build_area(build_meadow_scene())
    for flower in area.flowers:
        flower.feed(1.0)
    assert area.total_nectar() == 0.0

    area.reset_flowers(make_rng(5, "refill"))

    assert all(f.has_nectar and f.nectar_amount == 1.0 for f in area.flowers)
    assert all(world.is_enabled(f.nectar_handle) for f in area.flowers)
    assert np.isclose(area.total_nectar(), len(area.flowers))


def test_reset_is_deterministic_for_a_seed():
    area_1, _ = build_area(build_meadow_scene())
    area_2, _ = build_area(build_meadow_scene())

    area_1.reset_flowers(make_rng(42, "det"))
    area_2.reset_flowers(make_rng(42, "det"))

    for f1, f2 in zip(area_1.flowers, area_2.flowers):
        assert np.allclose(f1.position, f2.position)
        assert np.allclose(f1.up_vector, f2.up_vector)


def test_flower_missing_from_collision_world_is_scene_error():
    scene = make_scene([flower_node("ghost", [0.0, 0.5, 0.0])])

    with pytest.raises(SceneError, match="ghost-nectar"):
        FlowerArea.build(scene, SphereCollisionWorld())


def build_nested_scene():
    return make_scene([
        plant_node("outer", [3.0, 0.0, 0.0], [
            plant_node("inner", [1.0, 0.0, 0.0], [
                flower_node("n0", [0.5, 0.5, 0.0]),
            ]),
            flower_node("o0", [0.0, 0.4, 0.0]),
        ]),
    ])


def test_nested_plant_follows_parent_rotation():
    area, world = build_area(build_nested_scene())
    outer, inner = area.plants
    n0 = inner.flowers[0]

    assert inner.parent is outer
    assert outer.children == [inner]
    assert np.allclose(n0.position, [4.5, 0.5, 0.0])

    # Yaw right by 90 degrees: local +x becomes world -z
    outer.orient(euler_rotation(0.0, 90.0), world)

    assert np.allclose(inner.pivot, [3.0, 0.0, -1.0])
    assert np.allclose(n0.position, [3.0, 0.5, -1.5])
    assert np.allclose(world.center_of(n0.nectar_handle), n0.position)

    # The inner plant's own rotation stacks on top of the parent's
    inner.orient(euler_rotation(0.0, 90.0), world)

    assert np.allclose(inner.pivot, [3.0, 0.0, -1.0])
    assert np.allclose(n0.position, [2.5, 0.5, -1.0])
    assert np.allclose(world.center_of(n0.nectar_handle), n0.position)


def test_reset_keeps_nested_plants_rigid():
    area, world = build_area(build_nested_scene())
    outer, inner = area.plants
    n0 = inner.flowers[0]
    o0 = outer.flowers[0]
    radius_before = np.linalg.norm(n0.position - outer.pivot)

    area.reset_flowers(make_rng(11, "nested"))

    assert [f.flower_id for f in outer.flowers] == ["o0"]
    assert np.isclose(np.linalg.norm(n0.position - outer.pivot), radius_before)
    assert np.allclose(inner.pivot, outer.pivot + outer.rotation.apply(inner.local_pivot))
    assert np.allclose(n0.position, inner.pivot + inner.world_rotation.apply(inner.local_offsets[0]))
    assert np.allclose(o0.position, outer.pivot + outer.rotation.apply(outer.local_offsets[0]))
    for flower in area.flowers:
        assert np.allclose(world.center_of(flower.nectar_handle), flower.position)
