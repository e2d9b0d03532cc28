"""
Tests for agent motion, freeze control and direct-input commands.
"""

import numpy as np
import pytest

from hummingbird.agent import apply_action, facing_alignment, heuristic_action
from hummingbird.data_types import Pose
from hummingbird.errors import FreezeError
from hummingbird.geometry import euler_angles, euler_rotation
from hummingbird.tests.scene_harness import make_agent, single_flower_area

DT = 0.02


def test_move_command_pushes_body():
    area, _ = single_flower_area()
    agent = make_agent(area)

    apply_action(agent, [1.0, 0.0, 0.0, 0.0, 0.0], DT)

    assert np.allclose(agent.body.force, [2.0, 0.0, 0.0])
    agent.body.integrate(DT)
    assert agent.body.velocity[0] > 0.0


def test_action_is_clipped():
    area, _ = single_flower_area()
    agent = make_agent(area)

    apply_action(agent, [5.0, -3.0, 0.0, 0.0, 0.0], DT)

    assert np.allclose(agent.body.force, [2.0, -2.0, 0.0])


def test_turn_commands_are_smoothed():
    area, _ = single_flower_area()
    agent = make_agent(area)

    apply_action(agent, [0.0, 0.0, 0.0, 0.0, 1.0], DT)

    # Smoothed yaw command moves 2 * dt toward 1 on the first tick
    assert np.isclose(agent.smooth_yaw_change, 0.04)
    _, yaw, _ = euler_angles(agent.rotation)
    assert np.isclose(yaw, 0.04 * DT * 100.0)

    for _ in range(40):
        apply_action(agent, [0.0, 0.0, 0.0, 0.0, 1.0], DT)
    assert agent.smooth_yaw_change == 1.0


def test_pitch_is_clamped_and_roll_stays_zero():
    area, _ = single_flower_area()
    agent = make_agent(area)

    for _ in range(400):
        apply_action(agent, [0.0, 0.0, 0.0, 1.0, 0.3], DT)

    pitch, _, roll = euler_angles(agent.rotation)
    assert np.isclose(pitch, 80.0)
    assert abs(roll) < 1e-6

    for _ in range(800):
        apply_action(agent, [0.0, 0.0, 0.0, -1.0, 0.0], DT)
    pitch, _, _ = euler_angles(agent.rotation)
    assert np.isclose(pitch, -80.0)


def test_frozen_agent_ignores_actions():
    area, _ = single_flower_area()
    agent = make_agent(area, training_mode=False)
    agent.freeze()

    apply_action(agent, [1.0, 1.0, 1.0, 1.0, 1.0], DT)

    assert np.allclose(agent.body.force, 0.0)
    assert np.allclose(agent.rotation.as_quat(), [0.0, 0.0, 0.0, 1.0])

    agent.unfreeze()
    apply_action(agent, [1.0, 0.0, 0.0, 0.0, 0.0], DT)
    assert np.allclose(agent.body.force, [2.0, 0.0, 0.0])


def test_freeze_not_allowed_in_training():
    area, _ = single_flower_area()
    agent = make_agent(area, training_mode=True)

    with pytest.raises(FreezeError):
        agent.freeze()
    with pytest.raises(FreezeError):
        agent.unfreeze()


def test_beak_tip_follows_rotation():
    area, _ = single_flower_area()
    agent = make_agent(area, position=[1.0, 1.0, 1.0], rotation=euler_rotation(0.0, 90.0))

    assert np.allclose(agent.beak_tip, [1.08, 1.0, 1.0])
    assert np.allclose(agent.beak_forward, [1.0, 0.0, 0.0])


def test_begin_episode_resets_state():
    area, _ = single_flower_area()
    agent = make_agent(area)
    agent.nectar_obtained = 0.4
    agent.add_reward(1.5)
    agent.body.velocity = np.array([1.0, 0.0, 0.0])

    agent.begin_episode(Pose(position=[0.0, 2.0, 0.0], rotation=euler_rotation(10.0, 20.0)))

    assert agent.nectar_obtained == 0.0
    assert agent.cumulative_reward == 0.0
    assert agent.consume_reward() == 0.0
    assert np.allclose(agent.body.velocity, 0.0)
    assert np.allclose(agent.position, [0.0, 2.0, 0.0])


def test_consume_reward_clears_pending():
    area, _ = single_flower_area()
    agent = make_agent(area)
    agent.add_reward(0.03)
    agent.add_reward(-0.5)

    assert np.isclose(agent.consume_reward(), -0.47)
    assert agent.consume_reward() == 0.0
    assert np.isclose(agent.cumulative_reward, -0.47)


def test_facing_alignment():
    area, _ = single_flower_area()
    flower = area.flowers[0]

    assert np.isclose(facing_alignment(make_agent(area), flower), 1.0)
    assert np.isclose(facing_alignment(make_agent(area, rotation=euler_rotation(0.0, 90.0)), flower), 0.0)
    # Facing away clamps to zero
    assert facing_alignment(make_agent(area, rotation=euler_rotation(0.0, 180.0)), flower) == 0.0


def test_heuristic_forward_and_turn():
    action = heuristic_action({'forward', 'turn_right'}, euler_rotation(0.0, 90.0))

    assert action.dtype == np.float32
    assert np.allclose(action[0:3], [1.0, 0.0, 0.0], atol=1e-6)
    assert action[3] == 0.0
    assert action[4] == 1.0


def test_heuristic_combined_move_is_normalized():
    action = heuristic_action({'forward', 'right', 'up', 'pitch_up'}, euler_rotation(0.0, 0.0))

    assert np.isclose(np.linalg.norm(action[0:3]), 1.0)
    assert np.allclose(action[0:3], np.ones(3) / np.sqrt(3.0), atol=1e-6)
    assert action[3] == -1.0


def test_heuristic_no_commands_hovers():
    action = heuristic_action(set(), euler_rotation(0.0, 0.0))

    assert not action.any()


def test_heuristic_unknown_command():
    with pytest.raises(ValueError):
        heuristic_action({'barrel_roll'}, euler_rotation(0.0, 0.0))
