"""
Tests for the bundled decision components.

Verifies:
- HeuristicPolicy moves along the controlled agent's own axes, including
  when the observation carries no target (all zeros)
- Held commands survive an episode reset
- SeekNectarPolicy steers along the observed beak-to-flower direction
"""

import numpy as np

from hummingbird.constants import ACTION_SIZE
from hummingbird.geometry import euler_rotation
from hummingbird.observations import encode_observation
from hummingbird.policy import HeuristicPolicy, RandomPolicy, SeekNectarPolicy
from hummingbird.rng import make_rng
from hummingbird.tests.scene_harness import make_agent, single_flower_area


def test_heuristic_uses_agent_heading_without_target():
    area, _ = single_flower_area()
    agent = make_agent(area, rotation=euler_rotation(0.0, 90.0), training_mode=False)
    obs = encode_observation(agent.rotation, agent.beak_tip, agent.beak_forward, None)
    assert not obs.any()

    policy = HeuristicPolicy(agent)
    policy.press(['forward'])
    action = policy.act(obs)

    # Yawed right by 90 degrees: forward is world +x
    assert np.allclose(action[0:3], [1.0, 0.0, 0.0], atol=1e-6)


def test_heuristic_follows_agent_rotation_changes():
    area, _ = single_flower_area()
    agent = make_agent(area, training_mode=False)
    policy = HeuristicPolicy(agent)
    policy.press(['right'])
    obs = np.zeros(10, dtype=np.float32)

    assert np.allclose(policy.act(obs)[0:3], [1.0, 0.0, 0.0], atol=1e-6)

    agent.rotation = euler_rotation(0.0, 180.0)
    assert np.allclose(policy.act(obs)[0:3], [-1.0, 0.0, 0.0], atol=1e-6)


def test_heuristic_commands_held_across_reset():
    area, _ = single_flower_area()
    agent = make_agent(area)
    policy = HeuristicPolicy(agent)
    policy.press({'up', 'turn_left'})

    policy.reset()
    action = policy.act(np.zeros(10, dtype=np.float32))

    assert np.allclose(action[0:3], [0.0, 1.0, 0.0], atol=1e-6)
    assert action[4] == -1.0

    policy.press([])
    assert not policy.act(np.zeros(10, dtype=np.float32)).any()


def test_seek_nectar_moves_along_observed_direction():
    area, _ = single_flower_area()
    agent = make_agent(area)
    flower = area.flowers[0]
    obs = encode_observation(agent.rotation, agent.beak_tip, agent.beak_forward, flower)

    action = SeekNectarPolicy().act(obs)

    assert np.allclose(action[0:3], obs[4:7])
    assert action[3] == 0.0 and action[4] == 0.0


def test_random_policy_range_and_seed():
    first = RandomPolicy(make_rng(4, "policy"))
    second = RandomPolicy(make_rng(4, "policy"))

    for _ in range(20):
        a = first.act(np.zeros(10, dtype=np.float32))
        b = second.act(np.zeros(10, dtype=np.float32))
        assert a.shape == (ACTION_SIZE,)
        assert np.all(np.abs(a) <= 1.0)
        assert np.array_equal(a, b)
