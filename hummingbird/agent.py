"""
Hummingbird agent runtime representation and motion.

The agent is a plain record; actions are applied by apply_action().
Action vector layout (each nominally in [-1, 1]):

    0: move x (+1 right, -1 left)
    1: move y (+1 up, -1 down)
    2: move z (+1 forward, -1 backward)
    3: pitch (+1 nose down, -1 nose up)
    4: yaw   (+1 turn right, -1 turn left)
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np
from scipy.spatial.transform import Rotation

from .area import FlowerArea
from .collision import DEFAULT_BODY_ID, RigidBody
from .constants import ACTION_SIZE, BEAK_CONTACT_RADIUS, SMOOTHING_RATE
from .data_types import AgentConfig, Pose
from .errors import FreezeError
from .flower import Flower
from .geometry import (
    as_vector,
    clamp01,
    euler_angles,
    euler_rotation,
    forward_of,
    move_towards,
    unit,
    up_of,
    wrap_angle,
)


@dataclass(eq=False)
class HummingbirdAgent:
    """
    Runtime agent in a flower area.

    Attributes:
        area: Flower area the agent forages in
        body: Rigid body carrying position and velocity
        agent_id: Key for this agent's contact history in a shared collision world
        rotation: Orientation
        config: Motion parameters
        training_mode: Rewards are only issued in training mode
        nearest_flower: Current target (non-owning), None when all flowers are empty
        nectar_obtained: Nectar collected this episode
        frozen: Actions are ignored while frozen
        reward: Reward accumulated since the last consume_reward()
        cumulative_reward: Reward accumulated this episode
    """
    area: FlowerArea
    body: RigidBody
    agent_id: str = DEFAULT_BODY_ID
    rotation: Rotation = field(default_factory=Rotation.identity)
    config: AgentConfig = field(default_factory=AgentConfig)
    training_mode: bool = True
    nearest_flower: Optional[Flower] = None
    nectar_obtained: float = 0.0
    frozen: bool = False
    reward: float = 0.0
    cumulative_reward: float = 0.0
    smooth_pitch_change: float = 0.0
    smooth_yaw_change: float = 0.0

    @property
    def position(self) -> np.ndarray:
        return self.body.position

    @property
    def forward(self) -> np.ndarray:
        return forward_of(self.rotation)

    @property
    def beak_tip(self) -> np.ndarray:
        return self.body.position + self.rotation.apply(as_vector(self.config.beak_tip_offset))

    @property
    def beak_forward(self) -> np.ndarray:
        return forward_of(self.rotation)

    def collision_spheres(self):
        """Agent collision volume: body sphere plus a small sphere at the beak tip"""
        return [
            (self.body.position, self.config.collider_radius),
            (self.beak_tip, BEAK_CONTACT_RADIUS),
        ]

    def add_reward(self, value: float):
        self.reward += value
        self.cumulative_reward += value

    def consume_reward(self) -> float:
        """Return and clear the reward accumulated since the last call"""
        value = self.reward
        self.reward = 0.0
        return value

    def begin_episode(self, pose: Pose):
        """Teleport to pose and clear per-episode state"""
        self.nectar_obtained = 0.0
        self.reward = 0.0
        self.cumulative_reward = 0.0
        self.smooth_pitch_change = 0.0
        self.smooth_yaw_change = 0.0
        self.body.sleep()
        self.body.position = as_vector(pose.position)
        self.rotation = pose.rotation

    def freeze(self):
        """Stop reacting to actions (gameplay only)"""
        if self.training_mode:
            raise FreezeError("Freeze/Unfreeze not supported in training mode")
        self.frozen = True
        self.body.sleep()

    def unfreeze(self):
        if self.training_mode:
            raise FreezeError("Freeze/Unfreeze not supported in training mode")
        self.frozen = False


def apply_action(agent: HummingbirdAgent, action: Iterable[float], dt: float):
    """
    Apply one action: push the body and turn the agent.

    Pitch and yaw commands are smoothed toward the requested value at
    SMOOTHING_RATE per second. Pitch is clamped to the configured max,
    roll is always zero. Frozen agents ignore actions.
    """
    if agent.frozen:
        return

    action = np.clip(np.asarray(action, dtype=np.float64).reshape(ACTION_SIZE), -1.0, 1.0)
    config = agent.config

    agent.body.apply_force(action[0:3] * config.move_force)

    pitch_change = float(action[3])
    yaw_change = float(action[4])

    agent.smooth_pitch_change = move_towards(agent.smooth_pitch_change, pitch_change, SMOOTHING_RATE * dt)
    agent.smooth_yaw_change = move_towards(agent.smooth_yaw_change, yaw_change, SMOOTHING_RATE * dt)

    pitch, yaw, _ = euler_angles(agent.rotation)

    pitch = wrap_angle(pitch + agent.smooth_pitch_change * dt * config.pitch_speed)
    pitch = float(np.clip(pitch, -config.max_pitch_angle, config.max_pitch_angle))

    yaw = wrap_angle(yaw + agent.smooth_yaw_change * dt * config.yaw_speed)

    agent.rotation = euler_rotation(pitch, yaw, 0.0)


# Direct-input commands understood by heuristic_action()
HEURISTIC_COMMANDS = frozenset({
    'forward', 'back', 'left', 'right', 'up', 'down',
    'pitch_up', 'pitch_down', 'turn_left', 'turn_right',
})


def heuristic_action(commands: Iterable[str], rotation: Rotation) -> np.ndarray:
    """
    Map held direct-input commands to an action vector.

    Movement commands are expressed in the agent's own frame and
    combined into one normalized world-space move. Opposing commands
    resolve to the first of the pair (forward over back, left over right).
    """
    held = set(commands)
    unknown = held - HEURISTIC_COMMANDS
    if unknown:
        raise ValueError(f"Unknown heuristic commands: {sorted(unknown)}")

    forward = forward_of(rotation)
    right = rotation.apply(np.array([1.0, 0.0, 0.0]))
    up = up_of(rotation)

    move = np.zeros(3, dtype=np.float64)
    if 'forward' in held:
        move += forward
    elif 'back' in held:
        move -= forward

    if 'left' in held:
        move -= right
    elif 'right' in held:
        move += right

    if 'up' in held:
        move += up
    elif 'down' in held:
        move -= up

    yaw = 0.0
    if 'turn_right' in held:
        yaw = 1.0
    elif 'turn_left' in held:
        yaw = -1.0

    pitch = 0.0
    if 'pitch_up' in held:
        pitch = -1.0
    elif 'pitch_down' in held:
        pitch = 1.0

    combined = unit(move)
    return np.array([combined[0], combined[1], combined[2], pitch, yaw], dtype=np.float32)


def facing_alignment(agent: HummingbirdAgent, flower: Flower) -> float:
    """clamp01(dot(agent forward, -flower up))"""
    return clamp01(float(np.dot(unit(agent.forward), -unit(flower.up_vector))))
