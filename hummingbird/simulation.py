"""
Foraging simulation kernel.

Owns one flower area, its collision world and one hummingbird agent,
and drives the episode lifecycle and the fixed-timestep tick loop.

Tick ordering:
    1. apply the action to the agent
    2. integrate the body and collect contact events
    3. feed / reward against those events
    4. refresh the nearest flower if it went empty
    5. encode the observation for the next decision
"""

import time
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from .agent import HummingbirdAgent, apply_action
from .area import FlowerArea
from .collision import RigidBody, SphereCollisionWorld, build_collision_world
from .constants import TICK_TIME_WINDOW
from .data_types import EpisodeSummary, RunConfig, Scene, StepResult
from .errors import HummingbirdError
from .feeding import process_contacts
from .loader import load_all_data
from .observations import encode_observation
from .placement import find_safe_pose
from .policy import Policy
from .rng import make_rng
from .tracker import find_nearest_flower, refresh_if_stale


class ForagingSimulation:
    """
    Episode controller and tick loop for one agent in one flower area.

    Either pass a data_root (scene + config are loaded from YAML) or
    pass scene and config directly.
    """

    def __init__(
        self,
        data_root: Optional[Path] = None,
        schema_dir: Optional[Path] = None,
        scene: Optional[Scene] = None,
        config: Optional[RunConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize simulation.

        Args:
            data_root: Path to data directory (used when scene/config not given)
            schema_dir: Optional path to JSON schemas
            scene: Pre-built scene (overrides data_root scene)
            config: Pre-built run config (overrides data_root config)
            seed: Run seed (overrides config.training.seed)
        """
        if scene is None or config is None:
            if data_root is None:
                raise ValueError("data_root is required when scene or config is not given")
            print("Loading data pack...")
            data = load_all_data(data_root, schema_dir)
            scene = scene if scene is not None else data['scene']
            config = config if config is not None else data['config']

        self.scene: Scene = scene
        self.config: RunConfig = config
        self.training_mode: bool = config.training.training_mode
        self.dt: float = config.simulation.tick_delta_seconds

        # Outside training episodes never time out
        self.max_steps: int = config.training.max_steps if self.training_mode else 0

        if seed is None:
            seed = config.training.seed if config.training.seed is not None else 0
        self.seed: int = seed

        self.colliders: SphereCollisionWorld = build_collision_world(scene)
        self.area: FlowerArea = FlowerArea.build(scene, self.colliders)

        agent_config = config.agent
        self.agent = HummingbirdAgent(
            area=self.area,
            body=RigidBody(
                position=self.area.origin,
                velocity=np.zeros(3, dtype=np.float64),
                mass=agent_config.mass_kg,
                linear_drag=agent_config.linear_drag
            ),
            config=agent_config,
            training_mode=self.training_mode
        )

        # Episode state
        self.episode: int = 0
        self.step_count: int = 0
        self.tick_count: int = 0
        self.episode_active: bool = False
        self.history: List[EpisodeSummary] = []

        # Performance metrics
        self._tick_times: List[float] = []
        self._tick_time_sum: float = 0.0
        self._tick_time_window: int = TICK_TIME_WINDOW

        print(f"[OK] Simulation initialized: {len(self.area.flowers)} flowers, "
              f"dt={self.dt}s, seed={self.seed}, training={self.training_mode}")

    def _episode_rng(self, component: str) -> np.random.Generator:
        return make_rng(self.seed, self.area.area_id, self.episode, component)

    def begin_episode(self) -> np.ndarray:
        """
        Reset the area (training mode) and place the agent safely.

        Raises:
            PlacementExhaustedError: no safe spawn pose within the attempt budget

        Returns:
            First observation of the episode
        """
        self.episode += 1

        if self.training_mode:
            self.area.reset_flowers(self._episode_rng("flowers"))

        # Gameplay always starts in front of a flower
        anchored = True
        if self.training_mode:
            anchored = bool(self._episode_rng("anchor").random() > 0.5)

        pose = find_safe_pose(
            self.area,
            self.colliders,
            self._episode_rng("placement"),
            anchored=anchored,
            max_attempts=self.config.simulation.max_spawn_attempts
        )

        self.agent.begin_episode(pose)
        self.colliders.clear_contacts(self.agent.agent_id)
        self.agent.nearest_flower = find_nearest_flower(self.agent.beak_tip, self.area.flowers)

        self.step_count = 0
        self.episode_active = True
        return self.observe()

    def observe(self) -> np.ndarray:
        agent = self.agent
        return encode_observation(agent.rotation, agent.beak_tip, agent.beak_forward, agent.nearest_flower)

    def tick(self, action) -> StepResult:
        """
        Advance the simulation by one fixed step.

        Args:
            action: 5-element action [move_x, move_y, move_z, pitch, yaw]

        Returns:
            StepResult with next observation, reward for this tick and done flag
        """
        if not self.episode_active:
            raise HummingbirdError("tick() called outside an episode; call begin_episode() first")

        tick_start = time.perf_counter()
        agent = self.agent

        apply_action(agent, action, self.dt)

        agent.body.integrate(self.dt)
        events = self.colliders.detect_contacts(agent.collision_spheres(), agent.agent_id)
        self.colliders.resolve_penetration(agent.body, agent.config.collider_radius)

        telemetry = process_contacts(agent, events, self.colliders)

        agent.nearest_flower = refresh_if_stale(agent.nearest_flower, agent.beak_tip, self.area.flowers)

        observation = self.observe()
        reward = agent.consume_reward()

        self.step_count += 1
        self.tick_count += 1
        done = self.max_steps > 0 and self.step_count >= self.max_steps

        self._record_tick_time(time.perf_counter() - tick_start)

        info = telemetry.to_dict()
        info['nectar_obtained'] = float(agent.nectar_obtained)
        info['contacts'] = len(events)
        return StepResult(observation=observation, reward=float(reward), done=done, info=info)

    def end_episode(self) -> EpisodeSummary:
        """Close the current episode and record its totals"""
        summary = EpisodeSummary(
            episode=self.episode,
            steps=self.step_count,
            nectar_obtained=float(self.agent.nectar_obtained),
            cumulative_reward=float(self.agent.cumulative_reward)
        )
        self.history.append(summary)
        self.episode_active = False

        interval = self.config.simulation.summary_interval
        if interval > 0 and summary.episode % interval == 0:
            self.print_episode_summary(summary)

        return summary

    def run_episode(self, policy: Policy, max_steps: Optional[int] = None) -> EpisodeSummary:
        """
        Drive a policy through one full episode.

        Args:
            policy: Decision component
            max_steps: Step cap; required when the simulation has no max_steps
        """
        limit = max_steps if max_steps is not None else self.max_steps
        if limit <= 0:
            raise ValueError("run_episode needs a step limit outside training mode")

        policy.reset()
        observation = self.begin_episode()
        for _ in range(limit):
            result = self.tick(policy.act(observation))
            observation = result.observation
            if result.done:
                break

        return self.end_episode()

    def _record_tick_time(self, elapsed: float):
        self._tick_times.append(elapsed)
        self._tick_time_sum += elapsed
        if len(self._tick_times) > self._tick_time_window:
            self._tick_time_sum -= self._tick_times.pop(0)

    def get_tick_stats(self) -> Dict:
        """
        Get performance statistics.

        Returns:
            Dict with tick_count, avg_tick_ms, max_tick_ms, episode
        """
        if not self._tick_times:
            return {'tick_count': self.tick_count, 'avg_tick_ms': 0.0, 'max_tick_ms': 0.0,
                    'episode': self.episode}

        return {
            'tick_count': self.tick_count,
            'avg_tick_ms': (self._tick_time_sum / len(self._tick_times)) * 1000.0,
            'max_tick_ms': max(self._tick_times) * 1000.0,
            'episode': self.episode,
        }

    def get_snapshot(self) -> Dict:
        """Serializable view of the current world state"""
        agent = self.agent
        return {
            'episode': self.episode,
            'step': self.step_count,
            'agent': {
                'position': agent.position.tolist(),
                'rotation': agent.rotation.as_quat().tolist(),
                'velocity': agent.body.velocity.tolist(),
                'nectar_obtained': float(agent.nectar_obtained),
                'nearest_flower': agent.nearest_flower.flower_id if agent.nearest_flower else None,
            },
            'area': self.area.to_dict(),
        }

    def print_episode_summary(self, summary: EpisodeSummary):
        stats = self.get_tick_stats()
        print(f"Episode {summary.episode}: steps={summary.steps}, "
              f"nectar={summary.nectar_obtained:.2f}, reward={summary.cumulative_reward:.3f}, "
              f"avg_tick={stats['avg_tick_ms']:.3f}ms")
