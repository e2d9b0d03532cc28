"""
Data types mirroring YAML schema structures, plus the small records
exchanged between the simulation and its collaborators.

The scene and config dataclasses are populated by loader.py from YAML files.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from scipy.spatial.transform import Rotation

from .constants import (
    AGENT_COLLIDER_RADIUS,
    AGENT_LINEAR_DRAG,
    AGENT_MASS_KG,
    BEAK_TIP_OFFSET,
    DEFAULT_MAX_STEPS,
    EPISODE_SUMMARY_INTERVAL,
    FIXED_DELTA_SECONDS,
    MAX_PITCH_ANGLE,
    MAX_SPAWN_ATTEMPTS,
    MOVE_FORCE,
    NECTAR_COLLIDER_RADIUS,
    PETAL_COLLIDER_OFFSET,
    PETAL_COLLIDER_RADIUS,
    PITCH_SPEED,
    YAW_SPEED,
)


# ============================================================================
# Scene Definition
# ============================================================================

@dataclass
class FlowerDefinition:
    """Nectar-bearing flower as described by the scene"""
    nectar_handle: str
    petal_handle: str
    position: List[float]  # [x, y, z], local to the parent plant (world if no plant)
    up: List[float] = field(default_factory=lambda: [0.0, 1.0, 0.0])
    nectar_radius: float = NECTAR_COLLIDER_RADIUS
    petal_radius: float = PETAL_COLLIDER_RADIUS
    petal_offset: float = PETAL_COLLIDER_OFFSET


@dataclass
class SceneNode:
    """
    One node of the scene tree.

    A node is a plant container (tag == "flower_plant"), a flower
    (flower is set), or a plain grouping node. Position is relative
    to the area origin.
    """
    node_id: str
    tag: Optional[str] = None
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    flower: Optional[FlowerDefinition] = None
    children: List['SceneNode'] = field(default_factory=list)


@dataclass
class SphereObstacle:
    """Static spherical collider (rock, branch) or, when inverted, the area enclosure"""
    id: str
    center: List[float]  # [x, y, z], relative to the area origin
    radius: float
    tag: Optional[str] = None
    inverted: bool = False  # Solid outside the sphere


@dataclass
class Scene:
    """Complete flower area scene"""
    area_id: str
    origin: List[float]
    root: SceneNode
    obstacles: List[SphereObstacle] = field(default_factory=list)
    description: Optional[str] = None


# ============================================================================
# Run Configuration
# ============================================================================

@dataclass
class AgentConfig:
    """Agent motion and body parameters"""
    move_force: float = MOVE_FORCE
    pitch_speed: float = PITCH_SPEED
    yaw_speed: float = YAW_SPEED
    max_pitch_angle: float = MAX_PITCH_ANGLE
    mass_kg: float = AGENT_MASS_KG
    linear_drag: float = AGENT_LINEAR_DRAG
    collider_radius: float = AGENT_COLLIDER_RADIUS
    beak_tip_offset: List[float] = field(default_factory=lambda: list(BEAK_TIP_OFFSET))


@dataclass
class TrainingConfig:
    """Episode and reward mode"""
    training_mode: bool = True
    max_steps: int = DEFAULT_MAX_STEPS
    seed: Optional[int] = None


@dataclass
class SimulationConfig:
    """Simulation global defaults"""
    tick_delta_seconds: float = FIXED_DELTA_SECONDS
    max_spawn_attempts: int = MAX_SPAWN_ATTEMPTS
    summary_interval: int = EPISODE_SUMMARY_INTERVAL


@dataclass
class RunConfig:
    """Top-level run configuration"""
    agent: AgentConfig = field(default_factory=AgentConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


# ============================================================================
# Collaborator Records
# ============================================================================

class ContactKind(Enum):
    ENTER = "enter"
    STAY = "stay"


@dataclass(frozen=True)
class ContactEvent:
    """Contact between the agent's collider and a scene collider for one tick"""
    handle: str
    kind: ContactKind


@dataclass
class Pose:
    """Position + orientation"""
    position: np.ndarray
    rotation: Rotation

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)


@dataclass
class StepResult:
    """Outcome of a single simulation tick"""
    observation: np.ndarray
    reward: float
    done: bool
    info: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EpisodeSummary:
    """Totals read by the episode controller at episode end"""
    episode: int
    steps: int
    nectar_obtained: float
    cumulative_reward: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'episode': self.episode,
            'steps': self.steps,
            'nectar_obtained': float(self.nectar_obtained),
            'cumulative_reward': float(self.cumulative_reward),
        }
