"""
Flower runtime representation.

A flower holds a depletable amount of nectar in [0, 1] and toggles
between FULL and EMPTY. Emptying a flower disables its petal and
nectar colliders; resetting it re-enables them.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .collision import CollisionEngine
from .constants import EMPTY_FLOWER_COLOR, FULL_FLOWER_COLOR, NECTAR_FULL


class FlowerState(Enum):
    FULL = "full"
    EMPTY = "empty"


@dataclass(eq=False)
class Flower:
    """
    Runtime flower in a flower area.

    Attributes:
        flower_id: Scene node id of the flower
        nectar_handle: Collision handle of the nectar trigger (registry key)
        petal_handle: Collision handle of the solid petal collider
        position: World position of the nectar collider [x, y, z]
        up_vector: World normal of the flower (approach axis is -up)
        colliders: Collision collaborator notified on enable/disable
        nectar_amount: Remaining nectar, always within [0, 1]
        state: FULL while harvestable, EMPTY once drained
    """
    flower_id: str
    nectar_handle: str
    petal_handle: str
    position: np.ndarray
    up_vector: np.ndarray
    colliders: Optional[CollisionEngine] = None
    nectar_amount: float = NECTAR_FULL
    state: FlowerState = FlowerState.FULL
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)
        self.up_vector = np.array(self.up_vector, dtype=np.float64)

        # State follows the starting amount
        self.nectar_amount = float(np.clip(self.nectar_amount, 0.0, NECTAR_FULL))
        if self.nectar_amount > 0.0:
            self.state = FlowerState.FULL
        else:
            self.state = FlowerState.EMPTY
            self._set_colliders_enabled(False)

    @property
    def has_nectar(self) -> bool:
        return self.nectar_amount > 0.0

    @property
    def color(self):
        """Visual marker for the current state (RGB)"""
        return FULL_FLOWER_COLOR if self.state is FlowerState.FULL else EMPTY_FLOWER_COLOR

    def feed(self, amount: float) -> float:
        """
        Attempt to remove nectar from the flower.

        The requested amount (not the amount actually taken) is subtracted,
        then the remainder is floored at zero. Negative requests remove nothing.

        Args:
            amount: Amount of nectar requested

        Returns:
            Amount actually removed, min(amount, nectar_amount)
        """
        with self._lock:
            taken = float(np.clip(amount, 0.0, self.nectar_amount))

            self.nectar_amount -= max(float(amount), 0.0)

            if self.nectar_amount <= 0.0:
                self.nectar_amount = 0.0
                self.state = FlowerState.EMPTY
                self._set_colliders_enabled(False)

            return taken

    def reset(self):
        """Refill with nectar and re-enable both colliders"""
        with self._lock:
            self.nectar_amount = NECTAR_FULL
            self.state = FlowerState.FULL
            self._set_colliders_enabled(True)

    def _set_colliders_enabled(self, enabled: bool):
        if self.colliders is None:
            return
        self.colliders.set_enabled(self.petal_handle, enabled)
        self.colliders.set_enabled(self.nectar_handle, enabled)

    def to_dict(self) -> dict:
        return {
            'flower_id': self.flower_id,
            'nectar_handle': self.nectar_handle,
            'position': self.position.tolist(),
            'up_vector': self.up_vector.tolist(),
            'nectar_amount': float(self.nectar_amount),
            'state': self.state.value,
        }
