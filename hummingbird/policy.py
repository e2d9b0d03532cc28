"""
Decision component contract and two bundled policies.

A policy consumes the 10-element observation and returns a 5-element
action. Trained models plug in by implementing the same protocol.
"""

from typing import Iterable, Protocol

import numpy as np

from .agent import HummingbirdAgent, heuristic_action
from .constants import ACTION_SIZE


class Policy(Protocol):
    def reset(self) -> None:
        ...

    def act(self, observation: np.ndarray) -> np.ndarray:
        ...


class RandomPolicy:
    """Uniform random actions in [-1, 1]"""

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def reset(self) -> None:
        pass

    def act(self, observation: np.ndarray) -> np.ndarray:
        return self.rng.uniform(-1.0, 1.0, size=ACTION_SIZE).astype(np.float32)


class HeuristicPolicy:
    """
    Direct-input policy.

    Holds the set of commands currently pressed by the caller and maps
    them onto the controlled agent's own axes. The observation is
    ignored: it is all zeros when there is no target flower.

    Held commands stay pressed across episodes until press() replaces
    them.
    """

    def __init__(self, agent: HummingbirdAgent):
        self.agent = agent
        self.commands = set()

    def press(self, commands: Iterable[str]):
        self.commands = set(commands)

    def reset(self) -> None:
        pass

    def act(self, observation: np.ndarray) -> np.ndarray:
        return heuristic_action(self.commands, self.agent.rotation)


class SeekNectarPolicy:
    """
    Scripted baseline: fly straight at the nearest flower.

    Uses the beak-to-flower direction from the observation as the move
    command and never turns. Hovers when there is no target.
    """

    def reset(self) -> None:
        pass

    def act(self, observation: np.ndarray) -> np.ndarray:
        action = np.zeros(ACTION_SIZE, dtype=np.float32)
        action[0:3] = observation[4:7]
        return action
