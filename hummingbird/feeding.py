"""
Feeding protocol and reward shaping.

Drains the tick's contact events: nectar contacts close enough to the
beak tip feed the agent, boundary contacts are penalized once on entry.
ENTER and STAY contacts are treated alike, so a beak held in a flower
keeps drinking every tick.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .agent import HummingbirdAgent, facing_alignment
from .collision import CollisionEngine
from .constants import (
    ALIGNMENT_BONUS_SCALE,
    BASE_FEED_REWARD,
    BEAK_TIP_RADIUS,
    BOUNDARY_PENALTY,
    FEED_DOSE,
    TAG_BOUNDARY,
    TAG_NECTAR,
)
from .data_types import ContactEvent, ContactKind
from .flower import Flower
from .geometry import distance_3d
from .tracker import find_nearest_flower


@dataclass
class FeedingTelemetry:
    """What happened while draining one tick's contacts"""
    nectar_taken: float = 0.0
    feed_contacts: int = 0
    flowers_emptied: int = 0
    boundary_hits: int = 0

    def to_dict(self) -> dict:
        return {
            'nectar_taken': float(self.nectar_taken),
            'feed_contacts': self.feed_contacts,
            'flowers_emptied': self.flowers_emptied,
            'boundary_hits': self.boundary_hits,
        }


def feeding_reward(alignment: float) -> float:
    """Base feeding reward plus a bonus for facing down the flower's approach axis"""
    return BASE_FEED_REWARD + ALIGNMENT_BONUS_SCALE * alignment


def boundary_penalty(agent: HummingbirdAgent) -> float:
    """Penalty for bumping the area boundary (training mode only)"""
    if not agent.training_mode:
        return 0.0
    agent.add_reward(BOUNDARY_PENALTY)
    return BOUNDARY_PENALTY


def beak_touches_nectar(agent: HummingbirdAgent, colliders: CollisionEngine, handle: str) -> bool:
    """The closest point of the nectar collider is within BEAK_TIP_RADIUS of the beak tip"""
    beak_tip = agent.beak_tip
    closest = colliders.closest_point(handle, beak_tip)
    return distance_3d(beak_tip, closest) < BEAK_TIP_RADIUS


def feed_from(agent: HummingbirdAgent, flower: Flower) -> float:
    """
    Take one dose from a flower and issue the feeding reward.

    An emptied flower triggers an immediate nearest-flower recompute.

    Returns:
        Nectar actually taken
    """
    taken = flower.feed(FEED_DOSE)
    agent.nectar_obtained += taken

    if agent.training_mode:
        # Bonus is measured against the tracked target; fall back to the fed flower
        target = agent.nearest_flower if agent.nearest_flower is not None else flower
        agent.add_reward(feeding_reward(facing_alignment(agent, target)))

    if not flower.has_nectar:
        agent.nearest_flower = find_nearest_flower(agent.beak_tip, agent.area.flowers)

    return taken


def process_contacts(
    agent: HummingbirdAgent,
    events: Iterable[ContactEvent],
    colliders: CollisionEngine,
    telemetry: Optional[FeedingTelemetry] = None
) -> FeedingTelemetry:
    """
    Drain one tick of contact events for an agent.

    Args:
        agent: Agent whose collider produced the contacts
        events: Contact events for this tick
        colliders: Collision collaborator (tags and closest points)
        telemetry: Optional accumulator to extend

    Returns:
        Telemetry for the drained events

    Raises:
        FlowerLookupError: a nectar-tagged collider has no registered flower
    """
    if telemetry is None:
        telemetry = FeedingTelemetry()

    for event in events:
        tag = colliders.tag_of(event.handle)

        if tag == TAG_NECTAR:
            if not beak_touches_nectar(agent, colliders, event.handle):
                continue
            flower = agent.area.get_flower_from_nectar(event.handle)
            if not flower.has_nectar:
                # Drained earlier this tick; its collider is already disabled
                continue
            telemetry.nectar_taken += feed_from(agent, flower)
            telemetry.feed_contacts += 1
            if not flower.has_nectar:
                telemetry.flowers_emptied += 1

        elif tag == TAG_BOUNDARY and event.kind is ContactKind.ENTER:
            boundary_penalty(agent)
            telemetry.boundary_hits += 1

    return telemetry
