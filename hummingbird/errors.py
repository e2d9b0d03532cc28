"""
Exception types raised by the foraging simulation core.

Lookup and placement failures indicate broken scene data or an
over-crowded area; callers are expected to let them propagate.
"""


class HummingbirdError(Exception):
    """Base class for simulation errors"""
    pass


class SceneError(HummingbirdError):
    """Raised when the scene tree violates the flower/collider contract"""
    pass


class FlowerLookupError(HummingbirdError, KeyError):
    """Raised when a nectar collider handle has no registered flower"""

    def __init__(self, handle):
        super().__init__(handle)
        self.handle = handle

    def __str__(self):
        return f"No flower registered for nectar collider {self.handle!r}"


class PlacementExhaustedError(HummingbirdError):
    """Raised when no collision-free agent pose is found within the attempt budget"""

    def __init__(self, attempts: int, anchored: bool):
        mode = "anchored" if anchored else "free"
        super().__init__(f"No safe {mode} spawn position found after {attempts} attempts")
        self.attempts = attempts
        self.anchored = anchored


class FreezeError(HummingbirdError):
    """Raised when freeze/unfreeze is requested on an agent in training mode"""
    pass
