"""
Central configuration constants for the hummingbird foraging simulation.

Defines reward values, contact radii, spawn ranges and scene tags
used across multiple modules.
"""

# ============================================================================
# Area Configuration
# ============================================================================

# Diameter of the flower area, used to normalize beak-to-flower distance
AREA_DIAMETER = 20.0

# World up axis (y-up, +z forward)
WORLD_UP = (0.0, 1.0, 0.0)
WORLD_FORWARD = (0.0, 0.0, 1.0)

# Plant re-orientation ranges applied on every area reset (degrees)
PLANT_TILT_RANGE_DEG = (-5.0, 5.0)     # x and z axes
PLANT_YAW_RANGE_DEG = (-180.0, 180.0)  # y axis


# ============================================================================
# Scene Tags
# ============================================================================

TAG_FLOWER_PLANT = "flower_plant"
TAG_NECTAR = "nectar"
TAG_PETAL = "petal"
TAG_BOUNDARY = "boundary"


# ============================================================================
# Flower Configuration
# ============================================================================

NECTAR_FULL = 1.0

# Visual markers (RGB) for full and empty flowers
FULL_FLOWER_COLOR = (1.0, 0.0, 0.0)
EMPTY_FLOWER_COLOR = (0.5, 0.0, 1.0)

# Default collider geometry when the scene does not override it (meters)
NECTAR_COLLIDER_RADIUS = 0.02
PETAL_COLLIDER_RADIUS = 0.04
PETAL_COLLIDER_OFFSET = 0.05  # Petal sphere sits this far below the nectar along -up


# ============================================================================
# Feeding & Reward
# ============================================================================

# Max distance from beak tip to nectar collider surface to accept feeding
BEAK_TIP_RADIUS = 0.008

# Nectar removed per feeding contact per tick
FEED_DOSE = 0.01

BASE_FEED_REWARD = 0.01
ALIGNMENT_BONUS_SCALE = 0.02
BOUNDARY_PENALTY = -0.5


# ============================================================================
# Safe Placement
# ============================================================================

MAX_SPAWN_ATTEMPTS = 100
SAFE_OVERLAP_RADIUS = 0.05

# Anchored (in front of flower) distance range along the flower up axis
ANCHORED_DISTANCE_RANGE = (0.1, 0.2)

# Free-floating spawn ranges relative to the area origin
FREE_HEIGHT_RANGE = (1.2, 2.5)
FREE_RADIUS_RANGE = (2.0, 7.0)
FREE_YAW_RANGE_DEG = (-180.0, 180.0)
FREE_PITCH_RANGE_DEG = (-60.0, 60.0)


# ============================================================================
# Agent Motion
# ============================================================================

MOVE_FORCE = 2.0
PITCH_SPEED = 100.0       # deg/s at full command
YAW_SPEED = 100.0         # deg/s at full command
MAX_PITCH_ANGLE = 80.0    # deg
SMOOTHING_RATE = 2.0      # command units per second for pitch/yaw smoothing

AGENT_MASS_KG = 1.0
AGENT_LINEAR_DRAG = 1.0   # 1/s, velocity decay
AGENT_COLLIDER_RADIUS = 0.05

# Beak tip offset in agent-local frame (meters)
BEAK_TIP_OFFSET = (0.0, 0.0, 0.08)

# Radius of the contact sphere around the beak tip
BEAK_CONTACT_RADIUS = 0.01


# ============================================================================
# Decision Contract
# ============================================================================

OBSERVATION_SIZE = 10
ACTION_SIZE = 5


# ============================================================================
# Simulation Timing
# ============================================================================

FIXED_DELTA_SECONDS = 0.02
DEFAULT_MAX_STEPS = 5000

# Tick timing window for rolling average
TICK_TIME_WINDOW = 100

# Print an episode summary every N episodes
EPISODE_SUMMARY_INTERVAL = 10
