"""Simulation and tuning constants.

Centralizes numeric defaults so SimulationConfig, the spawner and the
renderer agree on one set of values.
"""

import math

# Arena
ARENA_WIDTH = 1024  # pixels
ARENA_HEIGHT = 576  # pixels
INITIAL_COUNT = 10  # entities spawned at start

# Kinematics
SPEED_MIN = 50  # px/s, inclusive
SPEED_MAX = 250  # px/s, inclusive
FULL_TURN = math.pi * 2
REFLECT_TURN = math.pi / 2  # subtracted from the angle on any out-of-bounds axis

# Per-kind defaults
FLU_HEALTH = 1
FLU_POINTS = 10
FLU_DOUBLING_TIME = 8.0  # seconds
COVID_HEALTH = 1
COVID_POINTS = 20
COVID_DOUBLING_TIME = 5.0  # seconds

# Interaction
HIT_RADIUS = 20  # px around the click point
HIT_DAMAGE = 1  # health removed per hit
ENTITY_DIAMETER = 20  # px, used by the reflective boundary
SPEED_INCREMENT = 15  # px/s added to survivors after a successful hit (hide policy)

# Boundary / hit policies
BOUNDARY_UNBOUNDED = "unbounded"
BOUNDARY_REFLECTIVE = "reflective"
HIT_POLICY_REMOVE = "remove"
HIT_POLICY_HIDE = "hide"

# Presentation
TARGET_FPS = 60
BACKGROUND_COLOR = (18, 18, 24)
HUD_COLOR = (235, 235, 235)
FLU_COLOR = (100, 180, 220)
COVID_COLOR = (252, 186, 3)
GERM_LENGTH = 20  # px, nose to tail of the drawn triangle
GERM_HALF_WIDTH = 7  # px

__all__ = [name for name in globals().keys() if name.isupper()]
