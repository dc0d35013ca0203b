"""
Configuration constants.

Centralizes the magic numbers used by the level generators, connectors,
presets and compositor. Organized by functional area for easy maintenance.
"""

# =============================================================================
# GENERAL
# =============================================================================

# Largest canvas the compositor considers sane (per side)
MAX_CANVAS_DIMENSION = 256
# Smallest canvas that can hold a meaningful level (per side)
MIN_CANVAS_DIMENSION = 8

# Monster and object layers are stored at this multiple of tile resolution,
# letting one tile host up to four sub-tile slots.
SUB_TILE_SCALE = 2

# Default dimensions for named blueprints and the command line
DEFAULT_LEVEL_WIDTH = 64
DEFAULT_LEVEL_HEIGHT = 48

# =============================================================================
# LAYOUT GENERATORS
# =============================================================================

ROOM_MIN_SIZE = 4
ROOM_MAX_SIZE = 12

# BSP
BSP_SPLIT_ITERATIONS = 4
BSP_CORRIDOR_WIDTH = 2

# Cellular caves
CAVE_FILL_PROBABILITY = 0.45
CAVE_ITERATIONS = 5
CAVE_WALL_THRESHOLD = 5
CAVE_FLOOR_THRESHOLD = 4
# Stairs are kept this far from the canvas edge when possible
CAVE_STAIRS_MARGIN = 2

# Random walk ("drunkard's walk")
WALK_FLOOR_PERCENT = 0.35
WALK_MAX_TUNNEL_LENGTH = 8
WALK_ROOM_CHANCE = 0.15
WALK_SEED_ROOM_SIZE = 5
WALK_ROOM_MIN_SIZE = 3
WALK_ROOM_MAX_SIZE = 6
WALK_EDGE_MARGIN = 2
# Walker gives up after this many steps per grid cell
WALK_STEP_BUDGET_FACTOR = 20

# Arena
ARENA_SIZE = 0.4
ARENA_SURROUNDING_ROOMS = 4
ARENA_PILLAR_SPACING = 4
ARENA_PILLAR_CHANCE = 0.6
ARENA_CENTER_CLEARANCE = 3
ARENA_SATELLITE_MIN_SIZE = 4
ARENA_SATELLITE_MAX_SIZE = 7

# =============================================================================
# SAMPLING & NOISE
# =============================================================================

POISSON_MAX_ATTEMPTS = 30
NOISE_OCTAVES = 4
NOISE_PERSISTENCE = 0.5
TERRAIN_NOISE_SCALE = 0.08
FOLIAGE_NOISE_SCALE = 0.15

# =============================================================================
# PATHS & CORRIDORS
# =============================================================================

DEFAULT_PATH_STYLE = "winding"
# Step cost for diagonal moves when diagonal pathfinding is enabled
DIAGONAL_STEP_COST = 1.414
# Curvy paths are down-sampled to roughly this many control points
CURVE_SAMPLE_TARGET = 10
# Interior control points move at most curviness * this many tiles
CURVE_MAX_OFFSET = 5
# Doors closer than this are treated as one anchor when linking structures
DOOR_BUCKET_SIZE = 5

# =============================================================================
# COMPOSITOR
# =============================================================================

DEFAULT_FOLIAGE_DENSITY = 0.2
DEFAULT_CLUSTER_STRENGTH = 0.5
DEFAULT_TORCH_DENSITY = 0.05
DEFAULT_LIGHT_RADIUS = 4
DEFAULT_AMBIENT_LIGHT = 0.3
