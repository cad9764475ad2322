# Size of the SimCity 2000 tile grid (tiles per side).
GRID_SIZE = 128

# Blocks per tile along each horizontal axis. One altitude step is also one
# tile of height, so altitudes scale by the same factor.
GRID_SCALE = 16

# Size of sectors used to store canvas blocks.
SECTOR_SIZE = 16 #width and depth (x and z)
SECTOR_HEIGHT = 320 #height of world (y)

# Container decoding
# Largest chunk/container length accepted from a big-endian u32 field.
MAX_SEGMENT_SIZE = 2**31 - 1

# Terrain reconstruction
# Deepest a canal or waterfall is carved below its tile altitude (in tiles).
CANAL_DEPTH = 0.3
# Extra height given to flooded slopes so they meet neighboring water.
FLOODED_SLOPE_BIAS = 0.05

# Voxel synthesis
RANDOM_SEED = 0
SHRUB_CHANCE = 0.02
TREES_PER_DENSITY = 1.5
TREE_MIN_HEIGHT = 6
TREE_HEIGHT_RANGE = 4 # heights drawn from [TREE_MIN_HEIGHT, TREE_MIN_HEIGHT + RANGE)
# Highway decks float this many blocks above max(water, ground).
HIGHWAY_CLEARANCE = GRID_SCALE

# Enable ANSI colors in logs.
LOG_COLOR = True

# Minimum level printed by logutil (DEBUG, INFO, WARNING, ERROR).
LOG_LEVEL = "INFO"

# Log conversion progress once per tile row.
LOG_CONVERT_PROGRESS = True

# Number of tile rows between progress lines (1 logs every row).
LOG_CONVERT_EVERY_N_ROWS = 8

# Tiles in the world, used for sanity checks on decoded buffers.
GRID_TILES = GRID_SIZE * GRID_SIZE
