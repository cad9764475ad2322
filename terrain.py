'''
terrain.py -- tile grid of a SimCity 2000 map and its continuous height field

Every tile carries a terrain altitude, a water altitude and a shape code. The
shape code says whether the tile is flat, a slope, an inside/outside corner,
a canal or a waterfall, and how it is rotated. get_smooth_altitude() turns the
discrete tiles into one continuous surface so the voxel terrain has no stair
steps between neighboring tiles.
'''

import math
import numpy

import config
from sc2file import SizeError

WIDTH = config.GRID_SIZE
HEIGHT = config.GRID_SIZE

# Tile types
LOW, HIGH, SLOPE, CORNER_LOW, CORNER_HIGH, WATERFALL, CANAL = range(7)
TYPE_NAMES = ('LOW', 'HIGH', 'SLOPE', 'CORNER_LOW', 'CORNER_HIGH', 'WATERFALL', 'CANAL')

# Tile rotations (clockwise)
NONE, CW90, CW180, CW270 = range(4)
ROTATION_NAMES = ('NONE', 'CW90', 'CW180', 'CW270')

WATERFALL_CODE = 0x3E

# Shape and rotation by the low nibble of a land code (0x00-0x0D, 0x10-0x1D,
# 0x20-0x2D). The high nibble only says how deep the tile is underwater.
_NIBBLE_TYPE = (
    LOW,
    SLOPE, SLOPE, SLOPE, SLOPE,
    CORNER_LOW, CORNER_LOW, CORNER_LOW, CORNER_LOW,
    CORNER_HIGH, CORNER_HIGH, CORNER_HIGH, CORNER_HIGH,
    HIGH,
)
_NIBBLE_ROTATION = (
    NONE,
    NONE, CW90, CW180, CW270,
    NONE, CW90, CW180, CW270,
    NONE, CW90, CW180, CW270,
    NONE,
)


def _build_code_tables():
    tile_type = numpy.full(256, LOW, dtype=numpy.uint8)
    tile_rotation = numpy.full(256, NONE, dtype=numpy.uint8)
    for base in (0x00, 0x10, 0x20):
        for nibble in range(len(_NIBBLE_TYPE)):
            tile_type[base + nibble] = _NIBBLE_TYPE[nibble]
            tile_rotation[base + nibble] = _NIBBLE_ROTATION[nibble]
    tile_type[0x30:0x3E] = CANAL
    tile_type[0x40:0x46] = CANAL
    tile_type[WATERFALL_CODE] = WATERFALL
    return tile_type, tile_rotation

TILE_TYPE, TILE_ROTATION = _build_code_tables()


def classify(code):
    """Returns (type, rotation) for a raw terrain code byte."""
    code &= 0xFF
    return int(TILE_TYPE[code]), int(TILE_ROTATION[code])


def is_underwater_code(code):
    return (code & 0x30) != 0


def storage_index(x, y):
    """ Position of logical tile (x, y) in the file's tile arrays.

    The files store each row with x running backwards, so x is mirrored.
    Works on ints and numpy arrays alike.
    """
    return (WIDTH - 1 - x) + y * WIDTH


def in_bounds(x, y):
    return 0 <= x < WIDTH and 0 <= y < HEIGHT


def check_bounds(x, y):
    if not in_bounds(x, y):
        raise IndexError(f"({x}, {y})")


# Height profiles of a tile in its unrotated orientation. xf, yf are the
# fractional position inside the tile (floats or numpy arrays). Each returns
# the height above the tile's base altitude.

def slope(xf, yf):
    return 1 - yf

def corner_low(xf, yf):
    return numpy.where(yf > xf, 1 - yf + xf, 1.0)

def corner_high(xf, yf):
    return numpy.where(yf < xf, xf - yf, 0.0)

def flooded_slope(xf, yf):
    bias = getattr(config, 'FLOODED_SLOPE_BIAS', 0.05)
    return numpy.minimum(1.0, 1 - yf + bias)

def flooded_corner_low(xf, yf):
    return numpy.minimum(1.0, (1 - xf) * (1 - yf) + xf * (1 - yf) + xf * yf + 0.04)

def flooded_corner_high(xf, yf):
    return numpy.minimum(1.0, (1 - yf) * xf * 1.05 + 0.02)


def rotate_fraction(rotation, xf, yf):
    """Map a position in a rotated tile back to the unrotated profile."""
    if rotation == CW90:
        return yf, 1 - xf
    if rotation == CW180:
        return 1 - xf, 1 - yf
    if rotation == CW270:
        return 1 - yf, xf
    return xf, yf


# Neighbor triples checked for each rotation when carving a canal. The first
# and third are edge neighbors, the second is the diagonal between them:
#   c2 c1
#   c3 *
_CANAL_CORNERS = (
    (NONE, ((0, -1), (-1, -1), (-1, 0))),
    (CW90, ((1, 0), (1, -1), (0, -1))),
    (CW180, ((0, 1), (1, 1), (1, 0))),
    (CW270, ((-1, 0), (-1, 1), (0, 1))),
)

# (+2, +1) is not symmetric with the rest; kept because the carved geometry
# depends on it.
_ADJACENT_CANAL_OFFSETS = (
    (1, 0), (2, 1), (0, 1), (-1, 1),
    (-1, 0), (-1, -1), (0, -1), (1, -1),
)


def _corner_depth(xf, yf, c1, c2, c3):
    # c1..c3 are True when that neighbor is open (not flooded).
    if c1 and c3:
        return 1 - flooded_corner_low(1 - xf, yf)
    elif c1:
        return 1 - flooded_slope(1 - xf, yf)
    elif c2:
        return 1 - flooded_corner_high(1 - xf, yf)
    return 1.0


class TerrainMap(object):
    '''
    Read-only 128x128 tile grid built from the ALTM (altitude) and XTER
    (terrain code) chunks. All per-tile attributes are decoded once, up front,
    into numpy arrays indexed [x, y].
    '''

    def __init__(self, altm, xter):
        tiles = config.GRID_TILES
        if len(altm) < tiles * 2:
            raise SizeError(f"altitude data has {len(altm)} bytes, expected {tiles * 2}")
        if len(xter) < tiles:
            raise SizeError(f"terrain data has {len(xter)} bytes, expected {tiles}")

        words = numpy.frombuffer(bytes(altm), dtype='>u2', count=tiles)
        codes = numpy.frombuffer(bytes(xter), dtype=numpy.uint8, count=tiles)

        xs, ys = numpy.mgrid[0:WIDTH, 0:HEIGHT]
        index = storage_index(xs, ys)
        words = words[index].astype(numpy.int32)
        codes = codes[index]

        self.terrain_altitude = (words & 0xF).astype(numpy.int8)
        self.water_altitude = ((words >> 5) & 0xF).astype(numpy.int8)
        self.codes = codes
        self.tile_type = TILE_TYPE[codes]
        self.tile_rotation = TILE_ROTATION[codes]
        self.underwater = (codes & 0x30) != 0
        self.flooded = self.underwater | (self.tile_type == CANAL) | (self.tile_type == WATERFALL)
        self.canal = self.tile_type == CANAL
        for grid in (self.terrain_altitude, self.water_altitude, self.codes, self.tile_type,
                     self.tile_rotation, self.underwater, self.flooded, self.canal):
            grid.flags.writeable = False

    @property
    def width(self):
        return WIDTH

    @property
    def height(self):
        return HEIGHT

    def get_terrain_altitude(self, x, y):
        check_bounds(x, y)
        return int(self.terrain_altitude[x, y])

    def get_water_altitude(self, x, y):
        check_bounds(x, y)
        return int(self.water_altitude[x, y])

    def get_type(self, x, y):
        check_bounds(x, y)
        return int(self.tile_type[x, y])

    def get_rotation(self, x, y):
        check_bounds(x, y)
        return int(self.tile_rotation[x, y])

    def is_underwater(self, x, y):
        check_bounds(x, y)
        return bool(self.underwater[x, y])

    def is_flat(self, x, y):
        return self.get_type(x, y) in (LOW, HIGH)

    def is_slope(self, x, y):
        return self.get_type(x, y) in (SLOPE, CORNER_LOW, CORNER_HIGH)

    def is_waterfall(self, x, y):
        return self.get_type(x, y) == WATERFALL

    def is_canal(self, x, y):
        return self.get_type(x, y) == CANAL

    def is_flooded(self, x, y):
        check_bounds(x, y)
        return bool(self.underwater[x, y]) or self.is_canal(x, y) or self.is_waterfall(x, y)

    def _neighbor(self, grid, x, y, outside):
        """Value of a per-tile grid at (x, y), or `outside` past the map edge."""
        if not in_bounds(x, y):
            return outside
        return bool(grid[x, y])

    def has_adjacent_canal(self, x, y):
        check_bounds(x, y)
        for dx, dy in _ADJACENT_CANAL_OFFSETS:
            if self._neighbor(self.canal, x + dx, y + dy, outside=True):
                return True
        return False

    def canal_depth(self, x, y, xf, yf):
        """ How far a canal dips below its tile altitude at (x + xf, y + yf).

        The channel is full depth in the middle and rises toward every open
        (unflooded) neighbor, so the carved bed meets dry land smoothly.
        Tiles past the map edge count as open. Returns a value in
        [0, CANAL_DEPTH]; a float for scalar xf/yf, otherwise an array.
        """
        check_bounds(x, y)
        xf = numpy.asarray(xf, dtype=numpy.float64)
        yf = numpy.asarray(yf, dtype=numpy.float64)
        limit = getattr(config, 'CANAL_DEPTH', 0.3)
        depth = numpy.full(numpy.broadcast(xf, yf).shape, limit)
        for rotation, corner in _CANAL_CORNERS:
            c1, c2, c3 = [not self._neighbor(self.flooded, x + dx, y + dy, outside=False)
                          for dx, dy in corner]
            u, v = rotate_fraction(rotation, xf, yf)
            depth = numpy.minimum(depth, _corner_depth(u, v, c1, c2, c3))
        depth = numpy.clip(depth, 0.0, limit)
        if depth.ndim == 0:
            return float(depth)
        return depth

    def sample_tile(self, x, y, xf, yf):
        """ Surface height of tile (x, y) at fractional offsets xf, yf.

        xf and yf lie in [0, 1) and may be numpy arrays, in which case the
        result is an array of their broadcast shape. This is the vectorized
        form of get_smooth_altitude for positions inside one tile.
        """
        check_bounds(x, y)
        altitude = float(self.terrain_altitude[x, y])
        tile_type = int(self.tile_type[x, y])
        rotation = int(self.tile_rotation[x, y])
        underwater = bool(self.underwater[x, y])
        xf = numpy.asarray(xf, dtype=numpy.float64)
        yf = numpy.asarray(yf, dtype=numpy.float64)
        shape = numpy.broadcast(xf, yf).shape

        # canals and waterfalls are carved below their own altitude
        if tile_type == CANAL or tile_type == WATERFALL:
            return altitude - numpy.broadcast_to(self.canal_depth(x, y, xf, yf), shape)

        # flooded land next to a canal dips down to meet it
        bridge = numpy.full(shape, altitude + 1)
        if self.is_flooded(x, y) and self.has_adjacent_canal(x, y):
            bridge = bridge - self.canal_depth(x, y, xf, yf)

        xf, yf = rotate_fraction(rotation, xf, yf)

        if tile_type == HIGH:
            profile = numpy.ones(shape)
        elif tile_type == SLOPE:
            profile = flooded_slope(xf, yf) if underwater else slope(xf, yf)
        elif tile_type == CORNER_LOW:
            profile = flooded_corner_low(xf, yf) if underwater else corner_low(xf, yf)
        elif tile_type == CORNER_HIGH:
            profile = flooded_corner_high(xf, yf) if underwater else corner_high(xf, yf)
        else:
            profile = numpy.zeros(shape)

        return numpy.minimum(altitude + profile, bridge)

    def get_smooth_altitude(self, x, y):
        xi = int(math.floor(x))
        yi = int(math.floor(y))
        check_bounds(xi, yi)
        return float(self.sample_tile(xi, yi, x - xi, y - yi))
