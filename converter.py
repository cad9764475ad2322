'''
converter.py -- turns a decoded city into blocks

Each of the 128x128 tiles becomes a GRID_SCALE x GRID_SCALE patch of block
columns. Tiles are visited row by row (y0 outer, x0 inner) and every
stochastic choice comes from one pseudorandom stream, so the same map and
seed always produce the same sequence of canvas writes.
'''

import math
import numpy

import config
import logutil
from config import GRID_SIZE, GRID_SCALE
from blocks import (
    BEDROCK,
    STONE,
    DIRT,
    SANDSTONE,
    WATER,
    FALLING_WATER,
    WOOD,
    LEAVES,
    SHRUB,
    FOREST,
    BLOCK_OPAQUE,
)
from util import tile_origin, world_to_tile

# Fractional position of each column center inside a tile, indexed [dx, dz].
_CENTERS = (numpy.arange(GRID_SCALE) + 0.5) / GRID_SCALE
TILE_XF, TILE_YF = numpy.meshgrid(_CENTERS, _CENTERS, indexing='ij')


def terrain_volume(surface, water):
    """ Blocks for a patch of columns, indexed [dx, y, dz].

    surface is an int array [dx, dz] of ground heights (first air block),
    water the height of the water surface. Ground fills [1, surface) banded
    by depth, water fills [surface, water), bedrock sits at y=0.
    """
    top = max(int(surface.max()), water, 1)
    y = numpy.arange(top)[None, :, None]
    surface = surface[:, None, :]
    depth = surface - y
    ground = y < surface
    volume = numpy.zeros(ground.shape, dtype=numpy.uint8)
    volume[ground] = STONE
    volume[ground & (depth <= 3)] = DIRT
    volume[ground & (depth <= 1)] = SANDSTONE
    volume[~ground & (y < water)] = WATER
    volume[:, 0, :] = BEDROCK
    return volume


class Converter(object):
    '''
    Writes a TerrainMap plus StructureMap into a BlockCanvas.

    rng is any object with random() -> float in [0, 1) and integers(n) ->
    int in [0, n); by default a numpy Generator seeded with
    config.RANDOM_SEED.
    '''

    def __init__(self, terrain, structures, canvas, rng=None):
        self.terrain = terrain
        self.structures = structures
        self.canvas = canvas
        if rng is None:
            rng = numpy.random.default_rng(getattr(config, 'RANDOM_SEED', 0))
        self.rng = rng
        self.stats = dict.fromkeys(
            ('tiles', 'waterfalls', 'shrubs', 'trees', 'roads', 'highways', 'rails', 'powerlines'), 0)

    def convert(self, region=None):
        """ Render every tile, or only tiles in region = (x0, y0, x1, y1), max exclusive. """
        x_start, y_start, x_end, y_end = region or (0, 0, GRID_SIZE, GRID_SIZE)
        if not (0 <= x_start <= x_end <= GRID_SIZE and 0 <= y_start <= y_end <= GRID_SIZE):
            raise IndexError(f"region {(x_start, y_start, x_end, y_end)} outside the {GRID_SIZE}x{GRID_SIZE} grid")
        rows = y_end - y_start
        every = max(1, getattr(config, 'LOG_CONVERT_EVERY_N_ROWS', 1))
        for y0 in range(y_start, y_end):
            for x0 in range(x_start, x_end):
                self.render_tile(x0, y0)
            done = y0 - y_start + 1
            if done % every == 0 or done == rows:
                logutil.log("CONVERT", f"Generating... {done * 100 // rows}% complete")
        logutil.log("CONVERT", "tiles {tiles}, waterfalls {waterfalls}, shrubs {shrubs}, trees {trees}, "
                    "roads {roads}, highways {highways}, rails {rails}, powerlines {powerlines}".format(**self.stats),
                    level="DEBUG")
        return self.stats

    def render_tile(self, x0, y0):
        terra = self.terrain
        struct = self.structures

        surface = self.render_terrain(x0, y0)

        if terra.is_waterfall(x0, y0):
            self.render_waterfall(x0, y0)

        if struct.is_empty_lot(x0, y0):
            self.render_empty_lot(x0, y0)

        num_trees = int(math.floor(struct.get_tree_density(x0, y0) * getattr(config, 'TREES_PER_DENSITY', 1.5)))
        for i in range(num_trees):
            self.render_tree(x0, y0)

        if struct.is_road(x0, y0):
            self.render_road(x0, y0, surface)

        if struct.is_highway(x0, y0):
            self.render_highway(x0, y0, surface)

        # TODO: rail and powerline tiles need track and pylon shapes; only counted for now
        if struct.is_rail(x0, y0):
            self.stats['rails'] += 1
        if struct.is_powerline(x0, y0):
            self.stats['powerlines'] += 1

        self.stats['tiles'] += 1

    def scaled_altitude(self, x, z):
        """Ground height (first air block) of world column (x, z)."""
        return int(self.terrain.get_smooth_altitude(world_to_tile(x), world_to_tile(z)) * GRID_SCALE)

    def render_terrain(self, x0, y0):
        """ Fill the tile's columns and return their ground heights [dx, dz]. """
        heights = self.terrain.sample_tile(x0, y0, TILE_XF, TILE_YF) * GRID_SCALE
        surface = numpy.trunc(heights).astype(numpy.int32)
        water = self.terrain.get_water_altitude(x0, y0) * GRID_SCALE
        xs = tile_origin(x0)
        zs = tile_origin(y0)
        self.canvas.set_blocks(xs, 0, zs, terrain_volume(surface, water))
        self.canvas.set_biomes(xs, zs, numpy.full((GRID_SCALE, GRID_SCALE), FOREST, dtype=numpy.uint8))
        return surface

    def render_waterfall(self, x0, y0):
        alt_start = self.terrain.get_terrain_altitude(x0, y0) * GRID_SCALE - 1
        alt_end = alt_start + GRID_SCALE
        bottom = max(alt_start, 0)
        volume = numpy.full((GRID_SCALE, alt_end - bottom + 1, GRID_SCALE), WATER, dtype=numpy.uint8)
        volume[0, :, :] = FALLING_WATER
        volume[-1, :, :] = FALLING_WATER
        volume[:, :, 0] = FALLING_WATER
        volume[:, :, -1] = FALLING_WATER
        self.canvas.set_blocks(tile_origin(x0), bottom, tile_origin(y0), volume)
        self.stats['waterfalls'] += 1

    def render_empty_lot(self, x0, y0):
        if self.terrain.is_flooded(x0, y0):
            return
        if self.rng.random() >= getattr(config, 'SHRUB_CHANCE', 0.02):
            return
        x = tile_origin(x0) + int(self.rng.integers(GRID_SCALE))
        z = tile_origin(y0) + int(self.rng.integers(GRID_SCALE))
        self.canvas.set_block(x, self.scaled_altitude(x, z), z, SHRUB)
        self.stats['shrubs'] += 1

    def render_tree(self, x0, y0):
        x = tile_origin(x0) + int(self.rng.integers(GRID_SCALE))
        z = tile_origin(y0) + int(self.rng.integers(GRID_SCALE))
        height = getattr(config, 'TREE_MIN_HEIGHT', 6) + int(self.rng.integers(getattr(config, 'TREE_HEIGHT_RANGE', 4)))
        self.stamp_tree(x, self.scaled_altitude(x, z), z, height)
        self.stats['trees'] += 1

    def stamp_tree(self, x, altitude, z, height):
        canvas = self.canvas
        # carved beds at sea level dip below zero; trees stand on bedrock there
        altitude = max(altitude, 1)

        # leaves around trunk, every other block on odd layers
        for i in range(2, height):
            for j in range(3):
                for k in range(3):
                    if (i & 1) == 0 or (j & 1) != (k & 1):
                        canvas.set_block(x + j - 1, altitude + i, z + k - 1, LEAVES)

        # leaves at top
        canvas.set_block(x, altitude + height, z, LEAVES)

        # trunk
        for i in range(height):
            canvas.set_block(x, altitude + i, z, WOOD)

        # dirt underneath (unless on slope)
        if altitude > 1 and self.is_buried(x, altitude - 1, z):
            canvas.set_block(x, altitude - 1, z, DIRT)

    def is_buried(self, x, y, z):
        get = self.canvas.get_block
        return bool(BLOCK_OPAQUE[get(x - 1, y, z)]
            and BLOCK_OPAQUE[get(x, y, z - 1)]
            and BLOCK_OPAQUE[get(x + 1, y, z)]
            and BLOCK_OPAQUE[get(x, y, z + 1)])

    def render_road(self, x0, y0, surface):
        xs = tile_origin(x0)
        zs = tile_origin(y0)
        for dz in range(GRID_SCALE):
            for dx in range(GRID_SCALE):
                y = int(surface[dx, dz]) - 1
                if y >= 1: # bedrock stays
                    self.canvas.set_block(xs + dx, y, zs + dz, STONE)
        self.stats['roads'] += 1

    def render_highway(self, x0, y0, surface):
        xs = tile_origin(x0)
        zs = tile_origin(y0)
        water = self.terrain.get_water_altitude(x0, y0) * GRID_SCALE
        clearance = getattr(config, 'HIGHWAY_CLEARANCE', GRID_SCALE)
        for dz in range(GRID_SCALE):
            for dx in range(GRID_SCALE):
                y = max(water, int(surface[dx, dz])) + clearance
                self.canvas.set_block(xs + dx, y, zs + dz, STONE)
        self.stats['highways'] += 1
