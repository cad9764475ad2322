'''
structures.py -- per-tile building facts consumed by the converter

Decoding the XBLD chunk is not done here; a decoder only has to provide the
StructureMap queries. StructureGrid is a plain numpy-backed implementation
that such a decoder (or a test) can fill in.
'''

import numpy

import config
from terrain import check_bounds


class StructureMap(object):
    '''Query interface the converter uses. The base class reports nothing built anywhere.'''

    def is_empty_lot(self, x, y):
        check_bounds(x, y)
        return False

    def is_road(self, x, y):
        check_bounds(x, y)
        return False

    def is_highway(self, x, y):
        check_bounds(x, y)
        return False

    def is_rail(self, x, y):
        check_bounds(x, y)
        return False

    def is_powerline(self, x, y):
        check_bounds(x, y)
        return False

    def get_tree_density(self, x, y):
        check_bounds(x, y)
        return 0


class StructureGrid(StructureMap):
    '''
    Structure facts held in [x, y] numpy layers. Layers start out empty and
    are edited directly (grid.road[10, 12] = True) or through set_tile().
    '''
    LAYERS = ('empty_lot', 'road', 'highway', 'rail', 'powerline')

    def __init__(self):
        size = config.GRID_SIZE
        self.empty_lot = numpy.zeros((size, size), dtype=bool)
        self.road = numpy.zeros((size, size), dtype=bool)
        self.highway = numpy.zeros((size, size), dtype=bool)
        self.rail = numpy.zeros((size, size), dtype=bool)
        self.powerline = numpy.zeros((size, size), dtype=bool)
        self.tree_density = numpy.zeros((size, size), dtype=numpy.int16)

    def set_tile(self, x, y, tree_density=None, **layers):
        check_bounds(x, y)
        for name, value in layers.items():
            if name not in self.LAYERS:
                raise KeyError(f"unknown structure layer {name!r}")
            getattr(self, name)[x, y] = bool(value)
        if tree_density is not None:
            if tree_density < 0:
                raise ValueError(f"tree density must be >= 0, got {tree_density}")
            self.tree_density[x, y] = tree_density

    def is_empty_lot(self, x, y):
        check_bounds(x, y)
        return bool(self.empty_lot[x, y])

    def is_road(self, x, y):
        check_bounds(x, y)
        return bool(self.road[x, y])

    def is_highway(self, x, y):
        check_bounds(x, y)
        return bool(self.highway[x, y])

    def is_rail(self, x, y):
        check_bounds(x, y)
        return bool(self.rail[x, y])

    def is_powerline(self, x, y):
        check_bounds(x, y)
        return bool(self.powerline[x, y])

    def get_tree_density(self, x, y):
        check_bounds(x, y)
        return int(self.tree_density[x, y])
