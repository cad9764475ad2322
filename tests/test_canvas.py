import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from canvas import BlockCanvas, SectorCanvas
from blocks import AIR, STONE, DIRT, WATER, FOREST, BLOCK_NAME, BLOCK_ID, is_opaque
from config import SECTOR_HEIGHT


class DictCanvas(BlockCanvas):

    def __init__(self):
        self.blocks = {}
        self.biomes = {}

    def set_block(self, x, y, z, block):
        self.blocks[(x, y, z)] = block

    def get_block(self, x, y, z):
        return self.blocks.get((x, y, z), AIR)

    def set_biome(self, x, z, biome):
        self.biomes[(x, z)] = biome


def test_block_table():
    assert BLOCK_NAME[AIR] == "Air"
    assert BLOCK_NAME[STONE] == "Stone"
    assert BLOCK_ID["Falling Water"] != WATER
    assert is_opaque(STONE)
    assert not is_opaque(WATER)
    assert not is_opaque(AIR)


def test_sector_canvas_single_blocks():
    canvas = SectorCanvas()
    canvas.set_block(-1, 10, -17, STONE)
    canvas.set_block(15, 0, 16, DIRT)
    assert canvas.get_block(-1, 10, -17) == STONE
    assert canvas.get_block(15, 0, 16) == DIRT
    assert canvas.get_block(0, 10, -17) == AIR
    assert canvas.get_block(500, 3, 500) == AIR
    assert canvas.get_block(-1, -1, -17) == AIR
    assert set(canvas.sectors) == {(-16, 0, -32), (0, 0, 16)}


@pytest.mark.parametrize("y", [-1, SECTOR_HEIGHT])
def test_sector_canvas_rejects_heights(y):
    canvas = SectorCanvas()
    with pytest.raises(IndexError):
        canvas.set_block(0, y, 0, STONE)
    with pytest.raises(IndexError):
        canvas.set_blocks(0, y, 0, np.ones((1, 1, 1), dtype=np.uint8))


def test_set_blocks_spans_sectors_and_skips_air():
    canvas = SectorCanvas()
    canvas.set_block(-8, 5, -8, DIRT)
    volume = np.full((16, 3, 16), STONE, dtype=np.uint8)
    volume[0, 1, 0] = AIR
    canvas.set_blocks(-8, 4, -8, volume)
    assert len(canvas.sectors) == 4
    assert canvas.get_block(-8, 4, -8) == STONE
    # air cell left the earlier block in place
    assert canvas.get_block(-8, 5, -8) == DIRT
    assert canvas.get_block(7, 6, 7) == STONE
    assert canvas.get_block(8, 6, 7) == AIR
    assert canvas.get_block(0, 7, 0) == AIR
    assert canvas.bounds() == (-16, -16, 16, 16)


def test_set_blocks_matches_per_block_default():
    rng = np.random.default_rng(3)
    volume = rng.integers(0, 4, size=(20, 5, 9)).astype(np.uint8)
    fast = SectorCanvas()
    slow = DictCanvas()
    fast.set_blocks(-5, 2, 11, volume)
    slow.set_blocks(-5, 2, 11, volume)
    for (x, y, z), block in slow.blocks.items():
        assert fast.get_block(x, y, z) == block
    assert np.count_nonzero(volume) == len(slow.blocks)


def test_biomes():
    canvas = SectorCanvas()
    assert canvas.get_biome(3, 3) is None
    canvas.set_biomes(-4, -4, np.full((8, 8), FOREST, dtype=np.uint8))
    assert canvas.get_biome(-4, -4) == FOREST
    assert canvas.get_biome(3, 3) == FOREST
    assert canvas.get_biome(4, 3) == 0
    assert len(canvas.biomes) == 4

    slow = DictCanvas()
    slow.set_biomes(0, 0, np.full((2, 3), FOREST, dtype=np.uint8))
    assert len(slow.biomes) == 6


def test_column():
    canvas = SectorCanvas()
    assert not canvas.column(0, 0).any()
    assert canvas.bounds() is None
    canvas.set_block(2, 7, 3, WATER)
    column = canvas.column(2, 3)
    assert column.shape == (SECTOR_HEIGHT,)
    assert column[7] == WATER
    assert np.count_nonzero(column) == 1


def test_block_canvas_is_abstract():
    canvas = BlockCanvas()
    with pytest.raises(NotImplementedError):
        canvas.set_block(0, 0, 0, STONE)
    with pytest.raises(NotImplementedError):
        canvas.get_block(0, 0, 0)
    with pytest.raises(NotImplementedError):
        canvas.set_biome(0, 0, FOREST)
