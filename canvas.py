'''
canvas.py -- block sinks the converter writes into

BlockCanvas is the interface: anything with set_block/get_block/set_biome can
receive a converted map. The bulk helpers fall back to per-block calls so a
minimal sink only needs those three methods.

SectorCanvas keeps the world in memory as numpy sectors of
SECTOR_SIZE x SECTOR_HEIGHT x SECTOR_SIZE blocks (indexed [x, y, z]), created
on first write.
'''

import numpy

from config import SECTOR_SIZE, SECTOR_HEIGHT
from blocks import AIR
from util import sectorize


class BlockCanvas(object):

    def set_block(self, x, y, z, block):
        raise NotImplementedError

    def get_block(self, x, y, z):
        raise NotImplementedError

    def set_biome(self, x, z, biome):
        raise NotImplementedError

    def set_blocks(self, x, y, z, volume):
        """ Write a [dx, dy, dz] volume with its corner at (x, y, z).

        Air cells in the volume are skipped, so existing blocks show through.
        """
        sx, sy, sz = volume.shape
        for dx in range(sx):
            for dz in range(sz):
                for dy in range(sy):
                    block = int(volume[dx, dy, dz])
                    if block != AIR:
                        self.set_block(x + dx, y + dy, z + dz, block)

    def set_biomes(self, x, z, biomes):
        sx, sz = biomes.shape
        for dx in range(sx):
            for dz in range(sz):
                self.set_biome(x + dx, z + dz, int(biomes[dx, dz]))


class SectorCanvas(BlockCanvas):

    def __init__(self):
        self.sectors = {}
        self.biomes = {}

    def _sector(self, x, z, create):
        key = sectorize((x, 0, z))
        sector = self.sectors.get(key)
        if sector is None and create:
            sector = numpy.zeros((SECTOR_SIZE, SECTOR_HEIGHT, SECTOR_SIZE), dtype=numpy.uint8)
            self.sectors[key] = sector
        return key, sector

    def _biome_sector(self, x, z):
        key = sectorize((x, 0, z))
        biomes = self.biomes.get(key)
        if biomes is None:
            biomes = numpy.zeros((SECTOR_SIZE, SECTOR_SIZE), dtype=numpy.uint8)
            self.biomes[key] = biomes
        return key, biomes

    def set_block(self, x, y, z, block):
        if not 0 <= y < SECTOR_HEIGHT:
            raise IndexError(f"block height {y} outside [0, {SECTOR_HEIGHT})")
        (sx, _, sz), sector = self._sector(x, z, create=True)
        sector[x - sx, y, z - sz] = block

    def get_block(self, x, y, z):
        if not 0 <= y < SECTOR_HEIGHT:
            return AIR
        (sx, _, sz), sector = self._sector(x, z, create=False)
        if sector is None:
            return AIR
        return int(sector[x - sx, y, z - sz])

    def set_biome(self, x, z, biome):
        (sx, _, sz), biomes = self._biome_sector(x, z)
        biomes[x - sx, z - sz] = biome

    def get_biome(self, x, z):
        key = sectorize((x, 0, z))
        biomes = self.biomes.get(key)
        if biomes is None:
            return None
        return int(biomes[x - key[0], z - key[2]])

    def _spans(self, x, z, sx, sz):
        """Split the box [x, x+sx) x [z, z+sz) at sector boundaries."""
        x0 = x
        while x0 < x + sx:
            x1 = min(x + sx, sectorize((x0, 0, 0))[0] + SECTOR_SIZE)
            z0 = z
            while z0 < z + sz:
                z1 = min(z + sz, sectorize((0, 0, z0))[2] + SECTOR_SIZE)
                yield x0, x1, z0, z1
                z0 = z1
            x0 = x1

    def set_blocks(self, x, y, z, volume):
        sx, sy, sz = volume.shape
        if y < 0 or y + sy > SECTOR_HEIGHT:
            raise IndexError(f"block heights [{y}, {y + sy}) outside [0, {SECTOR_HEIGHT})")
        for x0, x1, z0, z1 in self._spans(x, z, sx, sz):
            (ox, _, oz), sector = self._sector(x0, z0, create=True)
            part = volume[x0 - x:x1 - x, :, z0 - z:z1 - z]
            target = sector[x0 - ox:x1 - ox, y:y + sy, z0 - oz:z1 - oz]
            mask = part != AIR
            target[mask] = part[mask]

    def set_biomes(self, x, z, biomes):
        sx, sz = biomes.shape
        for x0, x1, z0, z1 in self._spans(x, z, sx, sz):
            (ox, _, oz), target = self._biome_sector(x0, z0)
            target[x0 - ox:x1 - ox, z0 - oz:z1 - oz] = biomes[x0 - x:x1 - x, z0 - z:z1 - z]

    def column(self, x, z):
        """All blocks of world column (x, z) from y=0 upward."""
        (sx, _, sz), sector = self._sector(x, z, create=False)
        if sector is None:
            return numpy.zeros(SECTOR_HEIGHT, dtype=numpy.uint8)
        return sector[x - sx, :, z - sz].copy()

    def bounds(self):
        """(xmin, zmin, xmax, zmax) of allocated sectors, max exclusive; None if empty."""
        if not self.sectors:
            return None
        xs = [k[0] for k in self.sectors]
        zs = [k[2] for k in self.sectors]
        return min(xs), min(zs), max(xs) + SECTOR_SIZE, max(zs) + SECTOR_SIZE
