from config import SECTOR_SIZE, GRID_SIZE, GRID_SCALE


def normalize(position):
    """ Accepts `position` of arbitrary precision and returns the block
    containing that position.

    Parameters
    ----------
    position : tuple of len 3

    Returns
    -------
    block_position : tuple of ints of len 3

    """
    x, y, z = position
    x, y, z = (int(round(x)), int(round(y)), int(round(z)))
    return (x, y, z)


def sectorize(position):
    """ Returns a tuple representing the sector for the given `position`.

    Parameters
    ----------
    position : tuple of len 3

    Returns
    -------
    sector : tuple of len 3

    """
    x, y, z = normalize(position)
    x, y, z = x // SECTOR_SIZE, y // SECTOR_SIZE, z // SECTOR_SIZE
    return (x*SECTOR_SIZE, 0, z*SECTOR_SIZE)


def tile_origin(p0):
    """ World coordinate of the first block column of tile row/column `p0`.

    The map is centered on the world origin, so tile GRID_SIZE/2 starts at 0.
    """
    return (p0 - (GRID_SIZE >> 1)) * GRID_SCALE


def world_to_tile(p):
    """Continuous tile-space coordinate of the center of world column `p`."""
    return (GRID_SIZE >> 1) + (p + 0.5) / GRID_SCALE
