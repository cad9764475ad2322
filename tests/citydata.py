"""Builders for synthetic city files used across the tests."""
import io
import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import GRID_SIZE
from sc2file import write_segments
from terrain import storage_index, TerrainMap


def layers(altitude=0, water=0, code=0x00, tiles=None):
    """ ALTM and XTER payloads for a map filled with one tile kind.

    tiles maps (x, y) -> (altitude, water, code) overrides in logical
    coordinates.
    """
    alt = np.full((GRID_SIZE, GRID_SIZE), altitude, dtype=np.int32)
    wat = np.full((GRID_SIZE, GRID_SIZE), water, dtype=np.int32)
    codes = np.full((GRID_SIZE, GRID_SIZE), code, dtype=np.int32)
    for (x, y), (a, w, c) in (tiles or {}).items():
        alt[x, y] = a
        wat[x, y] = w
        codes[x, y] = c
    xs, ys = np.mgrid[0:GRID_SIZE, 0:GRID_SIZE]
    index = storage_index(xs, ys)
    words = np.zeros(GRID_SIZE * GRID_SIZE, dtype='>u2')
    words[index] = alt | (wat << 5)
    flat_codes = np.zeros(GRID_SIZE * GRID_SIZE, dtype=np.uint8)
    flat_codes[index] = codes
    return words.tobytes(), flat_codes.tobytes()


def terrain_map(**kwargs):
    altm, xter = layers(**kwargs)
    return TerrainMap(altm, xter)


def city_file(altitude=0, water=0, code=0x00, tiles=None, xbld=b"\x00" * (GRID_SIZE * GRID_SIZE),
              extra=(), skip=()):
    """A complete city file as a BytesIO positioned at the start."""
    altm, xter = layers(altitude, water, code, tiles)
    chunks = [("CNAM", b"\x0bTest City\x00"), ("ALTM", altm), ("XTER", xter), ("XBLD", xbld)]
    chunks = [c for c in chunks if c[0] not in skip] + list(extra)
    stream = io.BytesIO()
    write_segments(stream, chunks)
    stream.seek(0)
    return stream
