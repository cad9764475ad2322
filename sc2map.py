'''
sc2map.py -- a decoded city: its chunks plus the terrain and structure models
'''

from types import MappingProxyType

import logutil
from sc2file import (
    read_segments,
    MissingChunkError,
    ALTITUDE_TAG,
    TERRAIN_TAG,
    STRUCTURE_TAG,
)
from terrain import TerrainMap
from structures import StructureGrid

REQUIRED_TAGS = (ALTITUDE_TAG, TERRAIN_TAG, STRUCTURE_TAG)


class SC2Map(object):

    def __init__(self, declared_size, segments, terrain, structures):
        self.declared_size = declared_size
        self._segments = segments
        self.terrain = terrain
        self.structures = structures

    @classmethod
    def load(cls, stream, structure_factory=None):
        """ Decode a city file from a binary stream.

        structure_factory, if given, is called with the expanded XBLD chunk
        and must return a StructureMap. Without one the city has no
        structures.
        """
        declared_size, segments = read_segments(stream)
        for tag, segment in segments.items():
            logutil.log("SC2MAP", repr(segment), level="DEBUG")

        missing = [tag for tag in REQUIRED_TAGS if tag not in segments]
        if missing:
            raise MissingChunkError(f"city file lacks chunk(s): {', '.join(missing)}")

        terrain = TerrainMap(segments[ALTITUDE_TAG].raw, segments[TERRAIN_TAG].data)
        if structure_factory is not None:
            structures = structure_factory(segments[STRUCTURE_TAG].data)
        else:
            structures = StructureGrid()
        return cls(declared_size, segments, terrain, structures)

    @property
    def size(self):
        """ Total size reported for the file: the FORM length field plus 4.

        declared_size is the length field itself, as stored.
        """
        return self.declared_size + 4

    @property
    def segments(self):
        return MappingProxyType(self._segments)

    def get_segment(self, tag):
        """The Segment stored under `tag`, or None."""
        return self._segments.get(tag)


def load_map(path, structure_factory=None):
    logutil.log("SC2MAP", f"Loading {path}")
    with open(path, 'rb') as f:
        return SC2Map.load(f, structure_factory)
