import numpy


class Block(object):
    name = None
    # Opaque blocks hide the faces of their neighbors; roots resting against
    # them count as buried.
    opaque = True
    solid = True

class Bedrock(Block):
    name = 'Bedrock'

class Stone(Block):
    name = 'Stone'

class Dirt(Block):
    name = 'Dirt'

class Sandstone(Block):
    name = 'Sandstone'

class Water(Block):
    name = 'Water'
    opaque = False
    solid = False

class FallingWater(Water):
    # Flowing water drawn on the rim of a waterfall shaft.
    name = 'Falling Water'

class Wood(Block):
    name = 'Wood'

class Leaves(Block):
    name = 'Leaves'
    opaque = False

class Shrub(Block):
    name = 'Shrub'
    opaque = False
    solid = False

# Explicit ordering keeps block IDs stable; 0 is reserved for air.
BLOCKS = [
    Bedrock,
    Stone,
    Dirt,
    Sandstone,
    Water,
    FallingWater,
    Wood,
    Leaves,
    Shrub,
]
AIR = 0
i = 1
BLOCK_ID = {}
for x in BLOCKS:
    BLOCK_ID[x.name] = i
    i+=1
BLOCK_NAME = ['Air'] + [x.name for x in BLOCKS]
BLOCK_OPAQUE = numpy.array([False]+[x.opaque for x in BLOCKS], dtype = numpy.uint8)
BLOCK_SOLID = numpy.array([False]+[x.solid for x in BLOCKS], dtype = numpy.uint8)

BEDROCK = BLOCK_ID['Bedrock']
STONE = BLOCK_ID['Stone']
DIRT = BLOCK_ID['Dirt']
SANDSTONE = BLOCK_ID['Sandstone']
WATER = BLOCK_ID['Water']
FALLING_WATER = BLOCK_ID['Falling Water']
WOOD = BLOCK_ID['Wood']
LEAVES = BLOCK_ID['Leaves']
SHRUB = BLOCK_ID['Shrub']


def is_opaque(block):
    return bool(BLOCK_OPAQUE[block])


# Biome indices (uint8 per column). Values follow the Minecraft biome ids so
# a world writer can store them unchanged.
BIOME_ID = {
    'Forest': 4,
}
FOREST = BIOME_ID['Forest']
