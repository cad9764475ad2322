'''
sc2file.py -- reads the IFF-style chunk container used by SimCity 2000 city files

Layout:
  "FORM"  u32 big-endian length  "SCDH"
  then chunk records until end of file:
  4-byte tag, u32 big-endian payload length, payload

Every chunk except ALTM and CNAM is run-length encoded (see decompress).
'''

import struct

import config

CONTAINER_MAGIC = b'FORM'
MAP_MAGIC = b'SCDH'

# Chunks stored as-is; anything else is compressed.
RAW_TAGS = frozenset(['ALTM', 'CNAM'])

ALTITUDE_TAG = 'ALTM'
TERRAIN_TAG = 'XTER'
STRUCTURE_TAG = 'XBLD'


class DecodeError(IOError):
    pass

class FormatError(DecodeError):
    pass

class TruncatedInputError(DecodeError):
    pass

class CorruptSegmentError(DecodeError):
    pass

class MissingChunkError(DecodeError):
    pass

class SizeError(DecodeError):
    pass


class Segment(object):
    '''
    One chunk of the container. `raw` is the payload exactly as stored in the
    file; `decompressed` is filled in by decompress() for compressed tags.
    '''
    def __init__(self, tag, raw):
        self.tag = tag
        self.raw = bytes(raw)
        self.decompressed = None

    @property
    def compressed(self):
        return is_compressed(self.tag)

    @property
    def data(self):
        """The usable payload: decompressed bytes if available, else raw."""
        if self.decompressed is not None:
            return self.decompressed
        return self.raw

    @property
    def raw_size(self):
        return len(self.raw)

    @property
    def decompressed_size(self):
        if self.decompressed is None:
            return None
        return len(self.decompressed)

    def decompress(self):
        if self.decompressed is None:
            try:
                self.decompressed = decompress(self.raw)
            except CorruptSegmentError as e:
                raise CorruptSegmentError(f"segment '{self.tag}': {e}") from e
        return self.decompressed

    def __repr__(self):
        return f"Segment({self.tag!r}, raw={self.raw_size}, decompressed={self.decompressed_size})"


def is_compressed(tag):
    return tag not in RAW_TAGS


def decompress(data):
    """ Expand a run-length encoded chunk.

    Each run starts with a control byte c:
      1..127   -> the next c bytes are copied literally
      129..255 -> the next byte is repeated c - 127 times
    0 and 128 never occur in valid data.
    Decoding ends exactly when every encoded byte has been consumed.
    """
    out = bytearray()
    size = len(data)
    index = 0
    while index < size:
        count = data[index]
        index += 1
        if count == 0 or count == 128:
            raise CorruptSegmentError(f"invalid control byte {count} at offset {index - 1}")
        if count < 128:
            if index + count > size:
                raise CorruptSegmentError(
                    f"literal run of {count} at offset {index - 1} overruns {size} byte segment")
            out += data[index:index + count]
            index += count
        else:
            if index >= size:
                raise CorruptSegmentError(f"repeat run at offset {index - 1} has no value byte")
            out += bytes((data[index],)) * (count - 127)
            index += 1
    return bytes(out)


def _read_exact(stream, count, what):
    data = stream.read(count)
    if data is None or len(data) < count:
        got = 0 if data is None else len(data)
        raise TruncatedInputError(f"file ended prematurely reading {what} ({got} of {count} bytes)")
    return data


def _read_magic(stream, magic):
    data = stream.read(len(magic))
    if not data or len(data) < len(magic):
        raise FormatError(f"file ended prematurely (expected '{magic.decode('ascii')}')")
    if data != magic:
        raise FormatError(f"invalid header {data!r} (expected '{magic.decode('ascii')}')")


def _read_size(stream, what):
    size, = struct.unpack('>I', _read_exact(stream, 4, f"size of {what}"))
    if size > getattr(config, 'MAX_SEGMENT_SIZE', 2**31 - 1):
        raise SizeError(f"invalid size {size} for {what}")
    return size


def _read_tag(stream):
    """Returns the next chunk tag, or None at a clean end of file."""
    data = stream.read(4)
    if not data:
        return None
    if len(data) < 4:
        raise TruncatedInputError(f"file ended inside a chunk tag ({len(data)} of 4 bytes)")
    return data.decode('latin-1')


def read_segments(stream):
    """ Parse a city file from a binary stream.

    Returns (declared_size, segments) where segments maps tag -> Segment with
    compressed chunks already expanded. A repeated tag replaces the earlier
    chunk.
    """
    _read_magic(stream, CONTAINER_MAGIC)
    declared_size = _read_size(stream, 'container')
    _read_magic(stream, MAP_MAGIC)

    segments = {}
    tag = _read_tag(stream)
    while tag is not None:
        size = _read_size(stream, f"segment '{tag}'")
        segment = Segment(tag, _read_exact(stream, size, f"segment '{tag}'"))
        if segment.compressed:
            segment.decompress()
        segments[tag] = segment
        tag = _read_tag(stream)
    return declared_size, segments


def compress(data):
    """ Encode bytes with the chunk RLE scheme.

    Runs of three or more equal bytes become repeat runs; everything else is
    packed into literal runs of up to 127 bytes.
    """
    data = bytes(data)
    out = bytearray()
    literal = bytearray()
    index = 0
    size = len(data)

    def flush():
        start = 0
        while start < len(literal):
            chunk = literal[start:start + 127]
            out.append(len(chunk))
            out.extend(chunk)
            start += 127
        del literal[:]

    while index < size:
        run = 1
        while index + run < size and run < 128 and data[index + run] == data[index]:
            run += 1
        if run >= 3:
            flush()
            out.append(run + 127)
            out.append(data[index])
            index += run
        else:
            literal.extend(data[index:index + run])
            index += run
    flush()
    return bytes(out)


def write_segments(stream, segments):
    """Write (tag, payload) pairs as a city file container, compressing as needed."""
    body = bytearray(MAP_MAGIC)
    for tag, payload in segments:
        tag_bytes = tag.encode('latin-1')
        if len(tag_bytes) != 4:
            raise FormatError(f"chunk tag {tag!r} is not 4 bytes")
        if is_compressed(tag):
            payload = compress(payload)
        body += tag_bytes + struct.pack('>I', len(payload)) + bytes(payload)
    stream.write(CONTAINER_MAGIC + struct.pack('>I', len(body)) + bytes(body))
