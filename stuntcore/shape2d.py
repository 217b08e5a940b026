"""2D shape resources: headers, unflipping, planar expansion and palette mapping.

A shape file uses the resource layout (32-bit size, 16-bit count, 4-byte
names, 32-bit offsets, data). Each entry is a 16-byte header followed by
its bitmap. All functions take the file as bytes and return new bytes.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace

from stuntcore.resources import ResourceKind, locate_resource

_HEADER = struct.Struct("<6H4B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_MAX_EXPAND = 8000
PALMAP_NAME = "!MGA"
PALMAP_SIZE = 0x10


@dataclass(frozen=True)
class Shape2DHeader:
    """The 16-byte header in front of every shape bitmap.

    ``attrs`` holds the four trailing attribute bytes. Their low nibbles
    are the colour patterns of the bit planes in planar shapes, the high
    nibble of the second is the background colour and that of the third
    is the storage order of the bitmap.
    """

    width: int = 0
    height: int = 0
    unk1: int = 0
    unk2: int = 0
    pos_x: int = 0
    pos_y: int = 0
    attrs: tuple[int, int, int, int] = field(default=(0, 0, 0, 0))

    SIZE = _HEADER.size

    def __post_init__(self) -> None:
        attrs = tuple(self.attrs)
        if len(attrs) != 4:
            raise ValueError("a shape header has exactly 4 attribute bytes")
        for value in (self.width, self.height, self.unk1, self.unk2, self.pos_x, self.pos_y):
            if not 0 <= value <= 0xFFFF:
                raise ValueError("header word out of range")
        if any(not 0 <= a <= 0xFF for a in attrs):
            raise ValueError("header attribute byte out of range")
        object.__setattr__(self, "attrs", attrs)

    @classmethod
    def parse(cls, data, offset: int = 0) -> Shape2DHeader:
        """Read a header from ``data`` at ``offset``."""
        if offset < 0 or offset + _HEADER.size > len(data):
            raise ValueError("shape header lies outside the data")
        values = _HEADER.unpack_from(data, offset)
        return cls(*values[:6], attrs=tuple(values[6:]))

    def pack(self) -> bytes:
        """The header's 16 bytes."""
        return _HEADER.pack(
            self.width, self.height, self.unk1, self.unk2, self.pos_x, self.pos_y, *self.attrs
        )

    @property
    def pixel_count(self) -> int:
        """Number of bitmap bytes described by width and height."""
        return self.width * self.height

    @property
    def flip_type(self) -> int:
        """Storage order of the bitmap (0 means plain row order)."""
        return self.attrs[2] >> 4


def shape_count(data) -> int:
    """Number of shapes in the file."""
    if len(data) < 6:
        raise ValueError("shape data is shorter than its header")
    return _U16.unpack_from(data, 4)[0]


def shape_offset(data, index: int) -> int:
    """Offset into ``data`` of the header of shape ``index``."""
    count = shape_count(data)
    if not 0 <= index < count:
        raise IndexError("shape index out of range")
    table = 6 + 4 * count + 4 * index
    if table + 4 > len(data):
        raise ValueError("shape data is shorter than its offset table")
    (chunk_offset,) = _U32.unpack_from(data, table)
    return 6 + 8 * count + chunk_offset


def _bitmap(data, start: int, length: int) -> bytes:
    if start + length > len(data):
        raise ValueError("shape bitmap lies outside the data")
    return bytes(data[start:start + length])


def _iter_shapes(data) -> Iterator[tuple[int, Shape2DHeader]]:
    for index in range(shape_count(data)):
        offset = shape_offset(data, index)
        yield offset, Shape2DHeader.parse(data, offset)


def get_shape(data, index: int) -> tuple[Shape2DHeader, bytes]:
    """Header and bitmap (width * height bytes) of shape ``index``."""
    offset = shape_offset(data, index)
    header = Shape2DHeader.parse(data, offset)
    return header, _bitmap(data, offset + Shape2DHeader.SIZE, header.pixel_count)


def _transpose(src: bytes, width: int, height: int) -> bytes:
    """Column-major ``width`` x ``height`` pixels to row order."""
    return b"".join(src[y::height] for y in range(height))


def _unflip_interlaced(src: bytes, width: int, height: int) -> bytes:
    rows = []
    for j in range(0, height, 2):
        rows.append(src[j // 2::height][:width])
        if j + 1 < height:
            rows.append(src[(height + j + 1) // 2::height][:width])
    return b"".join(rows)


def _unflip_split(src: bytes, width: int, height: int) -> bytes:
    even = (height + 1) // 2
    odd = height // 2
    even_block = src[:width * even]
    odd_block = src[width * even:]
    rows = []
    for r in range(height):
        k = r // 2
        if r % 2 == 0:
            rows.append(even_block[k::even][:width])
        else:
            rows.append(odd_block[k::odd][:width])
    return b"".join(rows)


_UNFLIPPERS = {1: _transpose, 2: _unflip_interlaced, 3: _unflip_split}


def unflip_shapes(data) -> bytes:
    """Reorder every stored-flipped bitmap into plain row order.

    Flip type 1 is column-major, 2 interleaves rows in pairs and 3 keeps
    the even rows and the odd rows in two column-major blocks. Shapes
    whose fourth attribute has a high nibble are left alone.
    """
    out = bytearray(data)
    for offset, header in _iter_shapes(data):
        if header.attrs[3] & 0xF0:
            continue
        unflip = _UNFLIPPERS.get(header.flip_type)
        if unflip is None:
            continue
        n = header.pixel_count
        if n == 0:
            continue
        start = offset + Shape2DHeader.SIZE
        src = _bitmap(data, start, n)
        out[start:start + n] = unflip(src, header.width, header.height)
    return bytes(out)


def unflip_shapes_pes(data) -> bytes:
    """Transpose the flipped bit planes of planar shapes.

    Each of the four bits of the third attribute's high nibble marks one
    consecutive plane of width * height bytes as stored column-major.
    """
    out = bytearray(data)
    for offset, header in _iter_shapes(data):
        if header.attrs[3] & 0xF0:
            continue
        planes = header.flip_type & 0x0F
        n = header.pixel_count
        start = offset + Shape2DHeader.SIZE
        for plane in range(4):
            if planes & 1 and n:
                begin = start + plane * n
                src = _bitmap(data, begin, n)
                out[begin:begin + n] = _transpose(src, header.width, header.height)
            planes >>= 1
    return bytes(out)


def unflip_size(data) -> int:
    """Paragraphs of scratch space needed to unflip the largest shape."""
    size = 0
    for _, header in _iter_shapes(data):
        size = max(size, (((header.pixel_count & 0xFFFF) + 0x20) & 0xFFFF) >> 4)
    return size


def expanded_size(data) -> int:
    """Paragraphs needed to hold the file once its shapes are expanded."""
    count = shape_count(data)
    size = count * 8 + Shape2DHeader.SIZE
    for _, header in _iter_shapes(data):
        size += header.pixel_count * 8 + Shape2DHeader.SIZE
    return (size + Shape2DHeader.SIZE) >> 4


def _expand_bitmap(data, start: int, header: Shape2DHeader) -> bytes:
    length = header.pixel_count
    if not 0 < length <= _MAX_EXPAND:
        return bytes(length * 8)
    bitmap = bytearray([header.attrs[1] >> 4]) * (length * 8)
    for attr in header.attrs:
        pattern = attr & 0x0F
        if not pattern:
            break
        plane = _bitmap(data, start, length)
        start += length
        for k, px in enumerate(plane):
            base = k * 8
            for bit in range(8):
                if px & (0x80 >> bit):
                    bitmap[base + bit] |= pattern
    return bytes(bitmap)


def expand_shapes(data) -> bytes:
    """Turn 1-bit planar shapes into one byte per pixel.

    Every source byte becomes eight pixels, so widths grow eightfold.
    Pixels start as the background colour and each plane ORs its colour
    pattern into the pixels whose bit is set; a zero pattern ends the
    planes. Shapes that are empty or over 8000 bytes get a blank bitmap.
    """
    count = shape_count(data)
    ids_end = 6 + 4 * count
    if ids_end > len(data):
        raise ValueError("shape data is shorter than its name table")
    offsets = bytearray()
    bodies = bytearray()
    for offset, header in _iter_shapes(data):
        offsets += _U32.pack(len(bodies))
        widened = replace(header, width=(header.width * 8) & 0xFFFF)
        bodies += widened.pack()
        bodies += _expand_bitmap(data, offset + Shape2DHeader.SIZE, header)
    total = 6 + 8 * count + len(bodies)
    return _U32.pack(total) + bytes(data[4:ids_end]) + bytes(offsets) + bytes(bodies)


def apply_palmap(data, palmap: Sequence[int]) -> bytes:
    """Replace every pixel of every shape by ``palmap[pixel]``."""
    table = bytes(palmap)
    out = bytearray(data)
    for offset, header in _iter_shapes(data):
        start = offset + Shape2DHeader.SIZE
        pixels = _bitmap(data, start, header.pixel_count)
        if pixels and max(pixels) >= len(table):
            raise ValueError("pixel value outside the palette map")
        out[start:start + len(pixels)] = bytes(table[p] for p in pixels)
    return bytes(out)


def load_esh(data) -> bytes:
    """Expand a planar shape file and apply its ``!MGA`` palette map if present."""
    palmap = None
    entry = locate_resource(data, PALMAP_NAME, ResourceKind.OPTIONAL)
    if entry is not None:
        palmap = _bitmap(data, entry + Shape2DHeader.SIZE, PALMAP_SIZE)
    expanded = expand_shapes(data)
    if palmap is not None:
        expanded = apply_palmap(expanded, palmap)
    return expanded