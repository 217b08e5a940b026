"""Track grid tables, the track data block layout and race start positions.

The track is a 30 x 30 grid of 1024-unit tiles. Row 0 of the track map
is the northern edge, so track rows count downwards while terrain rows
count upwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from functools import cache

from stuntcore.fixedmath import Vector, cos_fast, multiply_and_scale, sin_fast

GRID_SIZE = 30
TILE_SHIFT = 10
TILE_HALF = 0x200
AERO_ENTRIES = 0x40
CAMERA_HEIGHT = 960
WORLD_SCALE = 64

_LAYOUT = (
    ("td01_track_file_cpy", 0x70A),
    ("td02_penalty_related", 0x70A),
    ("trackdata3", 0x70A),
    ("td04_aerotable_pl", 0x80),
    ("td05_aerotable_op", 0x80),
    ("trackdata6", 0x80),
    ("trackdata7", 0x80),
    ("td08_direction_related", 0x60),
    ("trackdata9", 0x180),
    ("td10_track_check_rel", 0x120),
    ("td11_highscores", 0x16C),
    ("trackdata12", 0xF0),
    ("td13_rpl_header", 0x1A),
    ("td14_elem_map_main", 0x385),
    ("td15_terr_map_main", 0x385),
    ("td16_rpl_buffer", 0x2EE0),
    ("td17_trk_elem_ordered", 0x385),
    ("trackdata18", 0x385),
    ("trackdata19", 0x385),
    ("td20_trk_file_appnd", 0x7AC),
    ("td21_col_from_path", 0x385),
    ("td22_row_from_path", 0x385),
    ("trackdata23", 0x30),
)


def _s16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


@dataclass(frozen=True)
class RowTables:
    """Per-row and per-column lookup tables for the track grid.

    ``track_rows`` and ``terrain_rows`` are offsets of a row into the
    track and terrain maps; the ``*_pos`` tables give world coordinates
    of tile edges and the ``*_center_pos`` tables those of tile centres.
    """

    track_rows: tuple[int, ...]
    terrain_rows: tuple[int, ...]
    track_pos: tuple[int, ...]
    track_pos2: tuple[int, ...]
    track_center_pos: tuple[int, ...]
    terrain_pos: tuple[int, ...]
    terrain_center_pos: tuple[int, ...]
    track_center_pos2: tuple[int, ...]


@cache
def build_row_tables() -> RowTables:
    """The grid lookup tables for all 30 rows and columns."""
    indices = range(GRID_SIZE)
    last = GRID_SIZE - 1
    return RowTables(
        track_rows=tuple(GRID_SIZE * (last - i) for i in indices),
        terrain_rows=tuple(GRID_SIZE * i for i in indices),
        track_pos=tuple((last - i) << TILE_SHIFT for i in indices),
        track_pos2=tuple(i << TILE_SHIFT for i in indices),
        track_center_pos=tuple(((last - i) << TILE_SHIFT) + TILE_HALF for i in indices),
        terrain_pos=tuple(i << TILE_SHIFT for i in indices),
        terrain_center_pos=tuple((i << TILE_SHIFT) + TILE_HALF for i in indices),
        track_center_pos2=tuple((i << TILE_SHIFT) + TILE_HALF for i in indices),
    )


@dataclass(frozen=True)
class TrackDataLayout:
    """Placement of the named tables inside the track data block.

    ``regions`` holds ``(name, offset, size)`` in block order.
    """

    regions: tuple[tuple[str, int, int], ...]

    @property
    def total_size(self) -> int:
        """Size of the whole block in bytes."""
        if not self.regions:
            return 0
        _, offset, size = self.regions[-1]
        return offset + size

    def __iter__(self) -> Iterator[tuple[str, int, int]]:
        return iter(self.regions)

    def __len__(self) -> int:
        return len(self.regions)

    def _lookup(self, name: str) -> tuple[int, int]:
        for region_name, offset, size in self.regions:
            if region_name == name:
                return offset, size
        raise KeyError(name)

    def offset(self, name: str) -> int:
        """Byte offset of the table ``name``."""
        return self._lookup(name)[0]

    def size(self, name: str) -> int:
        """Byte size of the table ``name``."""
        return self._lookup(name)[1]

    def slice(self, name: str) -> slice:
        """Slice selecting the table ``name`` from the block."""
        offset, size = self._lookup(name)
        return slice(offset, offset + size)


@cache
def trackdata_layout() -> TrackDataLayout:
    """The layout of the track data block."""
    regions = []
    offset = 0
    for name, size in _LAYOUT:
        regions.append((name, offset, size))
        offset += size
    return TrackDataLayout(tuple(regions))


def aero_table(aero_resistance: int) -> list[int]:
    """Air resistance for each of the 64 speed steps of a car.

    Entry ``i`` is ``aero_resistance * i * i`` divided by 512, kept as a
    16-bit signed value.
    """
    return [_s16((aero_resistance * i * i) >> 9) for i in range(AERO_ENTRIES)]


def _car_position(
    track_angle: int, side: int, col_center: int, row_center: int, hill_height: int
) -> tuple[int, int, int]:
    dx = _s16(
        multiply_and_scale(sin_fast(track_angle + 0x200), 210)
        + multiply_and_scale(sin_fast(track_angle + side), 36)
    )
    dz = _s16(
        multiply_and_scale(cos_fast(track_angle + 0x200), 210)
        + multiply_and_scale(cos_fast(track_angle + side), 36)
    )
    return (
        _s16(col_center + dx) * WORLD_SCALE,
        hill_height * WORLD_SCALE,
        _s16(row_center + dz) * WORLD_SCALE,
    )


def start_position(
    track_angle: int, startcol: int, startrow: int, hill_height: int
) -> tuple[Vector, tuple[int, int, int], tuple[int, int, int]]:
    """Where the race begins on the start tile.

    Returns ``(camera, player, opponent)``: the camera position as a
    Vector in world units, and the two cars' ground positions in world
    units times 64, standing side by side on the start line.
    """
    if not 0 <= startcol < GRID_SIZE or not 0 <= startrow < GRID_SIZE:
        raise ValueError("start tile lies outside the track grid")
    tables = build_row_tables()

    camera = Vector(
        _s16(
            multiply_and_scale(sin_fast(track_angle + 0x300), 512)
            + multiply_and_scale(sin_fast(track_angle + 0x200), 4096)
            + (startcol << TILE_SHIFT)
        ),
        _s16(hill_height + CAMERA_HEIGHT),
        _s16(
            multiply_and_scale(cos_fast(track_angle + 0x300), 512)
            + multiply_and_scale(cos_fast(track_angle + 0x200), 4096)
            + tables.track_pos[startrow]
        ),
    )
    col_center = tables.track_center_pos2[startcol]
    row_center = tables.track_center_pos[startrow]
    player = _car_position(track_angle, 0x100, col_center, row_center, hill_height)
    opponent = _car_position(track_angle, 0x300, col_center, row_center, hill_height)
    return camera, player, opponent


def to_upper(ch: int | str) -> int | str:
    """Upper-case a character code the way the game does.

    Only ``a`` to ``y`` are converted; ``z`` is left as it is. A
    one-character string gives a string back.
    """
    if isinstance(ch, str):
        if len(ch) != 1:
            raise ValueError("expected a single character")
        return chr(to_upper(ord(ch)))
    if ord("a") <= ch < ord("z"):
        ch -= 0x20
    return ch