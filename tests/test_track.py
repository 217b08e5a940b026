import pytest
from hypothesis import given, strategies as st

from stuntcore.track import (
    RowTables,
    TrackDataLayout,
    aero_table,
    build_row_tables,
    start_position,
    to_upper,
    trackdata_layout,
)


def test_row_tables_have_thirty_entries():
    tables = build_row_tables()
    assert isinstance(tables, RowTables)
    for field in (
        tables.track_rows,
        tables.terrain_rows,
        tables.track_pos,
        tables.track_pos2,
        tables.track_center_pos,
        tables.terrain_pos,
        tables.terrain_center_pos,
        tables.track_center_pos2,
    ):
        assert len(field) == 30


def test_track_rows_mirror_terrain_rows():
    tables = build_row_tables()
    assert tables.track_rows == tuple(reversed(tables.terrain_rows))
    assert tables.terrain_rows[0] == 0
    assert tables.terrain_rows[1] - tables.terrain_rows[0] == 30


def test_center_tables_are_half_a_tile_in():
    tables = build_row_tables()
    assert all(c - p == 0x200 for c, p in zip(tables.track_center_pos, tables.track_pos))
    assert all(c - p == 0x200 for c, p in zip(tables.terrain_center_pos, tables.terrain_pos))
    assert tables.track_center_pos2 == tables.terrain_center_pos
    assert tables.terrain_pos == tables.track_pos2
    assert tables.track_pos == tuple(reversed(tables.track_pos2))


def test_layout_total_matches_block_size():
    layout = trackdata_layout()
    assert isinstance(layout, TrackDataLayout)
    assert layout.total_size == 0x6BF3


def test_layout_regions_are_contiguous_and_unique():
    layout = trackdata_layout()
    regions = list(layout)
    assert regions[0][1] == 0
    for (_, off, size), (_, next_off, _) in zip(regions, regions[1:]):
        assert off + size == next_off
    names = [name for name, _, _ in regions]
    assert len(set(names)) == len(names) == len(layout)


def test_layout_lookup():
    layout = trackdata_layout()
    assert layout.size("td14_elem_map_main") == 0x385
    assert layout.size("td16_rpl_buffer") == 0x2EE0
    assert layout.offset("trackdata23") == layout.total_size - 0x30
    s = layout.slice("td15_terr_map_main")
    assert s.start == layout.offset("td15_terr_map_main")
    assert s.stop - s.start == 0x385
    assert layout.offset("td15_terr_map_main") == s.start
    assert layout.offset("td14_elem_map_main") + 0x385 == s.start


def test_layout_unknown_name():
    with pytest.raises(KeyError):
        trackdata_layout().offset("nope")


def test_aero_table_zero_resistance():
    assert aero_table(0) == [0] * 64


def test_aero_table_unit_scale_gives_squares():
    table = aero_table(512)
    assert len(table) == 64
    assert all(value == i * i for i, value in enumerate(table))


@given(st.integers(min_value=0, max_value=100))
def test_aero_table_is_monotonic(resistance):
    table = aero_table(resistance)
    assert table[0] == 0
    assert all(a <= b for a, b in zip(table, table[1:]))


def test_start_position_camera_height():
    camera, _, _ = start_position(0, 5, 7, 100)
    assert camera.y == 100 + 960


def test_start_position_cars_side_by_side_at_angle_zero():
    tables = build_row_tables()
    _, player, opponent = start_position(0, 5, 7, 0)
    assert player[0] + opponent[0] == 2 * tables.track_center_pos2[5] * 64
    assert player[2] == opponent[2]
    assert player[1] == opponent[1] == 0
    assert player[0] != opponent[0]


def test_start_position_hill_height_scaled():
    _, player, opponent = start_position(0x100, 3, 3, 450)
    assert player[1] == opponent[1] == 450 * 64


@given(
    st.integers(min_value=0, max_value=0x3FF),
    st.integers(min_value=0, max_value=28),
    st.integers(min_value=0, max_value=29),
)
def test_start_position_moves_with_column(angle, col, row):
    cam_a, player_a, opp_a = start_position(angle, col, row, 0)
    cam_b, player_b, opp_b = start_position(angle, col + 1, row, 0)
    assert cam_b.x - cam_a.x == 1024
    assert cam_b.z == cam_a.z
    assert player_b[0] - player_a[0] == 1024 * 64
    assert opp_b[0] - opp_a[0] == 1024 * 64
    assert player_b[2] == player_a[2]


@pytest.mark.parametrize("col,row", [(30, 0), (0, 30), (-1, 0), (0, -1)])
def test_start_position_outside_grid(col, row):
    with pytest.raises(ValueError):
        start_position(0, col, row, 0)


def test_to_upper_letters():
    assert to_upper("a") == "A"
    assert to_upper("y") == "Y"
    assert to_upper(ord("m")) == ord("M")


def test_to_upper_leaves_z_and_others():
    assert to_upper("z") == "z"
    assert to_upper("5") == "5"
    assert to_upper("Q") == "Q"
    assert to_upper(ord("z")) == ord("z")


def test_to_upper_rejects_long_string():
    with pytest.raises(ValueError):
        to_upper("ab")