import pytest
from hypothesis import given, strategies as st

from stuntcore.resources import build_resource_file
from stuntcore.shape2d import (
    Shape2DHeader,
    apply_palmap,
    expand_shapes,
    expanded_size,
    get_shape,
    load_esh,
    shape_count,
    shape_offset,
    unflip_shapes,
    unflip_shapes_pes,
    unflip_size,
)


def make_file(*shapes):
    return build_resource_file(
        [(name, header.pack() + bytes(pixels)) for name, header, pixels in shapes]
    )


def column_major(rows):
    height = len(rows)
    width = len(rows[0])
    return bytes(rows[y][x] for x in range(width) for y in range(height))


def test_header_wire_layout():
    header = Shape2DHeader(width=1, height=2, pos_x=3, pos_y=4, attrs=(5, 6, 7, 8))
    assert header.pack() == bytes([1, 0, 2, 0, 0, 0, 0, 0, 3, 0, 4, 0, 5, 6, 7, 8])


def test_header_round_trip():
    header = Shape2DHeader(320, 200, 9, 10, 11, 12, (0x12, 0x34, 0x56, 0x78))
    assert Shape2DHeader.parse(b"xx" + header.pack(), 2) == header


def test_header_rejects_bad_values():
    with pytest.raises(ValueError):
        Shape2DHeader(width=0x10000)
    with pytest.raises(ValueError):
        Shape2DHeader(attrs=(1, 2, 3))


def test_header_parse_truncated():
    with pytest.raises(ValueError):
        Shape2DHeader.parse(b"\0" * 10)


def test_count_and_get_shape():
    h1 = Shape2DHeader(width=2, height=1)
    h2 = Shape2DHeader(width=1, height=3)
    data = make_file(("aaaa", h1, b"\x01\x02"), ("bbbb", h2, b"\x03\x04\x05"))
    assert shape_count(data) == 2
    assert get_shape(data, 0) == (h1, b"\x01\x02")
    assert get_shape(data, 1) == (h2, b"\x03\x04\x05")
    assert shape_offset(data, 1) > shape_offset(data, 0)


def test_shape_offset_out_of_range():
    data = make_file(("aaaa", Shape2DHeader(width=1, height=1), b"\0"))
    with pytest.raises(IndexError):
        shape_offset(data, 1)


def test_shape_count_truncated():
    with pytest.raises(ValueError):
        shape_count(b"\0\0")


def test_unflip_type1_transposes():
    rows = [b"\x01\x02\x03", b"\x04\x05\x06"]
    header = Shape2DHeader(width=3, height=2, attrs=(0, 0, 0x10, 0))
    data = make_file(("shp1", header, column_major(rows)))
    assert get_shape(unflip_shapes(data), 0)[1] == b"".join(rows)


def test_unflip_type2_pairs():
    header = Shape2DHeader(width=2, height=2, attrs=(0, 0, 0x20, 0))
    data = make_file(("shp1", header, b"\x01\x03\x02\x04"))
    assert get_shape(unflip_shapes(data), 0)[1] == b"\x01\x02\x03\x04"


def test_unflip_type3_split_rows():
    rows = [b"ab", b"cd", b"ef"]
    even = column_major([rows[0], rows[2]])
    odd = column_major([rows[1]])
    header = Shape2DHeader(width=2, height=3, attrs=(0, 0, 0x30, 0))
    data = make_file(("shp1", header, even + odd))
    assert get_shape(unflip_shapes(data), 0)[1] == b"abcdef"


@pytest.mark.parametrize("attrs", [(0, 0, 0x00, 0), (0, 0, 0x10, 0x10), (0, 0, 0x40, 0)])
def test_unflip_leaves_other_shapes(attrs):
    header = Shape2DHeader(width=2, height=2, attrs=attrs)
    data = make_file(("shp1", header, b"\x01\x02\x03\x04"))
    assert unflip_shapes(data) == data


@given(
    st.integers(1, 6).flatmap(
        lambda w: st.lists(st.binary(min_size=w, max_size=w), min_size=1, max_size=6)
    )
)
def test_unflip_type1_property(rows):
    header = Shape2DHeader(width=len(rows[0]), height=len(rows), attrs=(0, 0, 0x10, 0))
    data = make_file(("shp1", header, column_major(rows)))
    assert get_shape(unflip_shapes(data), 0)[1] == b"".join(rows)


def test_unflip_pes_selected_planes():
    rows = [b"\x01\x02", b"\x03\x04", b"\x05\x06"]
    plain = b"".join(rows)
    flipped = column_major(rows)
    header = Shape2DHeader(width=2, height=3, attrs=(0, 0, 0x50, 0))
    planes = flipped + flipped + flipped
    data = make_file(("shp1", header, planes))
    out = unflip_shapes_pes(data)
    start = shape_offset(out, 0) + Shape2DHeader.SIZE
    body = out[start:start + 18]
    assert body[0:6] == plain
    assert body[6:12] == flipped
    assert body[12:18] == plain


def test_unflip_pes_truncated_plane():
    header = Shape2DHeader(width=2, height=2, attrs=(0, 0, 0x80, 0))
    data = make_file(("shp1", header, b"\0" * 4))
    with pytest.raises(ValueError):
        unflip_shapes_pes(data)


def test_unflip_size_covers_every_shape():
    shapes = [
        ("a", Shape2DHeader(width=5, height=7), bytes(35)),
        ("b", Shape2DHeader(width=16, height=16), bytes(256)),
    ]
    data = make_file(*shapes)
    size = unflip_size(data)
    assert all(size * 16 >= h.pixel_count for _, h, _ in shapes)


def test_expand_planes():
    header = Shape2DHeader(width=1, height=1, attrs=(0x01, 0x02, 0x00, 0x00))
    data = make_file(("shp1", header, bytes([0b10000001, 0b11000000])))
    out = expand_shapes(data)
    new_header, pixels = get_shape(out, 0)
    assert new_header.width == 8
    assert new_header.height == 1
    assert pixels == bytes([3, 2, 0, 0, 0, 0, 0, 1])


def test_expand_fill_only():
    header = Shape2DHeader(width=2, height=1, attrs=(0x00, 0x50, 0x00, 0x00))
    data = make_file(("shp1", header, b"\xff\xff"))
    _, pixels = get_shape(expand_shapes(data), 0)
    assert pixels == bytes([5]) * 16


def test_expand_keeps_names_and_size_field():
    data = make_file(
        ("ab", Shape2DHeader(width=1, height=1, attrs=(1, 0, 0, 0)), b"\x0f"),
        ("cdef", Shape2DHeader(width=2, height=2, attrs=(2, 0, 0, 0)), b"\xaa\x55\x00\xff"),
    )
    out = expand_shapes(data)
    assert out[4:6 + 4 * 2] == data[4:6 + 4 * 2]
    assert int.from_bytes(out[:4], "little") == len(out)
    assert expanded_size(data) * 16 >= len(out)


def test_apply_palmap_reverse_twice():
    header = Shape2DHeader(width=4, height=1)
    data = make_file(("shp1", header, b"\x00\x05\x0a\x0f"))
    reverse = list(range(15, -1, -1))
    once = apply_palmap(data, reverse)
    assert get_shape(once, 0)[1] == b"\x0f\x0a\x05\x00"
    assert apply_palmap(once, reverse) == data


def test_apply_palmap_rejects_pixel_outside_map():
    header = Shape2DHeader(width=1, height=1)
    data = make_file(("shp1", header, b"\x20"))
    with pytest.raises(ValueError):
        apply_palmap(data, range(16))


def test_load_esh_applies_palmap():
    palmap = bytes([9] + list(range(1, 16)))
    pal_header = Shape2DHeader(width=16, height=1)
    shape = Shape2DHeader(width=1, height=1, attrs=(0, 0, 0, 0))
    data = make_file(("!MGA", pal_header, palmap), ("shp1", shape, b"\xff"))
    out = load_esh(data)
    assert get_shape(out, 1)[1] == bytes([9]) * 8
    assert get_shape(out, 0)[1] == bytes([9]) * 128


def test_load_esh_without_palmap_is_plain_expansion():
    shape = Shape2DHeader(width=1, height=1, attrs=(0x03, 0x00, 0, 0))
    data = make_file(("shp1", shape, b"\xf0"))
    assert load_esh(data) == expand_shapes(data)
    assert get_shape(load_esh(data), 0)[1] == bytes([3, 3, 3, 3, 0, 0, 0, 0])