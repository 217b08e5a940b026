"""Fixed-point trigonometry, matrices and projection in 1.14 format.

Angles are 10-bit (0x400 is a full turn) and 0x4000 stands for 1.0.
Results are wrapped to 16-bit signed integers like the game's data.
"""

from __future__ import annotations

from dataclasses import dataclass

ONE = 0x4000
OFFSCREEN = -0x8000
FAR_EDGE = 0x7D00

_SINTAB = (
    0, 101, 201, 302, 402, 503, 603, 704, 804, 904,
    1005, 1105, 1205, 1306, 1406, 1506, 1606, 1706, 1806, 1906,
    2006, 2105, 2205, 2305, 2404, 2503, 2603, 2702, 2801, 2900,
    2999, 3098, 3196, 3295, 3393, 3492, 3590, 3688, 3786, 3883,
    3981, 4078, 4176, 4273, 4370, 4467, 4563, 4660, 4756, 4852,
    4948, 5044, 5139, 5235, 5330, 5425, 5520, 5614, 5708, 5803,
    5897, 5990, 6084, 6177, 6270, 6363, 6455, 6547, 6639, 6731,
    6823, 6914, 7005, 7096, 7186, 7276, 7366, 7456, 7545, 7635,
    7723, 7812, 7900, 7988, 8076, 8163, 8250, 8337, 8423, 8509,
    8595, 8680, 8765, 8850, 8935, 9019, 9102, 9186, 9269, 9352,
    9434, 9516, 9598, 9679, 9760, 9841, 9921, 10001, 10080, 10159,
    10238, 10316, 10394, 10471, 10549, 10625, 10702, 10778, 10853, 10928,
    11003, 11077, 11151, 11224, 11297, 11370, 11442, 11514, 11585, 11656,
    11727, 11797, 11866, 11935, 12004, 12072, 12140, 12207, 12274, 12340,
    12406, 12472, 12537, 12601, 12665, 12729, 12792, 12854, 12916, 12978,
    13039, 13100, 13160, 13219, 13279, 13337, 13395, 13453, 13510, 13567,
    13623, 13678, 13733, 13788, 13842, 13896, 13949, 14001, 14053, 14104,
    14155, 14206, 14256, 14305, 14354, 14402, 14449, 14497, 14543, 14589,
    14635, 14680, 14724, 14768, 14811, 14854, 14896, 14937, 14978, 15019,
    15059, 15098, 15137, 15175, 15213, 15250, 15286, 15322, 15357, 15392,
    15426, 15460, 15493, 15525, 15557, 15588, 15619, 15649, 15679, 15707,
    15736, 15763, 15791, 15817, 15843, 15868, 15893, 15917, 15941, 15964,
    15986, 16008, 16029, 16049, 16069, 16088, 16107, 16125, 16143, 16160,
    16176, 16192, 16207, 16221, 16235, 16248, 16261, 16273, 16284, 16295,
    16305, 16315, 16324, 16332, 16340, 16347, 16353, 16359, 16364, 16369,
    16373, 16376, 16379, 16381, 16383, 16384, 16384,
)


def _s16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _s32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@dataclass(frozen=True)
class Vector:
    """A 3D vector of 16-bit integer components."""

    x: int = 0
    y: int = 0
    z: int = 0


@dataclass(frozen=True)
class Matrix:
    """A 3x3 fixed-point matrix.

    ``vals`` is kept in storage order ``_11, _21, _31, _12, _22, _32,
    _13, _23, _33``; index with ``m[row, col]`` (zero based).
    """

    vals: tuple[int, ...]

    def __post_init__(self) -> None:
        vals = tuple(self.vals)
        if len(vals) != 9:
            raise ValueError("a matrix has exactly 9 values")
        object.__setattr__(self, "vals", vals)

    @staticmethod
    def identity() -> Matrix:
        """The fixed-point identity matrix."""
        return Matrix((ONE, 0, 0, 0, ONE, 0, 0, 0, ONE))

    @classmethod
    def from_rows(cls, rows) -> Matrix:
        """Build a matrix from three rows of three values."""
        rows = [tuple(r) for r in rows]
        if len(rows) != 3 or any(len(r) != 3 for r in rows):
            raise ValueError("expected three rows of three values")
        return cls(tuple(rows[row][col] for col in range(3) for row in range(3)))

    def __getitem__(self, key: tuple[int, int]) -> int:
        row, col = key
        if not (0 <= row < 3 and 0 <= col < 3):
            raise IndexError("matrix index out of range")
        return self.vals[col * 3 + row]


@dataclass(frozen=True)
class Projection:
    """Screen projection parameters: centre and per-axis scale."""

    center_x: int
    center_y: int
    scale_x: int
    scale_y: int


def sin_fast(angle: int) -> int:
    """Sine of a 10-bit angle, scaled by 0x4000."""
    s = angle & 0xFFFF
    c = s & 0xFF
    quadrant = (s >> 8) & 3
    if quadrant == 0:
        return _SINTAB[c]
    if quadrant == 1:
        return _SINTAB[0x100 - c]
    if quadrant == 2:
        return -_SINTAB[c]
    return -_SINTAB[0x100 - c]


def cos_fast(angle: int) -> int:
    """Cosine of a 10-bit angle, scaled by 0x4000."""
    return sin_fast((angle + 0x100) & 0xFFFF)


def multiply_and_scale(a: int, b: int) -> int:
    """Multiply a 1.14 value by an integer, rounding to the nearest."""
    mul = _s32(_s16(a) * _s16(b) * 4)
    return _s16((mul >> 16) + ((mul & 0x8000) >> 15))


def mat_mul_vector(vec: Vector, mat: Matrix) -> Vector:
    """Transform ``vec`` by ``mat``; each product term is scaled separately."""
    v = (vec.x, vec.y, vec.z)
    comps = [
        _s16(sum((mat[row, col] * v[col]) >> 14 for col in range(3)))
        for row in range(3)
    ]
    return Vector(*comps)


def mat_multiply(rmat: Matrix, lmat: Matrix) -> Matrix:
    """Combine two matrices so that ``rmat`` is applied to vectors first."""
    r = rmat.vals
    l_ = lmat.vals
    out = tuple(
        _s16(sum((r[3 * i + k] * l_[3 * k + j]) >> 14 for k in range(3)))
        for i in range(3)
        for j in range(3)
    )
    return Matrix(out)


def mat_transpose(mat: Matrix) -> Matrix:
    """Transpose, which inverts a pure rotation matrix."""
    return Matrix(tuple(mat[col, row] for col in range(3) for row in range(3)))


def mat_rot_x(angle: int) -> Matrix:
    """Rotation about the x axis."""
    c = cos_fast(angle)
    s = sin_fast(angle)
    return Matrix((ONE, 0, 0, 0, c, s, 0, -s, c))


def mat_rot_y(angle: int) -> Matrix:
    """Rotation about the y axis."""
    c = cos_fast(angle)
    s = sin_fast(angle)
    return Matrix((c, 0, -s, 0, ONE, 0, s, 0, c))


def mat_rot_z(angle: int) -> Matrix:
    """Rotation about the z axis."""
    c = cos_fast(angle)
    s = sin_fast(angle)
    return Matrix((c, s, 0, -s, c, 0, 0, 0, ONE))


def mat_rot_zxy(z: int, x: int, y: int, y_first: bool = False) -> Matrix:
    """Combined rotation.

    By default vectors are rotated about z, then x, then y; with
    ``y_first`` the order is y, x, z.
    """
    zrot = mat_rot_z(z)
    xrot = mat_rot_x(x)
    yrot = mat_rot_y(y)
    if y_first:
        return mat_multiply(mat_multiply(yrot, xrot), zrot)
    return mat_multiply(mat_multiply(zrot, xrot), yrot)


def vector_to_point(vec: Vector, projection: Projection) -> tuple[int, int]:
    """Project a camera-space vector to screen coordinates ``(x, y)``.

    Points at or behind the camera give ``(OFFSCREEN, OFFSCREEN)``; points
    too far to the side are pinned at +/- ``FAR_EDGE``.
    """
    if vec.z <= 0:
        return OFFSCREEN, OFFSCREEN

    proj = abs(vec.x) * projection.scale_x
    comp = (proj >> 16) << 1
    if vec.z > comp:
        offset = _cdiv(proj, vec.z)
        px = projection.center_x + (-offset if vec.x < 0 else offset)
    else:
        px = -FAR_EDGE if vec.x < 0 else FAR_EDGE

    proj = abs(vec.y) * projection.scale_y
    comp = (proj >> 16) << 1
    if vec.z > comp:
        offset = _cdiv(proj, vec.z)
        py = projection.center_y + (offset if vec.y < 0 else -offset)
    else:
        py = FAR_EDGE if vec.y < 0 else -FAR_EDGE

    return _s16(px), _s16(py)


def clip_to_z(vec1: Vector, vec2: Vector, z: int) -> Vector:
    """Point on the line through ``vec2`` and ``vec1`` whose depth is ``z``."""
    z = _s16(z)
    num = _s16(z - vec2.z)
    den = _s16(vec1.z - vec2.z)
    if den == 0:
        raise ZeroDivisionError("both points lie at the same depth")
    if den < 0:
        num >>= 1
        den >>= 1
    x = _cdiv(_s16(vec1.x - vec2.x) * num, den) + vec2.x
    y = _cdiv(_s16(vec1.y - vec2.y) * num, den) + vec2.y
    return Vector(_s16(x), _s16(y), z)


def vec_normal_inner_product(x: int, y: int, z: int, normal: Vector) -> int:
    """Dot product with a plane normal scaled by 0x2000."""
    total = normal.x * x + normal.z * z + normal.y * y
    return _s16(_cdiv(total, 0x2000))