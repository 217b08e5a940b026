# stuntcore

Building blocks of a 3D racing game engine, in pure Python with no
third-party dependencies.

## Modules

- `stuntcore.fixedmath`: fixed-point trigonometry (`sin_fast`, `cos_fast`)
  on 10-bit angles, the `Vector` and `Matrix` types (`Matrix.identity()`,
  `Matrix.from_rows()`, `m[row, col]` indexing), rotation matrices
  (`mat_rot_x`, `mat_rot_y`, `mat_rot_z`, `mat_rot_zxy`), `mat_mul_vector`,
  `mat_multiply`, `mat_transpose`, `multiply_and_scale`,
  `vec_normal_inner_product`, and perspective projection with `Projection`,
  `vector_to_point` and `clip_to_z`. Results wrap to 16-bit signed values.
- `stuntcore.heapsort`: `heapsort_by_order(keys, data)` sorts keys in
  descending order and reorders a companion data list the same way,
  returning two new lists.
- `stuntcore.keyboard`: `Keymaps` (five 90-entry tables for normal, shift,
  caps, ctrl and alt) and `KeyboardBuffer`, which takes raw scancodes via
  `scancode()`, tracks held keys (`key_state`, `shift_state`) and queues
  translated key codes (`peek`, `read_char`, `flush`, `len()`).
- `stuntcore.resources`: reading and building resource archives
  (`resource_count`, `resource_names`, `locate_resource`, `locate_shape`,
  `locate_sound`, `locate_many`, `locate_text`, `build_resource_file`,
  `path_to_name`). Required lookups raise `ResourceNotFoundError`;
  `ResourceKind.OPTIONAL` lookups return `None`.
- `stuntcore.memmgr`: `MemoryManager`, a paragraph-based arena with a chunk
  table (`Chunk`). It offers `alloc_pages`, `alloc_bytes`, `free` (which parks
  a copy in a cache at the top of the arena), `release`, `resize`, `compact`,
  `get_chunk_by_name` (brings a cached chunk back), `chunk_size`,
  `chunk_size_bytes`, `free_paragraphs`, `free_bytes`, `read`, `write` and
  `reset`. Failures raise `MemoryManagerError`.
- `stuntcore.shape2d`: `Shape2DHeader` (`parse`, `pack`) and transforms on
  2D shape archives given as bytes: `shape_count`, `shape_offset`,
  `get_shape`, `unflip_shapes`, `unflip_shapes_pes`, `unflip_size`,
  `expanded_size`, `expand_shapes`, `apply_palmap` and `load_esh`.
- `stuntcore.kevinrandom`: `KevinRandom`, the deterministic six-byte
  pseudo-random generator (`next`, `seed`, `reseed`, iteration).
- `stuntcore.track`: track grid tables (`build_row_tables`, `RowTables`),
  the track data block layout (`trackdata_layout`, `TrackDataLayout`),
  `aero_table`, `start_position` and `to_upper`.

## Install

```
pip install .
```

## Example

```python
from stuntcore.fixedmath import Vector, mat_rot_y, mat_mul_vector, sin_fast
from stuntcore.kevinrandom import KevinRandom
from stuntcore.heapsort import heapsort_by_order
from stuntcore.resources import build_resource_file, locate_shape

sin_fast(0x100)                      # 16384, a quarter turn
rotated = mat_mul_vector(Vector(0, 0, 1000), mat_rot_y(0x100))

rng = KevinRandom(b"kevin\0")
values = [rng.next() for _ in range(3)]

keys, data = heapsort_by_order([3, 1, 2], ["c", "a", "b"])
# keys == [3, 2, 1], data == ["c", "b", "a"]

archive = build_resource_file([("simd", b"\x01\x02"), ("gnam", b"car")])
offset = locate_shape(archive, "gnam")
archive[offset:offset + 3]           # b"car"
```

Angles are 10-bit (0x400 is a full turn) and matrix entries are fixed point
with 0x4000 standing for 1.0.

## What it does not do

The package is a library of data routines only. It does not run a game: there
is no game loop, no 3D or 2D rendering to a screen, no sound, no reading of
input devices (the keyboard buffer is fed scancodes by the caller), no
decompression or loading of game files from disk, and no handling of screen
rectangles for redrawing. It provides no command-line tool.

## Tests

```
pip install .[test]
pytest
```