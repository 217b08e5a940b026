"""Named entries in the game's resource files.

A resource file starts with a 32-bit total size and a 16-bit entry count,
followed by one 4-byte name per entry, one 32-bit offset per entry and then
the entry data. Offsets count from the start of the data area.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping
from enum import IntEnum

_HEADER = struct.Struct("<IH")
_OFFSET = struct.Struct("<I")
NAME_LENGTH = 4

NameLike = str | bytes


class ResourceKind(IntEnum):
    """What a lookup is for; decides whether a missing entry is an error."""

    OPTIONAL = 0
    SHAPE = 1
    SOUND = 2


class ResourceNotFoundError(LookupError):
    """Raised when a required shape or sound entry is missing."""

    def __init__(self, name: NameLike, kind: ResourceKind) -> None:
        self.name = name
        self.kind = kind
        label = "sound" if kind >= ResourceKind.SOUND else "shape"
        super().__init__(f"{label} {name!r} not found")


def path_to_name(filename: str) -> str:
    """The part of ``filename`` after its last drive colon or backslash."""
    cut = max(filename.rfind(":"), filename.rfind("\\"))
    return filename[cut + 1:]


def _encode(name: NameLike) -> bytes:
    if isinstance(name, (bytes, bytearray, memoryview)):
        return bytes(name)
    return name.encode("latin-1")


def _query(name: NameLike) -> bytes:
    raw = _encode(name).split(b"\0", 1)[0][:NAME_LENGTH]
    return raw.ljust(NAME_LENGTH, b" ")


def _entry_count(data) -> int:
    if len(data) < _HEADER.size:
        raise ValueError("resource data is shorter than its header")
    _, count = _HEADER.unpack_from(data, 0)
    if len(data) < _HEADER.size + 8 * count:
        raise ValueError("resource data is shorter than its name and offset tables")
    return count


def _stored_name(data, index: int) -> bytes:
    start = _HEADER.size + NAME_LENGTH * index
    return bytes(data[start:start + NAME_LENGTH])


def _matches(stored: bytes, query: bytes) -> bool:
    for s, q in zip(stored, query):
        if s != q:
            return s == 0 and q == 0x20
    return True


def resource_count(data) -> int:
    """Number of entries in the resource file."""
    return _entry_count(data)


def resource_names(data) -> list[str]:
    """Entry names in file order, without their NUL padding."""
    count = _entry_count(data)
    return [
        _stored_name(data, j).rstrip(b"\0").decode("latin-1") for j in range(count)
    ]


def locate_resource(data, name: NameLike, kind: ResourceKind = ResourceKind.OPTIONAL) -> int | None:
    """Offset into ``data`` of the entry called ``name``.

    Only the first four characters of ``name`` count; shorter names are
    padded with spaces and match names stored with NUL padding. A missing
    entry gives None for ``OPTIONAL`` and raises ResourceNotFoundError
    otherwise.
    """
    count = _entry_count(data)
    query = _query(name)
    base = _HEADER.size + 8 * count
    for j in range(count):
        if _matches(_stored_name(data, j), query):
            (offset,) = _OFFSET.unpack_from(data, _HEADER.size + NAME_LENGTH * count + 4 * j)
            return base + offset
    if kind:
        raise ResourceNotFoundError(name, ResourceKind(min(int(kind), ResourceKind.SOUND)))
    return None


def locate_shape(data, name: NameLike) -> int:
    """Offset of a shape entry; raises ResourceNotFoundError if missing."""
    return locate_resource(data, name, ResourceKind.SHAPE)


def locate_sound(data, name: NameLike) -> int:
    """Offset of a sound entry; raises ResourceNotFoundError if missing."""
    return locate_resource(data, name, ResourceKind.SOUND)


def locate_many(data, names: NameLike | Iterable[NameLike]) -> list[int]:
    """Offsets of several shape entries.

    ``names`` is either an iterable of names or one string of names packed
    four characters apiece.
    """
    if isinstance(names, (str, bytes, bytearray)):
        raw = _encode(names).split(b"\0", 1)[0]
        names = [raw[i:i + NAME_LENGTH] for i in range(0, len(raw), NAME_LENGTH)]
    return [locate_shape(data, name) for name in names]


def locate_text(data, name: str, prefix: str = "e") -> int:
    """Offset of a text entry: ``prefix`` (the language letter) plus three characters."""
    if len(prefix) != 1:
        raise ValueError("prefix must be a single character")
    return locate_shape(data, prefix + name[:3])


def build_resource_file(entries: Mapping[NameLike, bytes] | Iterable[tuple[NameLike, bytes]]) -> bytes:
    """Assemble a resource file from ``(name, payload)`` entries in order."""
    items = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
    if len(items) > 0xFFFF:
        raise ValueError("too many entries")
    names = bytearray()
    offsets = bytearray()
    payloads = bytearray()
    for name, payload in items:
        raw = _encode(name)
        if not raw or len(raw) > NAME_LENGTH or b"\0" in raw:
            raise ValueError(f"invalid resource name {name!r}")
        names += raw.ljust(NAME_LENGTH, b"\0")
        offsets += _OFFSET.pack(len(payloads))
        payloads += bytes(payload)
    total = _HEADER.size + len(names) + len(offsets) + len(payloads)
    if total > 0xFFFFFFFF:
        raise ValueError("resource file too large")
    return _HEADER.pack(total, len(items)) + bytes(names) + bytes(offsets) + bytes(payloads)