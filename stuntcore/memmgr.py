"""Paragraph-based memory manager for game resources.

Allocations are stacked from the bottom of a fixed arena. Freed chunks
can be parked at the top of the arena as a cache, from where a later
lookup by name brings them back without reloading.
"""

from __future__ import annotations

from dataclasses import dataclass

from stuntcore.resources import path_to_name

PARAGRAPH = 16
_NAME_LENGTH = 12
_MAX_PARAGRAPHS = 0xFFFF


class MemoryManagerError(RuntimeError):
    """Raised when the manager cannot satisfy a request."""


@dataclass
class Chunk:
    """One slot of the chunk table."""

    name: str = ""
    size: int = 0
    segment: int = 0
    used: bool = False
    cached: bool = False


def _dead(chunk: Chunk) -> bool:
    return not chunk.used and not chunk.cached


def _check_paragraphs(paragraphs: int) -> None:
    if not 0 <= paragraphs <= _MAX_PARAGRAPHS:
        raise ValueError("paragraph count out of range")


class MemoryManager:
    """A fixed arena of ``total_paragraphs`` 16-byte paragraphs and ``slots`` chunk slots."""

    def __init__(self, total_paragraphs: int = 0xA000, slots: int = 50) -> None:
        if not 0 < total_paragraphs <= _MAX_PARAGRAPHS:
            raise ValueError("total_paragraphs out of range")
        if slots < 3:
            raise ValueError("at least 3 slots are needed")
        self.total_paragraphs = total_paragraphs
        self.high_water = 0
        self._memory = bytearray(total_paragraphs * PARAGRAPH)
        self._top = slots - 1
        self._slots = [Chunk() for _ in range(slots)]
        self._slots[0] = Chunk(used=True)
        self._slots[self._top] = Chunk(segment=total_paragraphs, cached=True)
        self._ptr2 = 0
        self._end1 = self._top
        self.reset()

    def reset(self) -> None:
        """Forget every allocation and every cached chunk."""
        for k in range(1, self._top):
            self._slots[k] = Chunk()
        self._end1 = self._top
        self._ptr2 = 0

    def _find(self, segment: int) -> int:
        for i in range(self._ptr2, 0, -1):
            if self._slots[i].segment == segment:
                return i
        raise MemoryManagerError(f"block not found at segment {segment:#x}")

    def _retreat_top(self, i: int) -> None:
        i -= 1
        while _dead(self._slots[i]):
            i -= 1
        self._ptr2 = i

    def _move(self, src: int, dst: int, paragraphs: int) -> None:
        length = paragraphs * PARAGRAPH
        s = src * PARAGRAPH
        d = dst * PARAGRAPH
        self._memory[d:d + length] = self._memory[s:s + length]

    def _evict_below(self, end: int) -> None:
        while end > self._slots[self._end1].segment:
            chunk = self._slots[self._end1]
            chunk.used = False
            chunk.cached = False
            self._end1 += 1

    def _compact_cache(self) -> None:
        live = [
            self._slots[k]
            for k in range(self._top - 1, self._end1 - 1, -1)
            if self._slots[k].cached
        ]
        for k in range(self._end1, self._top):
            self._slots[k] = Chunk()
        pos = self._top
        dest = self._slots[self._top].segment
        for chunk in live:
            dest -= chunk.size
            self._move(chunk.segment, dest, chunk.size)
            pos -= 1
            self._slots[pos] = Chunk(chunk.name, chunk.size, dest, cached=True)
        self._end1 = pos

    def _top_end(self) -> int:
        top = self._slots[self._ptr2]
        return top.segment + top.size

    def alloc_pages(self, name: str, paragraphs: int) -> int:
        """Allocate ``paragraphs`` above the current top; returns its segment.

        Cached chunks in the way are discarded.
        """
        _check_paragraphs(paragraphs)
        segment = self._top_end()
        new = self._ptr2 + 1
        if self._end1 <= new and self._end1 == self._top:
            raise MemoryManagerError(f"out of memory slots reserving {name}")
        end = segment + paragraphs
        if end > self._slots[self._top].segment:
            raise MemoryManagerError(
                f"out of memory reserving {name} P={paragraphs:#x} HW={self.high_water:#x}"
            )
        if self._end1 <= new:
            self._end1 += 1
        self._slots[new] = Chunk(path_to_name(name)[:_NAME_LENGTH], paragraphs, segment, used=True)
        self._ptr2 = new
        self.high_water = max(self.high_water, end)
        self._evict_below(end)
        return segment

    def alloc_bytes(self, name: str, size: int) -> int:
        """Allocate ``size`` bytes, rounded down to whole paragraphs."""
        if size < 0:
            raise ValueError("size must not be negative")
        return self.alloc_pages(name, size // PARAGRAPH)

    def free(self, segment: int) -> int | None:
        """Free a chunk, parking a copy in the cache when there is room.

        Returns the segment of the cached copy, or None if it was dropped.
        """
        i = self._find(segment)
        chunk = self._slots[i]
        chunk.used = False
        chunk.cached = False
        cached_at = None
        room = self._slots[self._end1].segment - self._top_end()
        if i == self._ptr2 or (room >= chunk.size and self._end1 - 1 > self._ptr2):
            cached_at = self._slots[self._end1].segment - chunk.size
            self._end1 -= 1
            self._move(chunk.segment, cached_at, chunk.size)
            self._slots[self._end1] = Chunk(chunk.name, chunk.size, cached_at, cached=True)
        if i == self._ptr2:
            self._retreat_top(i)
        return cached_at

    def release(self, segment: int) -> None:
        """Free a chunk without caching it."""
        i = self._find(segment)
        chunk = self._slots[i]
        chunk.used = False
        chunk.cached = False
        if i == self._ptr2:
            self._retreat_top(i)

    def chunk_size(self, segment: int) -> int:
        """Size of the chunk at ``segment`` in paragraphs."""
        return self._slots[self._find(segment)].size

    def chunk_size_bytes(self, segment: int) -> int:
        """Size of the chunk at ``segment`` in bytes."""
        return self.chunk_size(segment) * PARAGRAPH

    def resize(self, segment: int, paragraphs: int) -> None:
        """Shrink any chunk, or grow the topmost one."""
        _check_paragraphs(paragraphs)
        i = self._find(segment)
        chunk = self._slots[i]
        if paragraphs <= chunk.size:
            chunk.size = paragraphs
            return
        if i != self._ptr2:
            raise MemoryManagerError("cannot expand block not at top")
        end = chunk.segment + paragraphs
        if end > self._slots[self._top].segment:
            raise MemoryManagerError(f"no memory left to expand HW={self.high_water:#x}")
        chunk.size = paragraphs
        self.high_water = max(self.high_water, end)
        self._evict_below(end)

    def compact(self, segment: int) -> int:
        """Move a chunk down into the free gap below it; returns its new segment."""
        i = self._find(segment)
        j = i - 1
        if not _dead(self._slots[j]):
            return self._slots[i].segment
        while _dead(self._slots[j]):
            j -= 1
        chunk = self._slots[i]
        chunk.used = False
        below = self._slots[j]
        dest = below.segment + below.size
        j += 1
        if i == self._ptr2:
            self._ptr2 = j
        self._move(chunk.segment, dest, chunk.size)
        self._slots[j] = Chunk(chunk.name, chunk.size, dest, used=True)
        return dest

    def get_chunk_by_name(self, name: str) -> int | None:
        """Bring a cached chunk back to the top of the allocations.

        A cached name matches when it equals ``name`` or is ``name`` plus an
        extension. Returns the chunk's new segment, or None if not cached.
        """
        query = path_to_name(name)[:_NAME_LENGTH]
        for k in range(self._end1, self._top):
            candidate = self._slots[k]
            if _dead(candidate):
                return None
            if candidate.name == query or candidate.name.startswith(query + "."):
                break
        else:
            return None

        chunk_name, size, src = candidate.name, candidate.size, candidate.segment
        candidate.cached = False
        dest = self._top_end()
        new = self._ptr2 + 1
        if new == self._end1:
            self._end1 += 1
        self._move(src, dest, size)
        self._slots[new] = Chunk(chunk_name, size, dest, used=True)
        self._ptr2 = new
        self._evict_below(dest + size)
        self._compact_cache()
        return dest

    def free_paragraphs(self) -> int:
        """Paragraphs between the top allocation and the end of the arena."""
        return self._slots[self._top].segment - self._top_end()

    def free_bytes(self) -> int:
        """Free space in bytes."""
        return self.free_paragraphs() * PARAGRAPH

    def _span(self, segment: int, size: int) -> slice:
        start = segment * PARAGRAPH
        if segment < 0 or size < 0 or start + size > len(self._memory):
            raise ValueError("range lies outside the arena")
        return slice(start, start + size)

    def read(self, segment: int, size: int) -> bytes:
        """Read ``size`` bytes starting at ``segment``."""
        return bytes(self._memory[self._span(segment, size)])

    def write(self, segment: int, data: bytes) -> None:
        """Write ``data`` starting at ``segment``."""
        self._memory[self._span(segment, len(data))] = data