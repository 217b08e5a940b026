"""The game's small deterministic random number generator.

The state is six bytes. Each step adds every byte into its left
neighbour, from right to left. It then increments the state as one
48-bit counter whose lowest byte is the last one. The result is the
first byte. Replays depend on this sequence, so it must be reproduced
exactly.
"""

from __future__ import annotations

from collections.abc import Iterator

SEED_LENGTH = 6
DEFAULT_SEED = "kevin"

SeedLike = str | bytes | bytearray


def _to_state(seed: SeedLike) -> list[int]:
    raw = seed.encode("latin-1") if isinstance(seed, str) else bytes(seed)
    return list(raw[:SEED_LENGTH].ljust(SEED_LENGTH, b"\0"))


class KevinRandom:
    """Generator of byte values from a six-byte seed.

    Seeds shorter than six bytes are padded with NULs, so the default
    ``"kevin"`` is the string together with its terminating NUL. Longer
    seeds are cut to their first six bytes.
    """

    def __init__(self, seed: SeedLike = DEFAULT_SEED) -> None:
        self._state = _to_state(seed)

    def __repr__(self) -> str:
        return f"KevinRandom({self.seed()!r})"

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()

    def next(self) -> int:
        """Advance the state and return its first byte (0..255)."""
        s = self._state
        for i in range(SEED_LENGTH - 2, -1, -1):
            s[i] = (s[i] + s[i + 1]) & 0xFF
        for i in range(SEED_LENGTH - 1, -1, -1):
            s[i] = (s[i] + 1) & 0xFF
            if s[i]:
                break
        return s[0]

    def seed(self) -> bytes:
        """The current six-byte state, which can be passed to ``reseed``."""
        return bytes(self._state)

    def reseed(self, seed: SeedLike) -> None:
        """Replace the state with ``seed``."""
        self._state = _to_state(seed)