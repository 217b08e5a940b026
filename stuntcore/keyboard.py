"""Keyboard state and key buffer driven by raw scancodes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

_KEYMAP_SIZE = 0x5A

_SC_CTRL = 0x1D
_SC_LSHIFT = 0x2A
_SC_RSHIFT = 0x36
_SC_ALT = 0x38
_SC_CAPS = 0x3A


@dataclass(frozen=True)
class Keymaps:
    """Scancode-to-key tables, one per modifier, each of 90 entries."""

    normal: bytes
    shift: bytes
    caps: bytes
    ctrl: bytes
    alt: bytes

    def __post_init__(self) -> None:
        for name in ("normal", "shift", "caps", "ctrl", "alt"):
            table = bytes(getattr(self, name))
            if len(table) != _KEYMAP_SIZE:
                raise ValueError(f"keymap {name!r} must have {_KEYMAP_SIZE} entries")
            object.__setattr__(self, name, table)


class KeyboardBuffer:
    """Tracks held keys and queues translated key codes."""

    def __init__(self, keymaps: Keymaps, capacity: int = 32) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.keymaps = keymaps
        self.last_scancode = 0
        self._pressed = [0] * _KEYMAP_SIZE
        self._queue: deque[int] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._queue)

    def _table(self) -> bytes:
        pressed = self._pressed
        if pressed[_SC_ALT]:
            return self.keymaps.alt
        if pressed[_SC_CTRL]:
            return self.keymaps.ctrl
        if pressed[_SC_LSHIFT] or pressed[_SC_RSHIFT]:
            return self.keymaps.shift
        if pressed[_SC_CAPS]:
            return self.keymaps.caps
        return self.keymaps.normal

    def scancode(self, code: int) -> None:
        """Handle one raw scancode byte (bit 7 set means key release).

        A press queues the translated key; when the buffer is full the
        oldest entry is dropped.
        """
        if not 0 <= code <= 0xFF:
            raise ValueError("scancode must be a byte")
        if code & 0x80:
            code &= 0x7F
            if code >= _KEYMAP_SIZE:
                code = 0
            self._pressed[code] = 0
            return

        if code >= _KEYMAP_SIZE:
            code = 0
        self.last_scancode = code
        self._pressed[code] = 1
        value = self._table()[code]
        if value & 0x80:
            if value >= 0x85:
                value &= 0x7F
            value <<= 8
        self._queue.append(value)

    def key_state(self, key: int) -> int:
        """1 while the key with this scancode is held, else 0."""
        if not 0 <= key < _KEYMAP_SIZE:
            raise IndexError("scancode out of range")
        return self._pressed[key]

    def peek(self) -> int:
        """The next queued key code without removing it, or 0 when empty."""
        return self._queue[0] if self._queue else 0

    def read_char(self) -> int:
        """Remove the next key and return its low byte; 0 when nothing waits.

        Extended keys carry their code in the high byte and so read as 0.
        """
        if not self.peek():
            return 0
        return self._queue.popleft() & 0xFF

    def shift_state(self) -> int:
        """1 while either shift key is held, else 0."""
        return (self._pressed[_SC_LSHIFT] | self._pressed[_SC_RSHIFT]) & 0xFF

    def flush(self) -> None:
        """Discard queued keys up to the first zero entry or the end."""
        while self.peek():
            self._queue.popleft()