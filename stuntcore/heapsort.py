"""Heap sort that orders a key list descending and carries a data list along."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def _sift_down(keys: list[int], data: list[T], start: int, end: int) -> None:
    last = (end + 1) >> 1
    while start < last:
        left = (start << 1) + 1
        right = left + 1
        if right <= end and keys[left] >= keys[right]:
            smallest = right
        else:
            smallest = left
        if keys[smallest] > keys[start]:
            break
        keys[start], keys[smallest] = keys[smallest], keys[start]
        data[start], data[smallest] = data[smallest], data[start]
        start = smallest


def heapsort_by_order(keys: Sequence[int], data: Sequence[T]) -> tuple[list[int], list[T]]:
    """Sort ``keys`` in descending order, permuting ``data`` the same way.

    Returns new lists ``(sorted_keys, sorted_data)``. Ties are resolved
    exactly as the game's renderer resolves them, which matters for the
    drawing order of shapes at equal depth.
    """
    keys = list(keys)
    data = list(data)
    if len(keys) != len(data):
        raise ValueError("keys and data must have the same length")
    n = len(keys)
    for i in range((n - 1) // 2, -1, -1):
        _sift_down(keys, data, i, n - 1)
    for i in range(n - 1, 0, -1):
        keys[0], keys[i] = keys[i], keys[0]
        data[0], data[i] = data[i], data[0]
        _sift_down(keys, data, 0, i - 1)
    return keys, data