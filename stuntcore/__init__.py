"""Fixed-point math, resource archives, 2D shapes, memory management, keyboard buffering and track tables for a 3D racing game engine."""

__version__ = "0.1.0"

__all__ = [
    "fixedmath",
    "heapsort",
    "keyboard",
    "kevinrandom",
    "memmgr",
    "resources",
    "shape2d",
    "track",
]