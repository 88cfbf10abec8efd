"""
Grid geometry helpers.
"""

from __future__ import annotations

from typing import FrozenSet, Tuple

Cell = Tuple[int, int]


def shift(cell: Cell, offset: Tuple[int, int]) -> Cell:
    """Return *cell* displaced by *offset*."""
    return cell[0] + offset[0], cell[1] + offset[1]


def in_bounds(cell: Cell, map_width: int, map_height: int) -> bool:
    """Inclusive bounds check: ``0 <= x <= map_width`` and ``0 <= y <= map_height``."""
    return 0 <= cell[0] <= map_width and 0 <= cell[1] <= map_height


def manhattan_distance(a: Cell, b: Cell) -> int:
    """Number of four-directional steps between two cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def obstacles_between(a: Cell, b: Cell, obstacles: FrozenSet[Cell]) -> int:
    """Count obstacle cells inside the bounding rectangle spanned by *a* and *b*."""
    x_lo, x_hi = sorted((a[0], b[0]))
    y_lo, y_hi = sorted((a[1], b[1]))
    return sum(1 for (x, y) in obstacles if x_lo <= x <= x_hi and y_lo <= y <= y_hi)
