"""
Simplex Optimizer - Point Module

Evaluated locations are stored once in a PointArena and referenced by
integer handles. A handle stays valid for the lifetime of the arena, so the
same point can be a corner of many simplices without being copied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np


@dataclass(frozen=True, eq=False)
class Point:
    """
    An evaluated location.

    Attributes
    ----------
    coordinates : np.ndarray
        Internal coordinates (read-only array).
    value : float
        Internal score (higher is better).
    """

    coordinates: np.ndarray
    value: float


class PointArena:
    """Append-only store of evaluated points, addressed by stable handles."""

    def __init__(self) -> None:
        self._points: List[Point] = []

    def add(self, coordinates: np.ndarray, value: float) -> int:
        """
        Store a new point and return its handle.

        The coordinates are copied and frozen so the point can be shared
        between simplices safely.
        """
        coords = np.array(coordinates, dtype=float)
        coords.setflags(write=False)
        self._points.append(Point(coordinates=coords, value=float(value)))
        return len(self._points) - 1

    def __getitem__(self, handle: int) -> Point:
        return self._points[handle]

    def __len__(self) -> int:
        return len(self._points)

    def values(self, handles: Sequence[int]) -> np.ndarray:
        return np.array([self._points[h].value for h in handles], dtype=float)

    def coordinates(self, handles: Iterable[int]) -> np.ndarray:
        return np.vstack([self._points[h].coordinates for h in handles])

    def best_handle(self) -> int:
        """Handle of the point with the highest value (first one on ties)."""
        if not self._points:
            raise ValueError("PointArena is empty")
        return int(np.argmax([p.value for p in self._points]))

    def min_value(self) -> float:
        if not self._points:
            raise ValueError("PointArena is empty")
        return float(min(p.value for p in self._points))
