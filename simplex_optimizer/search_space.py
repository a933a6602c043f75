"""
Simplex Optimizer - Search Space Module

This module maps between the internal representation used by the optimizer
(the unit simplex: non-negative coordinates summing to at most one) and the
box-bounded domain seen by the caller.

The mapping is done in two steps:
1. a radial projection of the unit simplex onto the unit hypercube
   (each point is scaled by sum / max along the ray from the origin)
2. a per-dimension linear map of [0,1]^d onto the real bounds

The internal origin therefore lands on the lower bounds and the unit offset
along axis i lands on the upper bound of axis i.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np


class SearchSpace:
    """
    Box-bounded search domain.

    Parameters
    ----------
    bounds : Sequence[Tuple[float, float]]
        One (lower, upper) pair per dimension, with lower < upper.

    Raises
    ------
    ValueError
        If bounds is empty or any interval is malformed or degenerate.

    Examples
    --------
    >>> space = SearchSpace([(-10.0, 10.0), (-20.0, 20.0)])
    >>> space.to_domain(np.array([1.0, 0.0]))
    array([ 10., -20.])
    """

    def __init__(self, bounds: Sequence[Tuple[float, float]]) -> None:
        if bounds is None or len(bounds) == 0:
            raise ValueError("SearchSpace requires at least one dimension")

        parsed: List[Tuple[float, float]] = []
        for i, interval in enumerate(bounds):
            if len(interval) != 2:
                raise ValueError(f"bounds[{i}] must be a (lower, upper) pair, got {interval!r}")
            lo, hi = float(interval[0]), float(interval[1])
            if not (np.isfinite(lo) and np.isfinite(hi)):
                raise ValueError(f"bounds[{i}] must be finite, got ({lo}, {hi})")
            if lo >= hi:
                raise ValueError(f"bounds[{i}] is degenerate: lower={lo} must be < upper={hi}")
            parsed.append((lo, hi))

        self.bounds = parsed
        self.dim = len(parsed)
        self.lower = np.array([lo for lo, _ in parsed], dtype=float)
        self.upper = np.array([hi for _, hi in parsed], dtype=float)

    @property
    def widths(self) -> np.ndarray:
        return self.upper - self.lower

    def initial_corners(self) -> np.ndarray:
        """
        Corners of the canonical starting simplex in internal coordinates.

        Returns
        -------
        np.ndarray
            Array of shape (dim + 1, dim): the origin followed by the unit
            offset along each axis.
        """
        return np.vstack([np.zeros(self.dim), np.eye(self.dim)])

    def to_domain(self, coordinates: np.ndarray) -> np.ndarray:
        """Map internal (unit simplex) coordinates to domain coordinates."""
        x = np.array(coordinates, dtype=float)
        if x.shape != (self.dim,):
            raise ValueError(f"Expected coordinates of shape ({self.dim},), got {x.shape}")

        # unit simplex -> unit hypercube
        total = float(np.sum(x))
        peak = float(np.max(x))
        if peak > 0.0:
            x = x * (total / peak)
        u = np.clip(x, 0.0, 1.0)

        # unit hypercube -> bounds
        return self.lower + u * self.widths

    def contains(self, point: np.ndarray, tol: float = 1e-9) -> bool:
        """Check if a domain point lies inside the bounds (with small tolerance)."""
        point = np.asarray(point, dtype=float)
        return bool(np.all(point >= self.lower - tol) and np.all(point <= self.upper + tol))

    def __repr__(self) -> str:
        return f"SearchSpace(dim={self.dim}, bounds={self.bounds})"
