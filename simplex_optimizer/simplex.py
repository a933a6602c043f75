"""
Simplex Optimizer - Simplex Module

This module implements the Simplex class, the unit of partitioning of the
search space. A simplex holds d+1 corner handles into a shared PointArena,
its centroid (the next location to evaluate inside it) and the value range
that was current the last time it was scored.

Splitting a simplex around its evaluated centroid yields d+1 children of
equal volume which exactly tile the parent.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .point import PointArena
from .scoring import DepthDiscountScore, ScoreRule

DEFAULT_SCORE_RULE: ScoreRule = DepthDiscountScore()


@dataclass(eq=False)
class Simplex:
    """
    A simplex region of the internal search space.

    Attributes
    ----------
    corners : Tuple[int, ...]
        Handles of the d+1 corner points in `arena`.
    arena : PointArena
        Shared store holding the corner points.
    depth : int
        Number of splits separating this simplex from the initial one.
    cached_range : float
        Global (best - min) value range used for the last score.
    center : np.ndarray
        Centroid of the corners, computed once.
    """

    corners: Tuple[int, ...]
    arena: PointArena = field(repr=False)
    depth: int = 0
    cached_range: float = 0.0
    center: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.corners = tuple(int(h) for h in self.corners)
        coords = self.corner_coordinates()
        if coords.shape[0] != coords.shape[1] + 1:
            raise ValueError(
                f"A simplex in {coords.shape[1]} dimensions needs {coords.shape[1] + 1} corners, "
                f"got {coords.shape[0]}"
            )
        self.center = coords.mean(axis=0)
        self.center.setflags(write=False)

    # -------------------------------------------------------------------------
    # Geometry helpers
    # -------------------------------------------------------------------------

    @property
    def dim(self) -> int:
        return len(self.corners) - 1

    @property
    def volume_ratio(self) -> float:
        """Fraction of the initial simplex volume covered by this simplex."""
        return float((self.dim + 1) ** (-self.depth))

    def corner_coordinates(self) -> np.ndarray:
        return self.arena.coordinates(self.corners)

    def corner_values(self) -> np.ndarray:
        return self.arena.values(self.corners)

    def volume(self) -> float:
        coords = self.corner_coordinates()
        edges = coords[1:] - coords[0]
        return float(abs(np.linalg.det(edges)) / math.factorial(self.dim))

    def barycentric(self, x: np.ndarray) -> np.ndarray:
        """Barycentric coordinates of x with respect to the corners."""
        coords = self.corner_coordinates()
        # rows: sum(lambda) == 1 and sum(lambda_i * v_i) == x
        system = np.vstack([np.ones(self.dim + 1), coords.T])
        rhs = np.concatenate([[1.0], np.asarray(x, dtype=float)])
        return np.linalg.solve(system, rhs)

    def contains(self, x: np.ndarray, tol: float = 1e-9) -> bool:
        """Check if internal point x is inside the simplex (with small tolerance)."""
        return bool(np.all(self.barycentric(x) >= -tol))

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def score(
        self,
        exploration_depth: float,
        best_value: Optional[float] = None,
        min_value: Optional[float] = None,
        rule: Optional[ScoreRule] = None,
    ) -> float:
        """
        Potential-optimality score of the simplex.

        Parameters
        ----------
        exploration_depth : float
            Effective exploration depth (> 0).
        best_value : Optional[float]
            Best internal value seen so far; scores above it are capped.
        min_value : Optional[float]
            Lowest internal value seen so far; scores below it are floored.
        rule : Optional[ScoreRule]
            Scoring rule, DepthDiscountScore() by default.

        Returns
        -------
        float
            Score used as priority (higher is refined first).
        """
        rule = DEFAULT_SCORE_RULE if rule is None else rule
        raw = float(rule.raw_score(self, exploration_depth))

        if best_value is not None and (raw > best_value or np.isposinf(raw)):
            return float(best_value)
        if min_value is not None and (raw < min_value or np.isneginf(raw)):
            return float(min_value)
        if np.isnan(raw):
            return float(min_value) if min_value is not None else -np.inf
        return raw

    # -------------------------------------------------------------------------
    # Split logic
    # -------------------------------------------------------------------------

    def check_split_point(self, coordinates: np.ndarray) -> None:
        """Raise RuntimeError if `coordinates` is already a corner of this simplex."""
        for handle in self.corners:
            if np.array_equal(self.arena[handle].coordinates, coordinates):
                raise RuntimeError(
                    f"Degenerate split: point {coordinates} is already a corner of the simplex"
                )

    def split(self, new_point: int, current_range: float) -> List["Simplex"]:
        """
        Split this simplex around an evaluated point (its centroid).

        Child i is the parent with corner i replaced by `new_point`, so every
        original corner survives in d children and the new point is a corner
        of all of them.

        Parameters
        ----------
        new_point : int
            Handle of the evaluated centroid in the shared arena.
        current_range : float
            Global value range to stamp on the children.

        Returns
        -------
        List[Simplex]
            The d+1 children.

        Raises
        ------
        RuntimeError
            If the new point coincides with a corner (degenerate split).
        """
        self.check_split_point(self.arena[new_point].coordinates)

        children = []
        for i in range(len(self.corners)):
            corners = list(self.corners)
            corners[i] = new_point
            children.append(
                Simplex(
                    corners=tuple(corners),
                    arena=self.arena,
                    depth=self.depth + 1,
                    cached_range=current_range,
                )
            )
        return children
