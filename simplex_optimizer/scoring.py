"""Simplex Optimizer - Scoring Rules

This module defines how a simplex is ranked in the priority queue.

A score ranks how promising the region covered by a simplex is:
an exploitation term computed from the corner values minus a
depth penalty, so larger (shallower) simplices keep a relative exploration
bonus.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from .simplex import Simplex


class ScoreRule(Protocol):
    def raw_score(self, simplex: "Simplex", exploration_depth: float) -> float:
        ...


@dataclass(frozen=True)
class DepthDiscountScore:
    """
    Default scoring rule.

    score = statistic(corner values) - range * depth / exploration_depth

    where range is the spread (best - min) of all values seen when the score
    is computed. Each split costs range / exploration_depth, so a simplex
    holding the best value can be refined `exploration_depth` levels deeper
    than one holding the worst value before the latter is preferred.

    - exploration_depth == 1 refines level by level (close to a grid search)
    - large exploration_depth keeps refining around the best values
    """

    statistic: str = "mean"

    def __post_init__(self) -> None:
        if self.statistic not in {"mean", "max"}:
            raise ValueError("statistic must be one of {'mean','max'}")

    def raw_score(self, simplex: "Simplex", exploration_depth: float) -> float:
        if exploration_depth <= 0:
            raise ValueError("exploration_depth must be > 0")
        values = simplex.corner_values()
        # mean of the corners is the linear interpolation at the centroid
        exploitation = float(np.mean(values)) if self.statistic == "mean" else float(np.max(values))
        exploration = simplex.cached_range * simplex.depth / exploration_depth
        return exploitation - exploration
