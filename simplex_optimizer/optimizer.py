"""
Simplex Optimizer - Optimizer Module

This module implements the SimplexOptimizer class, orchestrating:
- Partitioning of the search space into simplices
- A priority queue of simplices ranked by a potential-optimality score
- Lazy rescoring of queued simplices when the value range moves
- Two-phase optimization: bootstrap of the initial simplex + steady state

The optimizer never calls the objective itself. The caller asks for the next
point with next_suggestion(), evaluates it however it wants, and reports the
value with report(). Internally the optimizer always maximizes; minimization
is handled by negating values at the boundary.
"""

from __future__ import annotations

import warnings
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .point import PointArena
from .priority_queue import SimplexQueue
from .scoring import DepthDiscountScore, ScoreRule
from .search_space import SearchSpace
from .simplex import Simplex


class OptimizerState(Enum):
    BOOTSTRAPPING = "bootstrapping"
    READY = "ready"
    AWAITING_VALUE = "awaiting_value"


class SimplexOptimizer:
    """
    Simplicial DIRECT-style global optimizer with a suggest/report interface.

    Parameters
    ----------
    bounds : Sequence[Tuple[float, float]]
        Search space bounds for each dimension (lower < upper).
    minimize : bool
        Whether to minimize (True) or maximize (False) the objective.
    exploration_depth : int
        Number of splits a region can be exploited before larger regions are
        preferred (see set_exploration_depth).
    score_rule : Optional[ScoreRule]
        Strategy computing the raw score of a simplex. Defaults to
        DepthDiscountScore().
    trace_hook : Optional[Callable[[Dict[str, Any]], None]]
        Called with a dict after every suggestion and every report.

    Notes
    -----
    In d dimensions the first d+1 suggestions are the corners of the initial
    simplex; those evaluations count towards any evaluation budget.

    Examples
    --------
    >>> opt = SimplexOptimizer(bounds=[(-10, 10), (-20, 20)], minimize=True)
    >>> for _ in range(100):
    ...     x = opt.next_suggestion()
    ...     best_value, best_x = opt.report(x[0] * x[1])

    Using the optimize() helper:

    >>> best_value, best_x = SimplexOptimizer.minimize_function(f, [(-10, 10), (-20, 20)], 100)
    """

    def __init__(
        self,
        bounds: Sequence[Tuple[float, float]],
        minimize: bool = True,
        exploration_depth: int = 5,
        score_rule: Optional[ScoreRule] = None,
        trace_hook: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        self.search_space = SearchSpace(bounds)
        self.minimize = bool(minimize)

        if score_rule is not None and not callable(getattr(score_rule, "raw_score", None)):
            raise TypeError("score_rule must provide a raw_score(simplex, exploration_depth) method")
        self._score_rule: ScoreRule = score_rule if score_rule is not None else DepthDiscountScore()

        if trace_hook is not None and not callable(trace_hook):
            raise TypeError("trace_hook must be callable or None")
        self._trace_hook = trace_hook

        self._exploration_depth = 0.0
        self._started = False
        self.set_exploration_depth(exploration_depth)

        self.arena = PointArena()
        self.queue = SimplexQueue()

        # Bootstrap: corners of the initial simplex, evaluated one by one
        self._bootstrap_corners = self.search_space.initial_corners()
        self._bootstrap_handles: List[int] = []

        # Global trackers (internal scale), valid once bootstrap is over
        self._best_handle: Optional[int] = None
        self._min_value = 0.0

        # Pending steady-state suggestion
        self._pending: Optional[Simplex] = None
        self._pending_range: Optional[float] = None

        self.iteration = 0

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_exploration_depth(self, exploration_depth: int) -> "SimplexOptimizer":
        """
        Set the exploration depth.

        `exploration_depth` is the number of splits a region can be exploited
        before higher-level exploration is required. The algorithm is not very
        sensitive to it within a reasonable range (5-10):

        - 0 means full exploration (similar to a grid search)
        - high values focus on exploitation (no need to go very high)

        Scores already in the queue are not updated, so changing it after the
        first steady-state suggestion degrades the quality of the search.

        Returns
        -------
        SimplexOptimizer
            self, so calls can be chained.
        """
        if isinstance(exploration_depth, bool) or int(exploration_depth) != exploration_depth:
            raise ValueError(f"exploration_depth must be an integer, got {exploration_depth!r}")
        if exploration_depth < 0:
            raise ValueError("exploration_depth must be >= 0")
        if self._started:
            warnings.warn(
                "set_exploration_depth() called after the search started: "
                "already queued scores keep the previous depth",
                RuntimeWarning,
                stacklevel=2,
            )
        # +1 keeps the exploitation horizon non-empty at depth 0
        self._exploration_depth = float(int(exploration_depth) + 1)
        return self

    @property
    def exploration_depth(self) -> float:
        """Effective exploration depth (user value + 1)."""
        return self._exploration_depth

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def dim(self) -> int:
        return self.search_space.dim

    @property
    def state(self) -> OptimizerState:
        if self._best_handle is None:
            return OptimizerState.BOOTSTRAPPING
        if self._pending is not None:
            return OptimizerState.AWAITING_VALUE
        return OptimizerState.READY

    @property
    def n_evaluations(self) -> int:
        """Number of values reported so far."""
        return len(self.arena)

    @property
    def queue_size(self) -> int:
        return len(self.queue)

    @property
    def best_value(self) -> Optional[float]:
        """Best objective value found (in original scale), None before any report."""
        handle = self._current_best_handle()
        if handle is None:
            return None
        return self._to_raw(self.arena[handle].value)

    @property
    def best_coordinates(self) -> Optional[np.ndarray]:
        """Domain coordinates of the best point, None before any report."""
        handle = self._current_best_handle()
        if handle is None:
            return None
        return self.search_space.to_domain(self.arena[handle].coordinates)

    def _current_best_handle(self) -> Optional[int]:
        if self._best_handle is not None:
            return self._best_handle
        if len(self.arena) == 0:
            return None
        return self.arena.best_handle()

    # -------------------------------------------------------------------------
    # Internal score conversion
    # -------------------------------------------------------------------------

    def _to_internal(self, y_raw: float) -> float:
        """Convert raw objective value to internal score (higher is better)."""
        return -y_raw if self.minimize else y_raw

    def _to_raw(self, y_internal: float) -> float:
        """Convert internal score back to raw objective value."""
        return -y_internal if self.minimize else y_internal

    def _value_range(self) -> float:
        return self.arena[self._best_handle].value - self._min_value

    def _score(self, simplex: Simplex) -> float:
        return simplex.score(
            self._exploration_depth,
            best_value=self.arena[self._best_handle].value,
            min_value=self._min_value,
            rule=self._score_rule,
        )

    # -------------------------------------------------------------------------
    # Suggest interface
    # -------------------------------------------------------------------------

    def next_suggestion(self) -> np.ndarray:
        """
        Next point to evaluate, in domain coordinates.

        Calling it again before report() returns the same point.
        """
        if self.state is OptimizerState.BOOTSTRAPPING:
            corner = self._bootstrap_corners[len(self._bootstrap_handles)]
            x = self.search_space.to_domain(corner)
            self._trace({"event": "suggest", "phase": "bootstrap", "x_internal": corner, "x": x})
            return x

        if self._pending is None:
            self._started = True
            current_range = self._value_range()
            simplex, n_rescored = self.queue.pop_fresh(current_range, self._score)
            self._pending = simplex
            self._pending_range = current_range
            x = self.search_space.to_domain(simplex.center)
            self._trace(
                {
                    "event": "suggest",
                    "phase": "steady",
                    "x_internal": simplex.center,
                    "x": x,
                    "depth": simplex.depth,
                    "n_rescored": n_rescored,
                    "queue_size": len(self.queue),
                }
            )
            return x

        return self.search_space.to_domain(self._pending.center)

    def ask(self) -> np.ndarray:
        """Alias of next_suggestion()."""
        return self.next_suggestion()

    # -------------------------------------------------------------------------
    # Report interface
    # -------------------------------------------------------------------------

    def report(self, value: float) -> Tuple[float, np.ndarray]:
        """
        Report the objective value of the last suggestion.

        If no suggestion is pending, one is made first so the value is always
        attached to the point next_suggestion() would have returned.

        Parameters
        ----------
        value : float
            The objective value (in original scale).

        Returns
        -------
        Tuple[float, np.ndarray]
            Best objective value so far (original scale) and its domain
            coordinates.

        Raises
        ------
        ValueError
            If the value is not finite.
        """
        value = float(value)
        if not np.isfinite(value):
            raise ValueError(f"Reported value must be finite, got {value}")
        y = self._to_internal(value)

        if self.state is OptimizerState.BOOTSTRAPPING:
            event = self._report_corner(y)
        else:
            event = self._report_center(y)

        self.iteration += 1
        self._trace(event)
        return self.best_value, self.best_coordinates

    def tell(self, value: float) -> Tuple[float, np.ndarray]:
        """Alias of report()."""
        return self.report(value)

    def _report_corner(self, y: float) -> Dict[str, Any]:
        corner = self._bootstrap_corners[len(self._bootstrap_handles)]
        self._bootstrap_handles.append(self.arena.add(corner, y))
        if len(self._bootstrap_handles) == self.dim + 1:
            self._finalize_bootstrap()
        return {"event": "report", "phase": "bootstrap", "value": self._to_raw(y)}

    def _finalize_bootstrap(self) -> None:
        # The arena holds exactly the corners at this point
        self._best_handle = self.arena.best_handle()
        self._min_value = self.arena.min_value()

        # Scored fresh against the range just computed; popped right away
        initial = Simplex(
            corners=tuple(self._bootstrap_handles), arena=self.arena, cached_range=self._value_range()
        )
        self.queue.push(initial, 0.0)

    def _report_center(self, y: float) -> Dict[str, Any]:
        if self._pending is None:
            self.next_suggestion()
        simplex = self._pending
        simplex.check_split_point(simplex.center)

        handle = self.arena.add(simplex.center, y)
        # Children are scored against the range of the suggestion
        children = simplex.split(handle, self._pending_range)
        self._pending = None
        self._pending_range = None
        for child in children:
            self.queue.push(child, self._score(child))

        if y > self.arena[self._best_handle].value:
            self._best_handle = handle
        elif y < self._min_value:
            self._min_value = y

        return {
            "event": "report",
            "phase": "steady",
            "value": self._to_raw(y),
            "best_value": self.best_value,
            "min_value": self._to_raw(self._min_value),
            "n_children": len(children),
            "queue_size": len(self.queue),
        }

    def _trace(self, payload: Dict[str, Any]) -> None:
        hook = self._trace_hook
        if hook is not None:
            payload["iteration"] = self.iteration
            hook(payload)

    # -------------------------------------------------------------------------
    # High-level optimization interface
    # -------------------------------------------------------------------------

    def iterate(self, objective: Callable[[np.ndarray], float]) -> Iterator[Tuple[float, np.ndarray]]:
        """
        Run the search one evaluation at a time.

        Each step evaluates the next suggestion and yields the best result so
        far. The generator never stops on its own, the caller chooses the
        stopping condition:

        >>> for best_value, best_x in opt.iterate(f):
        ...     if best_value < 1.0:
        ...         break
        """
        while True:
            x = self.next_suggestion()
            yield self.report(objective(x))

    def optimize(
        self,
        objective: Callable[[np.ndarray], float],
        budget: int = 100,
    ) -> Tuple[float, np.ndarray]:
        """
        Run optimization loop.

        Parameters
        ----------
        objective : Callable
            Function to optimize. Takes the domain coordinates as np.ndarray.
        budget : int
            Number of function evaluations, bootstrap included.

        Returns
        -------
        best_value : float
            Best objective value found.
        best_x : np.ndarray
            Domain coordinates of the best value.
        """
        if budget < 1:
            raise ValueError("budget must be >= 1")
        for _ in range(budget):
            x = self.next_suggestion()
            self.report(objective(x))
        return self.best_value, self.best_coordinates

    @classmethod
    def minimize_function(
        cls,
        objective: Callable[[np.ndarray], float],
        bounds: Sequence[Tuple[float, float]],
        n_iterations: int,
        exploration_depth: int = 5,
    ) -> Tuple[float, np.ndarray]:
        """Self contained minimization: returns (min_value, coordinates)."""
        opt = cls(bounds, minimize=True, exploration_depth=exploration_depth)
        return opt.optimize(objective, budget=n_iterations)

    @classmethod
    def maximize_function(
        cls,
        objective: Callable[[np.ndarray], float],
        bounds: Sequence[Tuple[float, float]],
        n_iterations: int,
        exploration_depth: int = 5,
    ) -> Tuple[float, np.ndarray]:
        """Self contained maximization: returns (max_value, coordinates)."""
        opt = cls(bounds, minimize=False, exploration_depth=exploration_depth)
        return opt.optimize(objective, budget=n_iterations)

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get current optimization statistics.

        Returns
        -------
        Dict[str, Any]
            Dictionary with optimization statistics.
        """
        return {
            "n_evaluations": self.n_evaluations,
            "queue_size": self.queue_size,
            "max_depth": max((s.depth for s in self.queue), default=0),
            "best_value": self.best_value,
            "state": self.state.value,
            "exploration_depth": self._exploration_depth,
            "iteration": self.iteration,
        }

    def __repr__(self) -> str:
        goal = "minimize" if self.minimize else "maximize"
        best = "None" if self.best_value is None else f"{self.best_value:.4f}"
        return (
            f"SimplexOptimizer(dim={self.dim}, {goal}, state={self.state.value}, "
            f"n_evals={self.n_evaluations}, queue={self.queue_size}, best={best})"
        )
