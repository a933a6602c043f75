"""
Simplex Optimizer
=================

Derivative-free global optimization over box-bounded continuous domains.

The search space is partitioned into simplices. A priority queue ranks them
by a potential-optimality score trading off exploitation (values observed at
the corners) against exploration (size of the region), and the most
promising simplex is split around its centroid at every step.

The optimizer never calls the objective: the caller asks for a point,
evaluates it, and reports the value.

Quick Start
-----------
    >>> from simplex_optimizer import SimplexOptimizer
    >>> opt = SimplexOptimizer(bounds=[(-10, 10), (-20, 20)], minimize=True)
    >>> for _ in range(100):
    ...     x = opt.next_suggestion()
    ...     best_value, best_x = opt.report(x[0] * x[1])

Using the optimize() helper:

    >>> opt = SimplexOptimizer(bounds=[(-10, 10), (-20, 20)])
    >>> best_value, best_x = opt.optimize(lambda x: x[0] * x[1], budget=100)

Modules
-------
- optimizer: SimplexOptimizer state machine (suggest/report)
- simplex: Simplex class (centroid, scoring, splitting)
- priority_queue: SimplexQueue with lazy rescoring
- scoring: Score rules
- search_space: Internal <-> domain coordinate mapping
- point: Point record and PointArena
- diagnostics: JSONL trace hook
"""

__version__ = "1.0.0"

from .optimizer import OptimizerState, SimplexOptimizer
from .simplex import Simplex
from .point import Point, PointArena
from .priority_queue import SimplexQueue
from .scoring import DepthDiscountScore, ScoreRule
from .search_space import SearchSpace
from .diagnostics import TraceJSONLWriter, make_jsonl_trace_hook, to_jsonable

__all__ = [
    "SimplexOptimizer",
    "OptimizerState",
    "Simplex",
    "Point",
    "PointArena",
    "SimplexQueue",
    "ScoreRule",
    "DepthDiscountScore",
    "SearchSpace",
    "TraceJSONLWriter",
    "make_jsonl_trace_hook",
    "to_jsonable",
    "__version__",
]
