"""
Simplex Optimizer - Priority Queue Module

Max-priority queue of simplices with lazy rescoring.

Scores depend on the global value range, which moves whenever a better or
worse value is observed. Instead of rescoring the whole queue on every
change, each simplex carries the range it was scored with and is rescored
only when it reaches the top with an outdated range.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, Iterator, List, Tuple

from .simplex import Simplex


class SimplexQueue:
    """
    Max-priority queue over simplices.

    Entries are stored as (-score, insertion_index, simplex) in a heap, so
    equal scores pop in insertion order.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, Simplex]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __iter__(self) -> Iterator[Simplex]:
        return (entry[2] for entry in self._heap)

    def push(self, simplex: Simplex, score: float) -> None:
        heapq.heappush(self._heap, (-float(score), next(self._counter), simplex))

    def peek(self) -> Tuple[Simplex, float]:
        if not self._heap:
            raise RuntimeError("Impossible: the simplex queue cannot be empty")
        neg_score, _, simplex = self._heap[0]
        return simplex, -neg_score

    def pop(self) -> Tuple[Simplex, float]:
        if not self._heap:
            raise RuntimeError("Impossible: the simplex queue cannot be empty")
        neg_score, _, simplex = heapq.heappop(self._heap)
        return simplex, -neg_score

    def pop_fresh(
        self,
        current_range: float,
        rescore: Callable[[Simplex], float],
    ) -> Tuple[Simplex, int]:
        """
        Pop the best simplex, rescoring stale entries on the way.

        A popped simplex whose cached range differs from `current_range` is
        restamped, rescored and pushed back, then the new top is popped. At
        most len(queue) simplices are rescored per call (a full pass leaves
        every entry fresh), after which the current top is returned.

        Parameters
        ----------
        current_range : float
            Live (best - min) value range.
        rescore : Callable[[Simplex], float]
            Computes the score of a restamped simplex.

        Returns
        -------
        Tuple[Simplex, int]
            The selected simplex and the number of rescored simplices.
        """
        max_rescored = len(self._heap)
        simplex, _ = self.pop()
        n_rescored = 0
        while simplex.cached_range != current_range and n_rescored < max_rescored:
            simplex.cached_range = current_range
            self.push(simplex, rescore(simplex))
            simplex, _ = self.pop()
            n_rescored += 1
        return simplex, n_rescored
