"""Diagnostics helpers for optimizer tracing.

The optimizer reports its progress through an optional `trace_hook`
callable receiving one dict per event. This module provides utilities to:
- convert trace payloads (with numpy objects) into JSON-serializable structures
- write trace events to a JSONL file (one event per line)
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np


JsonLike = Union[None, bool, int, float, str, Dict[str, Any], list]


def to_jsonable(obj: Any) -> JsonLike:
    """Convert (possibly numpy-heavy) trace payloads into JSON-serializable values."""
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Enum):
        return to_jsonable(obj.value)
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(v) for v in obj]
    return str(obj)


class TraceJSONLWriter:
    """Callable trace hook that appends JSONL events to a file."""

    def __init__(
        self,
        path: Union[str, Path],
        *,
        flush: bool = True,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "a", encoding="utf-8")
        self._flush = bool(flush)
        self.n_events = 0

    def __call__(self, trace: Dict[str, Any]) -> None:
        self.write(trace)

    def write(self, trace: Dict[str, Any]) -> None:
        json.dump(to_jsonable(trace), self._fh)
        self._fh.write("\n")
        self.n_events += 1
        if self._flush:
            self._fh.flush()

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()

    def __enter__(self) -> "TraceJSONLWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def make_jsonl_trace_hook(
    path: Union[str, Path],
    *,
    flush: bool = True,
) -> TraceJSONLWriter:
    """Convenience: returns a trace hook writing every event to a JSONL file."""
    return TraceJSONLWriter(path, flush=flush)
