"""Search-stage strategies, run before each poll."""

from __future__ import annotations

from typing import Callable, NamedTuple, Sequence

import numpy as np


class StageResult(NamedTuple):
    incumbent: np.ndarray
    fx: float
    hasimproved: int


class NoSearch:
    """Default search: evaluates nothing and keeps the incumbent (code 0)."""

    def reset(self, rng=None) -> None:
        pass

    def __call__(
        self,
        f: Callable[[np.ndarray], float],
        constraints: Sequence[Callable[[np.ndarray], bool]],
        x: np.ndarray,
        fx: float,
    ) -> StageResult:
        return StageResult(x, fx, 0)
