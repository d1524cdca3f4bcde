"""
MADS method objects (Audet & Dennis 2006, p. 193) and their per-run context.

A method object is a template holding a mesh, a search strategy, a poll
direction generator and an incumbent-acceptance rule. ``spawn`` deep-copies
all of them into a `RunContext`, resets their state and binds one
``numpy.random.Generator``; the context is then owned by a single call to
``minimize``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Union

import numpy as np

from .blocks.aux import ConfigurationError
from .blocks.kernel import EvaluationCache, GaussKernel
from .blocks.lt import LTDirectionGenerator
from .blocks.mesh import LogMesh, Mesh
from .blocks.ortho import NegReduction, NoReduction, OrthoDirectionGenerator
from .blocks.search import NoSearch, StageResult
from .poll import KernelAcceptance, PlainAcceptance, poll

MeshLike = Union[Mesh, LogMesh]
GeneratorLike = Union[LTDirectionGenerator, OrthoDirectionGenerator]


@dataclass
class RunContext:
    """Mutable state of one optimization run; never shared between runs."""

    n: int
    mesh: MeshLike
    search: Callable
    generator: GeneratorLike
    acceptance: Union[PlainAcceptance, KernelAcceptance]
    rng: np.random.Generator
    last_directions: int = field(default=0)

    def init(self, x: np.ndarray, fx: float) -> None:
        self.generator.init(x)
        self.acceptance.init(x, fx, self.mesh.size())

    def run_search(self, f, constraints, x, fx) -> StageResult:
        return self.search(f, constraints, x, fx)

    def run_poll(self, f, constraints, x, fx, clip) -> StageResult:
        directions = self.generator.directions(self.mesh.level())
        result, self.last_directions = poll(
            directions,
            self.mesh.size(),
            f,
            constraints,
            x,
            fx,
            self.acceptance,
            self.generator,
            clip,
        )
        return result


class MADS:
    """
    Standard MADS with plain (strict decrease) incumbent acceptance.

    Parameters
    ----------
    n : int
        Problem dimension.
    search : callable, optional
        Search strategy ``(f, constraints, x, fx) -> StageResult``; defaults
        to `NoSearch`.
    poll : LTDirectionGenerator | OrthoDirectionGenerator, optional
        Direction generator; defaults to LT.
    mesh : Mesh | LogMesh, optional
        Mesh controller; defaults to `LogMesh`.
    """

    name = "MADS"

    def __init__(self, n: int, search=None, poll=None, mesh=None):
        self.n = int(n)
        self.search = search if search is not None else NoSearch()
        self.poll = poll if poll is not None else LTDirectionGenerator(self.n)
        self.mesh = mesh if mesh is not None else LogMesh()
        if getattr(self.poll, "n", self.n) != self.n:
            raise ConfigurationError(f"poll generator dimension {self.poll.n} does not match n={self.n}")

    def _acceptance(self):
        return PlainAcceptance()

    def spawn(self, rng: np.random.Generator) -> RunContext:
        """Fresh, exclusively owned copy of every stateful component."""
        mesh = copy.deepcopy(self.mesh)
        search = copy.deepcopy(self.search)
        generator = copy.deepcopy(self.poll)
        acceptance = copy.deepcopy(self._acceptance())
        mesh.reset(rng)
        generator.reset(rng)
        acceptance.reset()
        if hasattr(search, "reset"):
            search.reset(rng)
        return RunContext(self.n, mesh, search, generator, acceptance, rng)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n={self.n}, mesh={type(self.mesh).__name__}, "
            f"poll={type(self.poll).__name__}, search={type(self.search).__name__})"
        )


class RobustMADS(MADS):
    """
    RobustMADS for noisy objectives (Audet et al. 2018): incumbents are
    chosen on a Gaussian-kernel smoothing of every evaluation made so far.
    """

    name = "RobustMADS"

    def __init__(
        self,
        n: int,
        search=None,
        poll=None,
        mesh=None,
        kernel: Optional[GaussKernel] = None,
        cache: Optional[EvaluationCache] = None,
    ):
        super().__init__(n, search=search, poll=poll, mesh=mesh)
        self.kernel = kernel if kernel is not None else GaussKernel(1.0, 1.0)
        self.cache = cache if cache is not None else EvaluationCache(self.n)
        if self.cache.n != self.n:
            raise ConfigurationError(f"cache dimension {self.cache.n} does not match n={self.n}")

    def _acceptance(self):
        return KernelAcceptance(self.kernel, self.cache)


# ---------------------------------------------------------------------------
# Named variants
# ---------------------------------------------------------------------------
def LtMADS(n: int, search=None, mesh=None) -> MADS:
    """LTMADS (Audet & Dennis 2006, section 4)."""
    return MADS(n, search=search, poll=LTDirectionGenerator(n), mesh=mesh)


def OrthoMADS(n: int, search=None, mesh=None, reduction=None) -> MADS:
    """OrthoMADS (Abramson et al. 2009); ``reduction`` defaults to `NegReduction`."""
    reduction = reduction if reduction is not None else NegReduction(n)
    return MADS(n, search=search, poll=OrthoDirectionGenerator(n, reduction=reduction), mesh=mesh)


def RobustLtMADS(n: int, **kwargs) -> RobustMADS:
    return RobustMADS(n, poll=LTDirectionGenerator(n), **kwargs)


def RobustOrthoMADS(n: int, reduction=None, **kwargs) -> RobustMADS:
    reduction = reduction if reduction is not None else NegReduction(n)
    return RobustMADS(n, poll=OrthoDirectionGenerator(n, reduction=reduction), **kwargs)


__all__ = [
    "MADS",
    "RobustMADS",
    "LtMADS",
    "OrthoMADS",
    "RobustLtMADS",
    "RobustOrthoMADS",
    "RunContext",
    "NoReduction",
    "NegReduction",
]
