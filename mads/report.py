# report.py
# Console reporting for MADS runs, gated by Verbosity.
# - FINAL : summary box at the end
# - ITER  : start banner + one row every `log_interval` iterations
# - STEP  : search/poll outcome per iteration
# - DEBUG : directions polled, cache size, mesh level (per iteration, not per evaluation)

from __future__ import annotations

import sys
from typing import Optional, TextIO

import numpy as np

from .blocks.aux import Verbosity

_OUTCOME = {1: "success", 0: "cache", -1: "fail"}


class IterationPrinter:
    def __init__(self, verbosity: Verbosity = Verbosity.SILENT, io: Optional[TextIO] = None, log_interval: int = 1):
        self.verbosity = verbosity
        self.io = io if io is not None else sys.stdout
        self.log_interval = int(log_interval)
        self._last_header = -1
        self._use_color = bool(getattr(self.io, "isatty", lambda: False)())

    def enabled(self, level: Verbosity) -> bool:
        return self.verbosity >= level

    def _print(self, line: str = "") -> None:
        print(line, file=self.io)

    def start(self, n: int, method_name: str) -> None:
        if not self.enabled(Verbosity.ITER):
            return
        self._print()
        self._print(f"Starting MADS optimization (n={n}, method={method_name})")
        self._print("─" * 55)

    def iteration(self, k: int, fx: float, delta: float, code: int) -> None:
        if not self.enabled(Verbosity.ITER) or k % self.log_interval != 0:
            return
        if self._use_color:
            C = dict(green="\033[32m", red="\033[31m", yellow="\033[33m", reset="\033[0m")
        else:
            C = {name: "" for name in ["green", "red", "yellow", "reset"]}
        mark, color = {1: ("✓", "green"), 0: ("○", "yellow")}.get(code, ("✗", "red"))

        if self._last_header < 0 or (k - self._last_header) >= 20 * self.log_interval:
            self._last_header = k
            self._print(f"{'iter':>6}  {'f':>13}  {'Δ':>9}  st")
        self._print(f"{k:>6}  {fx:>13.6e}  {delta:>9.2e}  {C[color]}{mark}{C['reset']}")

    def step(self, k: int, stage: str, code: int, search_fx: float, poll_fx: float, delta: float) -> None:
        if not self.enabled(Verbosity.STEP):
            return
        stage_str = "SEARCH" if stage == "search" else "POLL  "
        outcome = _OUTCOME.get(code, "fail")
        self._print(
            f"  [{k}] {stage_str} → {outcome:<7}  search_f={search_fx:.4e}  "
            f"poll_f={poll_fx:.4e}  Δ={delta:.2e}"
        )

    def debug(self, k: int, directions: int, cache_size: int, level: int) -> None:
        if not self.enabled(Verbosity.DEBUG):
            return
        self._print(f"    [DEBUG] iter={k}  dirs={directions}  cache={cache_size}  ℓ={level}")

    def final(self, result) -> None:
        if not self.enabled(Verbosity.FINAL):
            return
        x = np.array2string(np.asarray(result.x), precision=6)
        self._print()
        self._print("═" * 55)
        self._print(" MADS Optimization Complete")
        self._print("─" * 55)
        self._print(f" Stopping reason : {result.stopping_reason.value}")
        self._print(f" Iterations      : {result.iterations}")
        self._print(f" Evaluations     : {result.evaluations}")
        self._print(f" Elapsed         : {result.elapsed:.3f}s")
        self._print(f" Best f(x)       : {result.f:.10e}")
        self._print(f" Best x          : {x}")
        self._print("═" * 55)
