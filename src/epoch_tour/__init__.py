"""Step-by-step walkthrough of one training epoch of a small feed-forward network.

The package provides:
- a pure-Python matrix core with the fixed 2 -> 4 -> 4 -> 2 network constants,
- the step sequencer that decides which of the 17 epoch steps is unlocked,
- per-step formulas producing every forward, loss and gradient value.

Plotting and the torch autograd reference are imported lazily so the core runs
without optional dependencies.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

from .config import DEFAULT_CONSTANTS, NetworkConstants
from .core import (
    EpochSession,
    ShapeMismatch,
    StepId,
    UnknownStep,
    active_step,
    complete,
    is_unlocked,
    reset,
)
from .walkthrough import STEP_LABELS, EpochTrace, evaluate_step, run_epoch

if TYPE_CHECKING:  # pragma: no cover - import-time hinting only
    from .reference import autograd_gradients
    from .visualization import plot_epoch_trace

__all__ = [
    "DEFAULT_CONSTANTS",
    "EpochSession",
    "EpochTrace",
    "NetworkConstants",
    "STEP_LABELS",
    "ShapeMismatch",
    "StepId",
    "UnknownStep",
    "active_step",
    "autograd_gradients",
    "complete",
    "evaluate_step",
    "is_unlocked",
    "plot_epoch_trace",
    "reset",
    "run_epoch",
]


def __getattr__(name: str):  # pragma: no cover - small wrapper
    if name == "plot_epoch_trace":
        return getattr(import_module("epoch_tour.visualization"), name)
    if name == "autograd_gradients":
        return getattr(import_module("epoch_tour.reference"), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
