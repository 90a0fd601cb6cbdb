"""Plotting utilities for epoch traces."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from .core.steps import StepLike, parse_step
from .walkthrough import STEP_LABELS, EpochTrace


def plot_epoch_trace(trace: EpochTrace, steps: Optional[Sequence[StepLike]] = None, *, columns: int = 4):
    """Draw one annotated heat map per step value and return the figure."""

    selected = [parse_step(step) for step in steps] if steps is not None else list(trace)
    if not selected:
        raise ValueError("at least one step is required")
    if columns <= 0:
        raise ValueError("columns must be positive")

    cols = min(columns, len(selected))
    rows = math.ceil(len(selected) / cols)
    fig, axes = plt.subplots(rows, cols, figsize=(3.2 * cols, 2.6 * rows), squeeze=False)
    for ax, step in zip(axes.flat, selected):
        matrix = trace[step]
        ax.imshow(matrix, cmap="coolwarm", aspect="auto")
        for i, row in enumerate(matrix):
            for j, value in enumerate(row):
                ax.text(j, i, f"{value:.3f}", ha="center", va="center", fontsize=7)
        ax.set_title(STEP_LABELS[step].formula, fontsize=8)
        ax.set_xticks([])
        ax.set_yticks([])
    for ax in list(axes.flat)[len(selected):]:
        ax.axis("off")
    fig.tight_layout()
    return fig
