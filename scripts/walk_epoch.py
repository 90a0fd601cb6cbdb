"""Walk through one training epoch step by step and print every value."""

from __future__ import annotations

import argparse
import math
from typing import Optional, Sequence

from epoch_tour import EpochSession, StepId, run_epoch
from epoch_tour.core.steps import PREREQUISITES, STEP_ORDER
from epoch_tour.walkthrough import STEP_LABELS


def _format_matrix(matrix, precision: int) -> str:
    return "\n".join("    [" + ", ".join(f"{value: .{precision}f}" for value in row) + "]" for row in matrix)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Walk through one epoch of the 2-4-4-2 network")
    parser.add_argument(
        "--until",
        type=str,
        default=STEP_ORDER[-1].value,
        choices=[step.value for step in STEP_ORDER],
        help="Stop after this step",
    )
    parser.add_argument("--precision", type=int, default=4)
    parser.add_argument("--check-autograd", action="store_true", help="Compare gradients with torch autograd")
    parser.add_argument("--plot", type=str, default=None, help="Save a heat map of every computed step")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    trace = run_epoch()
    session = EpochSession()
    until = StepId(args.until)

    for step in STEP_ORDER:
        label = STEP_LABELS[step]
        prerequisite = PREREQUISITES.get(step)
        after = f" (after {prerequisite})" if prerequisite is not None else ""
        if step is not StepId.INPUT:
            if step in session.completed:
                print(f"{step}: completed together with its delta-Z")
            elif not session.is_unlocked(step):
                raise RuntimeError(f"{step} is still locked")
            session.complete(step)
        print(f"{step}{after}: {label.title}  {label.formula}")
        print(_format_matrix(trace[step], args.precision))
        if step is until:
            break

    print(f"Active step: {session.active_step()}")
    if session.is_finished():
        print(f"Epoch complete, loss = {trace.loss:.{args.precision}f}")

    if args.check_autograd:
        from epoch_tour.reference import autograd_gradients

        reference = autograd_gradients()
        worst = 0.0
        for name, grad in trace.gradients().items():
            for row, ref_row in zip(grad, reference[name]):
                for value, ref in zip(row, ref_row):
                    worst = max(worst, abs(value - ref))
        print(f"Max deviation from autograd: {worst:.3e}")
        if not math.isclose(worst, 0.0, abs_tol=1e-9):
            print("Warning: hand-written gradients disagree with autograd.")
            return 1

    if args.plot:
        from epoch_tour.visualization import plot_epoch_trace

        steps = STEP_ORDER[: STEP_ORDER.index(until) + 1]
        fig = plot_epoch_trace(trace, steps)
        fig.savefig(args.plot)
        print(f"Saved plot to {args.plot}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
