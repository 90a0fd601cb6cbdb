"""Sequencing of the 17 steps that make up one walkthrough epoch.

The presentation layer enables a step once :func:`is_unlocked` reports that its
single prerequisite has been completed. Completion itself is never gated here;
:func:`complete` accepts any known step.
"""
from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import AbstractSet, FrozenSet, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class StepId(str, Enum):
    INPUT = "input"
    CALC_Z1 = "calc-z1"
    ACTIVATE_A1 = "activate-a1"
    CALC_Z2 = "calc-z2"
    ACTIVATE_A2 = "activate-a2"
    CALC_Z3 = "calc-z3"
    ACTIVATE_A3 = "activate-a3"
    CALC_LOSS = "calc-loss"
    CALC_DZ3 = "calc-dz3"
    CALC_DW3 = "calc-dw3"
    CALC_DB3 = "calc-db3"
    CALC_DZ2 = "calc-dz2"
    CALC_DW2 = "calc-dw2"
    CALC_DB2 = "calc-db2"
    CALC_DZ1 = "calc-dz1"
    CALC_DW1 = "calc-dw1"
    CALC_DB1 = "calc-db1"

    def __str__(self) -> str:
        return self.value


CompletedSet = FrozenSet[StepId]
StepLike = Union[StepId, str]

# Enum iteration follows definition order, which is the canonical order.
STEP_ORDER: tuple[StepId, ...] = tuple(StepId)

# Backward steps wait on the weight gradient of the layer above (dW3 -> dZ2,
# dW2 -> dZ1) rather than on its delta-Z. Keep this ordering.
PREREQUISITES: Mapping[StepId, StepId] = {
    StepId.CALC_Z1: StepId.INPUT,
    StepId.ACTIVATE_A1: StepId.CALC_Z1,
    StepId.CALC_Z2: StepId.ACTIVATE_A1,
    StepId.ACTIVATE_A2: StepId.CALC_Z2,
    StepId.CALC_Z3: StepId.ACTIVATE_A2,
    StepId.ACTIVATE_A3: StepId.CALC_Z3,
    StepId.CALC_LOSS: StepId.ACTIVATE_A3,
    StepId.CALC_DZ3: StepId.CALC_LOSS,
    StepId.CALC_DW3: StepId.CALC_DZ3,
    StepId.CALC_DB3: StepId.CALC_DZ3,
    StepId.CALC_DZ2: StepId.CALC_DW3,
    StepId.CALC_DW2: StepId.CALC_DZ2,
    StepId.CALC_DB2: StepId.CALC_DZ2,
    StepId.CALC_DZ1: StepId.CALC_DW2,
    StepId.CALC_DW1: StepId.CALC_DZ1,
    StepId.CALC_DB1: StepId.CALC_DZ1,
}

# A bias gradient is a direct readout of its delta-Z, so both complete together.
BIAS_SIBLINGS: Mapping[StepId, StepId] = {
    StepId.CALC_DZ3: StepId.CALC_DB3,
    StepId.CALC_DZ2: StepId.CALC_DB2,
    StepId.CALC_DZ1: StepId.CALC_DB1,
}


class UnknownStep(ValueError):
    """Raised for a step identifier outside the fixed set of 17."""

    def __init__(self, step: object) -> None:
        self.step = step
        super().__init__(f"unknown step {step!r}")


def parse_step(value: StepLike) -> StepId:
    if isinstance(value, StepId):
        return value
    if isinstance(value, str):
        try:
            return StepId(value)
        except ValueError:
            raise UnknownStep(value) from None
    raise UnknownStep(value)


def initial_completed() -> CompletedSet:
    return frozenset({StepId.INPUT})


def reset() -> CompletedSet:
    """Start a new session: the completed set is exactly ``{input}``."""

    return initial_completed()


def complete(step: StepLike, completed: AbstractSet[StepId]) -> CompletedSet:
    """Return ``completed`` with ``step`` (and its bias sibling, if any) added.

    Prerequisites are not checked and completing a step twice is a no-op.
    """

    step = parse_step(step)
    added = {step}
    sibling = BIAS_SIBLINGS.get(step)
    if sibling is not None:
        added.add(sibling)
    return frozenset(completed) | added


def is_unlocked(step: StepLike, completed: AbstractSet[StepId]) -> bool:
    """Return whether ``step`` may be performed given ``completed``.

    ``calc-z1`` is always unlocked. ``input`` has no prerequisite and counts as
    unlocked because every session starts with it already complete; the
    presentation layer never offers it as an action.
    """

    step = parse_step(step)
    if step is StepId.INPUT or step is StepId.CALC_Z1:
        return True
    return PREREQUISITES[step] in completed


def active_step(completed: AbstractSet[StepId]) -> StepId:
    """Return the most advanced completed step in canonical order."""

    for step in reversed(STEP_ORDER):
        if step in completed:
            return step
    return StepId.INPUT


def is_epoch_complete(completed: AbstractSet[StepId]) -> bool:
    return all(step in completed for step in STEP_ORDER)


class EpochSession:
    """Completion state for one pass through the epoch.

    The completed set is replaced, never mutated in place, under a lock so that
    concurrent :meth:`complete` calls from UI handlers cannot interleave.
    Snapshots handed out by :attr:`completed` stay valid after later updates.
    """

    def __init__(self, completed: Optional[AbstractSet[StepLike]] = None) -> None:
        self._lock = threading.Lock()
        if completed is None:
            self._completed = initial_completed()
        else:
            self._completed = frozenset(parse_step(step) for step in completed) | initial_completed()

    @property
    def completed(self) -> CompletedSet:
        return self._completed

    def complete(self, step: StepLike) -> CompletedSet:
        step = parse_step(step)
        with self._lock:
            self._completed = complete(step, self._completed)
            snapshot = self._completed
        logger.debug("completed %s (%d/%d steps)", step, len(snapshot), len(STEP_ORDER))
        return snapshot

    def is_unlocked(self, step: StepLike) -> bool:
        return is_unlocked(step, self._completed)

    def active_step(self) -> StepId:
        return active_step(self._completed)

    def unlocked_steps(self) -> list[StepId]:
        """Steps the user may perform next, in canonical order."""

        completed = self._completed
        return [step for step in STEP_ORDER if step not in completed and is_unlocked(step, completed)]

    def is_finished(self) -> bool:
        return is_epoch_complete(self._completed)

    def reset(self) -> CompletedSet:
        with self._lock:
            self._completed = reset()
        logger.debug("session reset")
        return self._completed
