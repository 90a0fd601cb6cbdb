"""Values produced at each step of the epoch walkthrough.

Every quantity is recomputed on demand from the network constants plus whatever
intermediates the caller has already derived. Gradients use the hand-written
formulas for softmax cross-entropy and ReLU; nothing is differentiated
automatically.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Mapping, NamedTuple, Optional

from .config import DEFAULT_CONSTANTS, NetworkConstants
from .core.matrix import (
    Matrix,
    add,
    as_matrix,
    cross_entropy_loss,
    elementwise_multiply,
    multiply,
    relu,
    relu_derivative,
    softmax,
    subtract,
    transpose,
)
from .core.steps import STEP_ORDER, StepId, StepLike, parse_step


class StepLabel(NamedTuple):
    title: str
    formula: str


STEP_LABELS: Mapping[StepId, StepLabel] = {
    StepId.INPUT: StepLabel("Input", "X"),
    StepId.CALC_Z1: StepLabel("Layer 1 linear output", "Z1 = X·W1 + B1"),
    StepId.ACTIVATE_A1: StepLabel("Layer 1 activation", "A1 = ReLU(Z1)"),
    StepId.CALC_Z2: StepLabel("Layer 2 linear output", "Z2 = A1·W2 + B2"),
    StepId.ACTIVATE_A2: StepLabel("Layer 2 activation", "A2 = ReLU(Z2)"),
    StepId.CALC_Z3: StepLabel("Output linear output", "Z3 = A2·W3 + B3"),
    StepId.ACTIVATE_A3: StepLabel("Prediction", "ŷ = A3 = softmax(Z3)"),
    StepId.CALC_LOSS: StepLabel("Loss", "L = -Σ y·ln(ŷ)"),
    StepId.CALC_DZ3: StepLabel("Output error", "dZ3 = A3 - Y"),
    StepId.CALC_DW3: StepLabel("Output weight gradient", "dW3 = A2ᵀ·dZ3"),
    StepId.CALC_DB3: StepLabel("Output bias gradient", "dB3 = dZ3"),
    StepId.CALC_DZ2: StepLabel("Layer 2 error", "dZ2 = (dZ3·W3ᵀ) ⊙ ReLU'(Z2)"),
    StepId.CALC_DW2: StepLabel("Layer 2 weight gradient", "dW2 = A1ᵀ·dZ2"),
    StepId.CALC_DB2: StepLabel("Layer 2 bias gradient", "dB2 = dZ2"),
    StepId.CALC_DZ1: StepLabel("Layer 1 error", "dZ1 = (dZ2·W2ᵀ) ⊙ ReLU'(Z1)"),
    StepId.CALC_DW1: StepLabel("Layer 1 weight gradient", "dW1 = Xᵀ·dZ1"),
    StepId.CALC_DB1: StepLabel("Layer 1 bias gradient", "dB1 = dZ1"),
}

GRADIENT_NAMES: Mapping[StepId, str] = {
    StepId.CALC_DW1: "w1",
    StepId.CALC_DB1: "b1",
    StepId.CALC_DW2: "w2",
    StepId.CALC_DB2: "b2",
    StepId.CALC_DW3: "w3",
    StepId.CALC_DB3: "b3",
}

Resolver = Callable[[StepId], Matrix]


def _linear(inputs: Matrix, weights: Matrix, bias: Matrix) -> Matrix:
    return add(multiply(inputs, weights), bias)


def _hidden_error(upstream: Matrix, weights: Matrix, pre_activation: Matrix) -> Matrix:
    # Pass the pre-activation so ReLU'(0) is taken as 0.
    return elementwise_multiply(multiply(upstream, transpose(weights)), relu_derivative(pre_activation))


def _formulas(c: NetworkConstants) -> Dict[StepId, Callable[[Resolver], Matrix]]:
    s = StepId
    return {
        s.INPUT: lambda get: c.inputs,
        s.CALC_Z1: lambda get: _linear(get(s.INPUT), c.w1, c.b1),
        s.ACTIVATE_A1: lambda get: relu(get(s.CALC_Z1)),
        s.CALC_Z2: lambda get: _linear(get(s.ACTIVATE_A1), c.w2, c.b2),
        s.ACTIVATE_A2: lambda get: relu(get(s.CALC_Z2)),
        s.CALC_Z3: lambda get: _linear(get(s.ACTIVATE_A2), c.w3, c.b3),
        s.ACTIVATE_A3: lambda get: softmax(get(s.CALC_Z3)),
        s.CALC_LOSS: lambda get: cross_entropy_loss(get(s.ACTIVATE_A3), c.target, eps=c.epsilon),
        s.CALC_DZ3: lambda get: subtract(get(s.ACTIVATE_A3), c.target),
        s.CALC_DW3: lambda get: multiply(transpose(get(s.ACTIVATE_A2)), get(s.CALC_DZ3)),
        s.CALC_DB3: lambda get: get(s.CALC_DZ3),
        s.CALC_DZ2: lambda get: _hidden_error(get(s.CALC_DZ3), c.w3, get(s.CALC_Z2)),
        s.CALC_DW2: lambda get: multiply(transpose(get(s.ACTIVATE_A1)), get(s.CALC_DZ2)),
        s.CALC_DB2: lambda get: get(s.CALC_DZ2),
        s.CALC_DZ1: lambda get: _hidden_error(get(s.CALC_DZ2), c.w2, get(s.CALC_Z1)),
        s.CALC_DW1: lambda get: multiply(transpose(get(s.INPUT)), get(s.CALC_DZ1)),
        s.CALC_DB1: lambda get: get(s.CALC_DZ1),
    }


def evaluate_step(
    step: StepLike,
    derived: Optional[Mapping[StepLike, Matrix]] = None,
    constants: NetworkConstants = DEFAULT_CONSTANTS,
) -> Matrix:
    """Compute the value shown for ``step``.

    Parameters
    ----------
    step:
        Step to evaluate, as a :class:`StepId` or its string value.
    derived:
        Intermediates the user has already produced, keyed by step. They are
        used as given; anything missing is recomputed from ``constants``.
    constants:
        Network parameters. Defaults to the fixed walkthrough network.
    """

    formulas = _formulas(constants)
    known: Dict[StepId, Matrix] = {}
    if derived:
        known = {parse_step(key): as_matrix(value) for key, value in derived.items()}

    def resolve(target: StepId) -> Matrix:
        if target not in known:
            known[target] = formulas[target](resolve)
        return known[target]

    return resolve(parse_step(step))


@dataclass
class EpochTrace:
    """Every step value of one epoch, in canonical order."""

    values: Dict[StepId, Matrix] = field(default_factory=dict)

    def __getitem__(self, step: StepLike) -> Matrix:
        return self.values[parse_step(step)]

    def __iter__(self) -> Iterator[StepId]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    @property
    def prediction(self) -> Matrix:
        return self.values[StepId.ACTIVATE_A3]

    @property
    def loss(self) -> float:
        return self.values[StepId.CALC_LOSS][0][0]

    def gradients(self) -> Dict[str, Matrix]:
        """Weight and bias gradients keyed by parameter name (``"w1"``, ``"b1"``, ...)."""

        return {name: self.values[step] for step, name in GRADIENT_NAMES.items()}


def run_epoch(constants: NetworkConstants = DEFAULT_CONSTANTS) -> EpochTrace:
    trace = EpochTrace()
    for step in STEP_ORDER:
        trace.values[step] = evaluate_step(step, trace.values, constants)
    return trace
