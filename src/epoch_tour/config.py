"""Configuration dataclasses for the epoch walkthrough."""
from __future__ import annotations

from dataclasses import dataclass

from .core import constants
from .core.matrix import LOSS_EPSILON, Matrix, as_matrix, shape


@dataclass(frozen=True, slots=True)
class NetworkConstants:
    """Parameters of the 2 -> 4 -> 4 -> 2 network used for one epoch.

    Parameters
    ----------
    inputs:
        Single training example as a ``1 x n_in`` row.
    target:
        One-hot label as a ``1 x n_out`` row.
    w1, w2, w3:
        Weight matrices. Each layer maps the previous width to its column count.
    b1, b2, b3:
        Row-vector biases matching the column count of the layer's weights.
    epsilon:
        Offset added to predicted probabilities before taking the logarithm in
        the cross-entropy loss. Must be positive.
    """

    inputs: Matrix
    target: Matrix
    w1: Matrix
    b1: Matrix
    w2: Matrix
    b2: Matrix
    w3: Matrix
    b3: Matrix
    epsilon: float = LOSS_EPSILON

    def __post_init__(self) -> None:
        for name in ("inputs", "target", "w1", "b1", "w2", "b2", "w3", "b3"):
            object.__setattr__(self, name, as_matrix(getattr(self, name)))
        if len(self.inputs) != 1:
            raise ValueError("inputs must be a single row")
        width = len(self.inputs[0])
        for index, (weights, bias) in enumerate(self.layers(), start=1):
            rows, cols = shape(weights)
            if rows != width:
                raise ValueError(f"w{index} must have {width} rows, got {rows}")
            if shape(bias) != (1, cols):
                raise ValueError(f"b{index} must have shape (1, {cols}), got {shape(bias)}")
            width = cols
        if shape(self.target) != (1, width):
            raise ValueError(f"target must have shape (1, {width}), got {shape(self.target)}")
        if self.epsilon <= 0:
            raise ValueError("epsilon must be positive")

    def layers(self) -> tuple[tuple[Matrix, Matrix], ...]:
        """Return ``(weights, bias)`` pairs from the input layer to the output layer."""

        return ((self.w1, self.b1), (self.w2, self.b2), (self.w3, self.b3))


DEFAULT_CONSTANTS = NetworkConstants(
    inputs=constants.NN_INPUT,
    target=constants.Y_TRUE,
    w1=constants.NN_W1,
    b1=constants.NN_B1,
    w2=constants.NN_W2,
    b2=constants.NN_B2,
    w3=constants.NN_W3,
    b3=constants.NN_B3,
)
