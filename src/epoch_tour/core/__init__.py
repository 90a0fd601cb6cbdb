"""Numeric core and step sequencing for the epoch walkthrough."""

from .constants import NN_B1, NN_B2, NN_B3, NN_INPUT, NN_W1, NN_W2, NN_W3, Y_TRUE
from .matrix import (
    LOSS_EPSILON,
    Matrix,
    ShapeMismatch,
    add,
    as_matrix,
    cross_entropy_loss,
    elementwise_multiply,
    multiply,
    relu,
    relu_derivative,
    shape,
    softmax,
    subtract,
    transpose,
)
from .steps import (
    BIAS_SIBLINGS,
    PREREQUISITES,
    STEP_ORDER,
    EpochSession,
    StepId,
    UnknownStep,
    active_step,
    complete,
    initial_completed,
    is_epoch_complete,
    is_unlocked,
    parse_step,
    reset,
)

__all__ = [
    "BIAS_SIBLINGS",
    "EpochSession",
    "LOSS_EPSILON",
    "Matrix",
    "NN_B1",
    "NN_B2",
    "NN_B3",
    "NN_INPUT",
    "NN_W1",
    "NN_W2",
    "NN_W3",
    "PREREQUISITES",
    "STEP_ORDER",
    "ShapeMismatch",
    "StepId",
    "UnknownStep",
    "Y_TRUE",
    "active_step",
    "add",
    "as_matrix",
    "complete",
    "cross_entropy_loss",
    "elementwise_multiply",
    "initial_completed",
    "is_epoch_complete",
    "is_unlocked",
    "multiply",
    "parse_step",
    "relu",
    "relu_derivative",
    "reset",
    "shape",
    "softmax",
    "subtract",
    "transpose",
]
