"""Dense matrix helpers implemented with only the Python standard library.

Matrices are tuples of equal-length tuples of floats. Every function accepts any
sequence of sequences and returns a new matrix; inputs are never mutated.
"""
from __future__ import annotations

import math
from typing import Sequence, Tuple

Row = Tuple[float, ...]
Matrix = Tuple[Row, ...]
MatrixLike = Sequence[Sequence[float]]

LOSS_EPSILON = 1e-12


class ShapeMismatch(ValueError):
    """Raised when operand shapes are incompatible for an operation."""

    def __init__(self, operation: str, expected: object, actual: object, what: str = "shape") -> None:
        self.operation = operation
        self.expected = expected
        self.actual = actual
        super().__init__(f"{operation}: expected {what} {expected}, got {actual}")


def as_matrix(values: MatrixLike) -> Matrix:
    """Normalise ``values`` into an immutable rectangular matrix."""

    if isinstance(values, (str, bytes)):
        raise ValueError("matrix must be a sequence of rows")
    rows = tuple(tuple(float(v) for v in row) for row in values)
    if not rows or not rows[0]:
        raise ValueError("matrix must have at least one row and one column")
    width = len(rows[0])
    for index, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"row {index} has {len(row)} entries, expected {width}")
    return rows


def shape(a: MatrixLike) -> tuple[int, int]:
    return len(a), len(a[0])


def _same_shape(operation: str, a: Matrix, b: Matrix) -> None:
    if shape(a) != shape(b):
        raise ShapeMismatch(operation, shape(a), shape(b))


def multiply(a: MatrixLike, b: MatrixLike) -> Matrix:
    """Standard matrix product ``a @ b``.

    Raises
    ------
    ShapeMismatch
        If ``a`` has a different number of columns than ``b`` has rows.
    """

    a, b = as_matrix(a), as_matrix(b)
    rows, shared = shape(a)
    if shared != len(b):
        raise ShapeMismatch("multiply", shared, len(b), what="inner dimension")
    cols = len(b[0])
    result = [[0.0 for _ in range(cols)] for _ in range(rows)]
    for i in range(rows):
        for k in range(shared):
            aik = a[i][k]
            for j in range(cols):
                result[i][j] += aik * b[k][j]
    return as_matrix(result)


def add(a: MatrixLike, b: MatrixLike) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    _same_shape("add", a, b)
    return tuple(tuple(va + vb for va, vb in zip(row_a, row_b)) for row_a, row_b in zip(a, b))


def subtract(a: MatrixLike, b: MatrixLike) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    _same_shape("subtract", a, b)
    return tuple(tuple(va - vb for va, vb in zip(row_a, row_b)) for row_a, row_b in zip(a, b))


def elementwise_multiply(a: MatrixLike, b: MatrixLike) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    _same_shape("elementwise_multiply", a, b)
    return tuple(tuple(va * vb for va, vb in zip(row_a, row_b)) for row_a, row_b in zip(a, b))


def transpose(a: MatrixLike) -> Matrix:
    return tuple(tuple(col) for col in zip(*as_matrix(a)))


def relu(a: MatrixLike) -> Matrix:
    return tuple(tuple(value if value > 0.0 else 0.0 for value in row) for row in as_matrix(a))


def relu_derivative(a: MatrixLike) -> Matrix:
    """Entrywise step function of ``a``.

    Pass the pre-activation matrix. Entries are ``1.0`` where the value is
    strictly positive and ``0.0`` elsewhere, including at exactly zero.
    """

    return tuple(tuple(1.0 if value > 0.0 else 0.0 for value in row) for row in as_matrix(a))


def softmax(logits: MatrixLike) -> Matrix:
    """Row-wise softmax with max subtraction.

    A row whose exponentials sum to zero falls back to a uniform distribution.
    """

    probs = []
    for row in as_matrix(logits):
        max_val = max(row)
        exps = [math.exp(value - max_val) for value in row]
        total = sum(exps)
        if total == 0.0:
            probs.append(tuple(1.0 / len(row) for _ in row))
        else:
            probs.append(tuple(value / total for value in exps))
    return tuple(probs)


def cross_entropy_loss(pred: MatrixLike, true_label: MatrixLike, eps: float = LOSS_EPSILON) -> Matrix:
    """Categorical cross-entropy for a single example, returned as a 1x1 matrix."""

    pred, true_label = as_matrix(pred), as_matrix(true_label)
    if len(pred) != 1:
        raise ShapeMismatch("cross_entropy_loss", 1, len(pred), what="row count")
    _same_shape("cross_entropy_loss", pred, true_label)
    total = 0.0
    for p, t in zip(pred[0], true_label[0]):
        total -= t * math.log(p + eps)
    return ((total,),)
