"""Fixed parameters of the 2 -> 4 -> 4 -> 2 network walked through in one epoch."""
from __future__ import annotations

from .matrix import Matrix, as_matrix

# Sample input (1x2)
NN_INPUT: Matrix = as_matrix([[0.5, -0.2]])

# One-hot label; the second class is the correct one
Y_TRUE: Matrix = as_matrix([[0.0, 1.0]])

# Layer 1: 2x4
NN_W1: Matrix = as_matrix([
    [0.1, 0.4, -0.2, 0.7],
    [0.3, -0.5, 0.6, -0.1],
])
NN_B1: Matrix = as_matrix([[0.1, 0.2, 0.1, -0.3]])

# Layer 2: 4x4
NN_W2: Matrix = as_matrix([
    [0.4, -0.2, 0.1, 0.5],
    [-0.1, 0.3, -0.5, 0.2],
    [0.7, -0.3, 0.2, -0.1],
    [0.2, 0.6, -0.4, 0.3],
])
NN_B2: Matrix = as_matrix([[-0.2, 0.1, 0.3, -0.1]])

# Layer 3 (output): 4x2
NN_W3: Matrix = as_matrix([
    [0.2, -0.1],
    [-0.3, 0.5],
    [0.6, -0.2],
    [-0.1, 0.4],
])
NN_B3: Matrix = as_matrix([[0.1, -0.2]])

__all__ = ["NN_INPUT", "Y_TRUE", "NN_W1", "NN_B1", "NN_W2", "NN_B2", "NN_W3", "NN_B3"]
