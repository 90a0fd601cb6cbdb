"""Autograd reference for the hand-written epoch gradients."""
from __future__ import annotations

from typing import Dict

import torch
from torch import Tensor

from .config import DEFAULT_CONSTANTS, NetworkConstants


def _tensor(values, *, requires_grad: bool = False) -> Tensor:
    return torch.tensor(values, dtype=torch.float64, requires_grad=requires_grad)


def autograd_gradients(constants: NetworkConstants = DEFAULT_CONSTANTS) -> Dict[str, object]:
    """Run the same forward pass in torch and backpropagate the loss.

    Returns a mapping with ``"loss"`` (float), the delta-Z rows ``"z1"``,
    ``"z2"``, ``"z3"`` and the parameter gradients ``"w1"`` ... ``"b3"``, all
    as nested Python lists so they compare directly with the walkthrough values.
    """

    x = _tensor(constants.inputs)
    y = _tensor(constants.target)
    params = {
        name: _tensor(getattr(constants, name), requires_grad=True)
        for name in ("w1", "b1", "w2", "b2", "w3", "b3")
    }

    z1 = x @ params["w1"] + params["b1"]
    z2 = torch.relu(z1) @ params["w2"] + params["b2"]
    z3 = torch.relu(z2) @ params["w3"] + params["b3"]
    for z in (z1, z2, z3):
        z.retain_grad()
    probs = torch.softmax(z3, dim=-1)
    loss = -(y * torch.log(probs + constants.epsilon)).sum()
    loss.backward()

    result: Dict[str, object] = {"loss": float(loss.detach())}
    for name, z in (("z1", z1), ("z2", z2), ("z3", z3)):
        assert z.grad is not None
        result[name] = z.grad.tolist()
    for name, param in params.items():
        assert param.grad is not None
        result[name] = param.grad.tolist()
    return result
