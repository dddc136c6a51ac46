# torch_reference.py
from __future__ import annotations
import numpy as np
import torch

from ffnn.models.network import FeedForwardNet


def reference_cost(theta1: torch.Tensor, theta2: torch.Tensor,
                   features: torch.Tensor, targets: torch.Tensor, reg: float) -> torch.Tensor:
    """
    Same loss as FeedForwardNet.cost, written with torch ops so autograd can
    differentiate it. targets is one-hot, shape (B, output).
    """
    B = features.shape[0]
    ones = torch.ones((B, 1), dtype=features.dtype)
    a1 = torch.cat([ones, features], dim=1)
    a2 = torch.cat([ones, torch.sigmoid(a1 @ theta1.T)], dim=1)
    h = torch.sigmoid(a2 @ theta2.T)
    data_term = ((h - targets) ** 2).sum() / (2.0 * B)
    penalty = (theta1[:, 1:] ** 2).sum() + (theta2[:, 1:] ** 2).sum()
    return data_term + reg * penalty / (2.0 * B)


def autograd_gradient(net: FeedForwardNet, features: np.ndarray, labels: np.ndarray,
                      reg: float) -> np.ndarray:
    """Flat gradient of reference_cost in WeightStore layout (Theta1 then Theta2)."""
    theta1 = torch.tensor(net.store.theta1, dtype=torch.float64, requires_grad=True)
    theta2 = torch.tensor(net.store.theta2, dtype=torch.float64, requires_grad=True)
    X = torch.tensor(np.asarray(features, dtype=np.float64))
    Y = torch.tensor(net.one_hot(labels).T)

    loss = reference_cost(theta1, theta2, X, Y, reg)
    loss.backward()

    return np.concatenate([
        theta1.grad.detach().numpy().ravel(),
        theta2.grad.detach().numpy().ravel(),
    ])
