# network.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np

from ffnn.models.weights import NetworkShape, WeightStore


def sigmoid(x: np.ndarray) -> np.ndarray:
    # exp overflows to inf for large negative x, which still gives exactly 0
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_grad(s: np.ndarray) -> np.ndarray:
    # s is already sigmoid(z), not the pre-activation z
    return s * (1.0 - s)


@dataclass
class Activations:
    layer1: np.ndarray  # (B, input+1),  col 0 = 1
    layer2: np.ndarray  # (B, hidden+1), col 0 = 1
    layer3: np.ndarray  # (B, output)
    version: int        # WeightStore.version used for this pass


class FeedForwardNet:
    """
    Three-layer sigmoid network (input -> hidden -> output), batch-major:

      layer1 = [1, x]
      layer2 = [1, sigmoid(Theta1 @ layer1.T).T]
      layer3 = sigmoid(Theta2 @ layer2.T).T

    Every batch has exactly shape.batch_size rows. forward() returns a fresh
    Activations value; backprop() consumes it. Nothing is cached on the net.
    """
    def __init__(self, shape: NetworkShape = NetworkShape(), store: Optional[WeightStore] = None):
        shape.check()
        if store is not None and store.shape != shape:
            raise ValueError(f"WeightStore shape {store.shape} does not match {shape}")
        self.shape = shape
        self.store = store if store is not None else WeightStore(shape)

    # ----- checks -----
    def _check_features(self, features: np.ndarray) -> None:
        s = self.shape
        if features.ndim != 2:
            raise ValueError(f"features must be 2-D, got ndim={features.ndim}")
        if features.shape[0] != s.batch_size:
            raise ValueError(
                f"batch must have {s.batch_size} rows, got {features.shape[0]}")
        if features.shape[1] != s.input_size:
            raise ValueError(
                f"batch must have {s.input_size} feature columns, got {features.shape[1]}")

    def _check_labels(self, labels: np.ndarray) -> np.ndarray:
        labels = np.asarray(labels).reshape(-1)
        if labels.shape[0] != self.shape.batch_size:
            raise ValueError(
                f"batch must have {self.shape.batch_size} labels, got {labels.shape[0]}")
        if labels.size and (labels.min() < 0 or labels.max() >= self.shape.output_size):
            raise ValueError(
                f"labels must lie in [0, {self.shape.output_size}), "
                f"got range [{labels.min()}, {labels.max()}]")
        return labels.astype(np.int64)

    def _check_activations(self, acts: Optional[Activations]) -> None:
        s = self.shape
        if acts is None:
            raise RuntimeError("backprop called without a preceding forward pass")
        expected = {
            "layer1": (s.batch_size, s.input_size + 1),
            "layer2": (s.batch_size, s.hidden_size + 1),
            "layer3": (s.batch_size, s.output_size),
        }
        for name, shp in expected.items():
            got = getattr(acts, name).shape
            if got != shp:
                raise RuntimeError(f"{name} has shape {got}, expected {shp}")
        if acts.version != self.store.version:
            raise RuntimeError(
                f"activations are stale (computed at weight version {acts.version}, "
                f"current version {self.store.version})")

    # ----- forward -----
    def forward(self, features: np.ndarray) -> Activations:
        self._check_features(features)
        s = self.shape
        theta1 = self.store.theta1
        theta2 = self.store.theta2

        layer1 = np.ones((s.batch_size, s.input_size + 1), dtype=np.float64)
        layer1[:, 1:] = features

        layer2 = np.ones((s.batch_size, s.hidden_size + 1), dtype=np.float64)
        layer2[:, 1:] = sigmoid(theta1 @ layer1.T).T

        layer3 = sigmoid(theta2 @ layer2.T).T
        return Activations(layer1=layer1, layer2=layer2, layer3=layer3,
                           version=self.store.version)

    # ----- backward -----
    def one_hot(self, labels: np.ndarray) -> np.ndarray:
        """Y[k, i] = 1 iff labels[i] == k, shape (output, B)."""
        labels = np.asarray(labels).reshape(-1)
        return (np.arange(self.shape.output_size)[:, None] == labels[None, :]).astype(np.float64)

    def backprop(self, acts: Optional[Activations], labels: np.ndarray, reg: float) -> np.ndarray:
        """
        Regularized gradient in WeightStore layout (Theta1 then Theta2, row-major).

          d3 = (h - Y) * h(1-h)                     (output, B)
          d2 = Theta2[:,1:].T @ d3 * a2(1-a2)       (hidden, B)
          G2 = d3 @ layer2 / B,  G1 = d2 @ layer1 / B
          G[:,1:] += reg * Theta[:,1:] / B          (bias columns untouched)
        """
        labels = self._check_labels(labels)
        self._check_activations(acts)
        B = self.shape.batch_size
        theta1 = self.store.theta1
        theta2 = self.store.theta2

        y = self.one_hot(labels)
        out_t = acts.layer3.T
        err_l3 = (out_t - y) * sigmoid_grad(out_t)

        err_l2 = theta2[:, 1:].T @ err_l3
        err_l2 *= sigmoid_grad(acts.layer2[:, 1:].T)

        grad_l23 = (err_l3 @ acts.layer2) / B
        grad_l12 = (err_l2 @ acts.layer1) / B

        grad_l23[:, 1:] += (reg * theta2[:, 1:]) / B
        grad_l12[:, 1:] += (reg * theta1[:, 1:]) / B

        return np.concatenate([grad_l12.ravel(), grad_l23.ravel()])

    # ----- diagnostics -----
    def cost(self, features: np.ndarray, labels: np.ndarray, reg: float) -> float:
        """
        Loss whose gradient is backprop():
          J = 1/(2B) * sum((h - Y)^2) + reg/(2B) * sum(non-bias theta^2)
        """
        return self.activation_cost(self.forward(features), labels, reg)

    def activation_cost(self, acts: Activations, labels: np.ndarray, reg: float) -> float:
        """cost() for activations that are already computed."""
        labels = self._check_labels(labels)
        self._check_activations(acts)
        B = self.shape.batch_size
        diff = acts.layer3.T - self.one_hot(labels)
        data_term = float((diff * diff).sum()) / (2.0 * B)
        penalty = float((self.store.theta1[:, 1:] ** 2).sum() + (self.store.theta2[:, 1:] ** 2).sum())
        return data_term + reg * penalty / (2.0 * B)

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Index of the first maximal output per row."""
        return np.argmax(self.forward(features).layer3, axis=1)


def numerical_gradient(net: FeedForwardNet, features: np.ndarray, labels: np.ndarray,
                       reg: float, eps: float = 1e-4) -> np.ndarray:
    """Centered finite differences of net.cost over every weight."""
    w = net.store.weights
    grad = np.zeros_like(w)
    for i in range(w.size):
        orig = w[i]
        w[i] = orig + eps
        plus = net.cost(features, labels, reg)
        w[i] = orig - eps
        minus = net.cost(features, labels, reg)
        w[i] = orig
        grad[i] = (plus - minus) / (2.0 * eps)
    return grad
