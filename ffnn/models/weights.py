# weights.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np


def init_epsilon(fan_in: int, fan_out: int) -> float:
    """Half-width of the uniform init range for a layer (bias units not counted)."""
    return float(np.sqrt(6.0) / np.sqrt(fan_in + fan_out))


@dataclass(frozen=True)
class NetworkShape:
    input_size: int = 784
    hidden_size: int = 30
    output_size: int = 10
    batch_size: int = 50

    def check(self) -> None:
        for name in ("input_size", "hidden_size", "output_size", "batch_size"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    @property
    def theta1_shape(self) -> tuple[int, int]:
        return (self.hidden_size, self.input_size + 1)

    @property
    def theta2_shape(self) -> tuple[int, int]:
        return (self.output_size, self.hidden_size + 1)

    @property
    def head_size(self) -> int:
        rows, cols = self.theta1_shape
        return rows * cols

    @property
    def tail_size(self) -> int:
        rows, cols = self.theta2_shape
        return rows * cols

    @property
    def num_weights(self) -> int:
        return self.head_size + self.tail_size


class WeightStore:
    """
    Single flat parameter vector holding both weight matrices:

      weights[:head]  -> Theta1 (hidden, input+1)   row-major
      weights[head:]  -> Theta2 (output, hidden+1)  row-major

    Column 0 of each matrix is the bias weight. theta1/theta2 are views into
    the flat vector, so writes through them land in `weights` and vice versa.

    `version` is bumped on every mutation; activations remember the version
    they were computed against so a stale forward pass can be detected.
    """
    def __init__(self, shape: NetworkShape, weights: Optional[np.ndarray] = None):
        shape.check()
        self.shape = shape
        if weights is None:
            self.weights = np.zeros(shape.num_weights, dtype=np.float64)
        else:
            weights = np.asarray(weights, dtype=np.float64)
            if weights.shape != (shape.num_weights,):
                raise ValueError(
                    f"weights must be ({shape.num_weights},), got {weights.shape}")
            self.weights = weights.copy()
        self.version = 0

    # ----- views -----
    @property
    def theta1(self) -> np.ndarray:
        return self.weights[: self.shape.head_size].reshape(self.shape.theta1_shape)

    @property
    def theta2(self) -> np.ndarray:
        return self.weights[self.shape.head_size:].reshape(self.shape.theta2_shape)

    # ----- mutation -----
    def init_weights(self, rng: Optional[np.random.Generator] = None) -> None:
        """
        Uniform symmetry-breaking init, scaled per layer:
          Theta1 ~ U[-eps1, eps1),  eps1 = sqrt(6)/sqrt(input + hidden)
          Theta2 ~ U[-eps2, eps2),  eps2 = sqrt(6)/sqrt(hidden + output)
        """
        rng = np.random.default_rng() if rng is None else rng
        s = self.shape
        eps_hidden = init_epsilon(s.input_size, s.hidden_size)
        eps_out = init_epsilon(s.hidden_size, s.output_size)

        self.weights[:] = rng.random(s.num_weights)
        head = self.weights[: s.head_size]
        tail = self.weights[s.head_size:]
        head *= 2.0 * eps_hidden
        head -= eps_hidden
        tail *= 2.0 * eps_out
        tail -= eps_out
        self.version += 1

    def subtract_scaled(self, gradient: np.ndarray, scale: float) -> None:
        """W <- W - scale * gradient, in place."""
        if gradient.shape != self.weights.shape:
            raise ValueError(
                f"gradient must be {self.weights.shape}, got {gradient.shape}")
        self.weights -= scale * gradient
        self.version += 1

    def norm(self) -> float:
        return float(np.linalg.norm(self.weights))
