# synthetic.py
from __future__ import annotations
from typing import Optional
import numpy as np


def linearly_separable(num_items: int = 100, num_features: int = 2,
                       seed: Optional[int] = 0) -> np.ndarray:
    """
    Two-class dataset separated by sum(x[:k]) - sum(x[k:]) = 0, k = num_features // 2.

      class 0: first k features bright (200..255), the rest dark (0..3)
      class 1: first k features dark, the rest bright

    Returns:
      data: (num_items, num_features + 1) uint8, label in the last column,
            classes balanced and interleaved (0, 1, 0, 1, ...).
    """
    assert num_features >= 2, "need at least two features"
    rng = np.random.default_rng(seed)
    k = num_features // 2
    labels = np.arange(num_items) % 2

    bright = rng.integers(200, 256, size=(num_items, num_features))
    dark = rng.integers(0, 4, size=(num_items, num_features))
    first_bright = np.zeros((num_items, num_features), dtype=bool)
    first_bright[:, :k] = True
    mask = np.where(labels[:, None] == 0, first_bright, ~first_bright)

    data = np.empty((num_items, num_features + 1), dtype=np.uint8)
    data[:, :-1] = np.where(mask, bright, dark)
    data[:, -1] = labels
    return data


def balanced_random(num_items: int, num_features: int, num_classes: int,
                    seed: Optional[int] = 0) -> np.ndarray:
    """
    Random byte features with labels cycling through every class in turn,
    so each class has num_items // num_classes rows (± 1). Features carry no
    information about the label.
    """
    rng = np.random.default_rng(seed)
    data = np.empty((num_items, num_features + 1), dtype=np.uint8)
    data[:, :-1] = rng.integers(0, 256, size=(num_items, num_features))
    data[:, -1] = np.arange(num_items) % num_classes
    return data
