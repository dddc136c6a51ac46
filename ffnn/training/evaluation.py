# evaluation.py
from __future__ import annotations
from typing import Dict, Iterator, Tuple
import numpy as np

from ffnn.models.network import FeedForwardNet
from ffnn.models.weights import NetworkShape


def validate_dataset(data: np.ndarray, shape: NetworkShape) -> None:
    """
    Dataset must be (items, input+1) with items a positive multiple of batch_size
    and every label in [0, output_size). Raises ValueError otherwise.
    """
    if data.ndim != 2:
        raise ValueError(f"dataset must be 2-D, got ndim={data.ndim}")
    n_rows, n_cols = data.shape
    if n_rows == 0 or n_rows % shape.batch_size != 0:
        raise ValueError(
            f"Unexpected dimensions of input data: {n_rows} rows is not a positive "
            f"multiple of batch size {shape.batch_size}")
    if n_cols != shape.input_size + 1:
        raise ValueError(
            f"Unexpected dimensions of input data: {n_cols} columns, "
            f"expected {shape.input_size} features + 1 label")
    labels = data[:, shape.input_size]
    if labels.min() < 0 or labels.max() >= shape.output_size:
        raise ValueError(
            f"labels must lie in [0, {shape.output_size}), got range "
            f"[{labels.min()}, {labels.max()}]")


def split_features_labels(data: np.ndarray, input_size: int) -> Tuple[np.ndarray, np.ndarray]:
    """Views of the feature block and the label column."""
    return data[:, :input_size], data[:, input_size]


def iter_batches(data: np.ndarray, shape: NetworkShape,
                 order: np.ndarray | None = None) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """
    Yield consecutive (features, labels) batches of batch_size rows.
    `order` is an optional row permutation; rows and labels move together.
    """
    features, labels = split_features_labels(data, shape.input_size)
    B = shape.batch_size
    for start in range(0, data.shape[0], B):
        if order is None:
            yield features[start:start + B], labels[start:start + B]
        else:
            idx = order[start:start + B]
            yield features[idx], labels[idx]


def score(net: FeedForwardNet, data: np.ndarray) -> Dict[str, float]:
    """Forward-only pass over data in its given order; first-max argmax per row."""
    validate_dataset(data, net.shape)
    correct = 0
    for features, labels in iter_batches(data, net.shape):
        predictions = net.predict(features)
        correct += int((predictions == labels.astype(np.int64)).sum())
    total = int(data.shape[0])
    acc = 100.0 * correct / total
    return {"name": "acc", "metric": acc, "correct": correct, "total": total}


def evaluate(net: FeedForwardNet, data: np.ndarray) -> float:
    """Percentage of rows in data classified correctly."""
    return score(net, data)["metric"]
