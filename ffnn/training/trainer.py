# trainer.py
from __future__ import annotations
from typing import Dict, List, Optional
import time
import numpy as np
from tqdm import tqdm

from ffnn.models.network import FeedForwardNet
from ffnn.training.evaluation import iter_batches, score, validate_dataset


class Trainer:
    """
    Mini-batch gradient descent for FeedForwardNet.

    learn_weights(data, epochs):
      * validates the dataset before touching any weight
      * initializes weights once
      * per epoch: fresh row permutation, then batches strictly in order,
        each one forward -> backprop -> W -= lr * grad

    The shuffle permutes row indices; the caller's matrix is never modified.
    """
    def __init__(
        self,
        net: FeedForwardNet,
        lr: float = 0.015,
        reg: float = 0.095,
        seed: Optional[int] = None,
        eval_every: Optional[int] = None,   # None -> no per-epoch train accuracy
        show_progress: bool = False,
        csv_logger=None,
    ):
        self.net = net
        self.lr = lr
        self.reg = reg
        self.rng = np.random.default_rng(seed)
        self.eval_every = eval_every
        self.show_progress = show_progress
        self.csv_logger = csv_logger
        self.history: List[Dict[str, float]] = []

        assert (eval_every is None) or (isinstance(eval_every, int) and eval_every >= 1), \
            "eval_every must be None or >= 1"

    # ---------- single step ----------

    def train_batch(self, features: np.ndarray, labels: np.ndarray) -> float:
        """forward -> backprop -> update. Returns the batch cost before the update."""
        acts = self.net.forward(features)
        cost = self.net.activation_cost(acts, labels, self.reg)
        grads = self.net.backprop(acts, labels, self.reg)
        self.net.store.subtract_scaled(grads, self.lr)
        return cost

    # ---------- epochs ----------

    def train_epoch(self, data: np.ndarray, epoch: int = 1, num_epochs: int = 1) -> float:
        """One shuffled pass over data. Returns the mean batch cost before each update."""
        order = self.rng.permutation(data.shape[0])
        batches = iter_batches(data, self.net.shape, order=order)
        n_batches = data.shape[0] // self.net.shape.batch_size
        if self.show_progress:
            batches = tqdm(batches, total=n_batches, desc=f"Epoch {epoch}/{num_epochs}", leave=False)

        total_cost = 0.0
        for features, labels in batches:
            total_cost += self.train_batch(features, labels)
        return total_cost / n_batches

    def learn_weights(self, data: np.ndarray, epochs: int = 20) -> List[Dict[str, float]]:
        """
        Train from freshly initialized weights. epochs == 0 leaves the initial
        weights in place. Returns the per-epoch history.
        """
        validate_dataset(data, self.net.shape)
        if epochs < 0:
            raise ValueError(f"epochs must be >= 0, got {epochs}")

        self.net.store.init_weights(self.rng)
        self.history = []

        for ep in range(1, epochs + 1):
            start = time.time()
            cost = self.train_epoch(data, ep, epochs)
            record: Dict[str, float] = {
                "epoch": ep,
                "train_cost": cost,
                "weight_norm": self.net.store.norm(),
                "epoch_time_seconds": time.time() - start,
            }
            if self.eval_every is not None and ep % self.eval_every == 0:
                record["train_acc"] = score(self.net, data)["metric"]
            self.history.append(record)

            if self.show_progress:
                msg = f"Epoch {ep:3d}/{epochs} | cost={cost:.6f} | ||W||={record['weight_norm']:.2f}"
                if "train_acc" in record:
                    msg += f" | acc={record['train_acc']:6.2f}%"
                print(msg)
            if self.csv_logger is not None:
                self.csv_logger.log_epoch(ep, dict(record))

        return self.history
