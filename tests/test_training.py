#!/usr/bin/env python
"""
Test the trainer and evaluator.

This script tests:
- Training a separable two-class problem beyond 90% accuracy
- Untrained (0 epoch) accuracy near chance
- Dataset validation (sizes and label range) before any weight mutation
- Shuffling keeps rows and labels together and leaves caller data intact
- Evaluation order, tie breaking and history records

Usage:
    python tests/test_training.py
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

import tempfile
import numpy as np
import pandas as pd

from ffnn.data.synthetic import balanced_random, linearly_separable
from ffnn.models.network import FeedForwardNet
from ffnn.models.weights import NetworkShape
from ffnn.training.evaluation import evaluate, iter_batches, score, validate_dataset
from ffnn.training.trainer import Trainer
from ffnn.utils.csv_logger import CSVLogger
from ffnn.utils.visualization import plot_history


def test_separable_two_class():
    """100 points, batch 10, 20 epochs, lr 0.1, reg 0 -> above 90%."""
    print("\n" + "=" * 60)
    print("Test: Separable two-class training")
    print("=" * 60)

    data = linearly_separable(num_items=100, num_features=2, seed=0)
    net = FeedForwardNet(NetworkShape(input_size=2, hidden_size=30, output_size=2, batch_size=10))

    # a single init scores 0, 50 or 100% on mirrored classes; average over inits
    untrained = []
    for seed in range(40):
        Trainer(net, lr=0.1, reg=0.0, seed=seed).learn_weights(data, epochs=0)
        untrained.append(evaluate(net, data))
    before = float(np.mean(untrained))
    assert abs(before - 50.0) <= 25.0

    trainer = Trainer(net, lr=0.1, reg=0.0, seed=1)
    history = trainer.learn_weights(data, epochs=20)
    after = evaluate(net, data)

    print(f"  accuracy before: {before:.1f}%  after: {after:.1f}%")
    print(f"  cost first epoch: {history[0]['train_cost']:.4f}  last: {history[-1]['train_cost']:.4f}")
    assert len(history) == 20
    assert after > 90.0
    assert history[-1]['train_cost'] < history[0]['train_cost']

    print("✓ Training separates the classes")


def test_zero_epochs_is_chance():
    """Freshly initialized weights score near 100 / output on balanced data."""
    print("\n" + "=" * 60)
    print("Test: Zero-epoch accuracy near chance")
    print("=" * 60)

    shape = NetworkShape(input_size=784, hidden_size=30, output_size=10, batch_size=50)
    data = balanced_random(num_items=2000, num_features=784, num_classes=10, seed=3)

    for seed in (0, 1, 2):
        net = FeedForwardNet(shape)
        trainer = Trainer(net, seed=seed)
        history = trainer.learn_weights(data, epochs=0)
        acc = evaluate(net, data)
        print(f"  seed={seed}: {acc:.2f}%")
        assert history == []
        assert abs(acc - 10.0) <= 15.0

    print("✓ Untrained network guesses at chance level")


def test_zero_epochs_keeps_initial_weights():
    """epochs=0 leaves exactly the freshly initialized weights."""
    print("\n" + "=" * 60)
    print("Test: Zero epochs leaves initial weights")
    print("=" * 60)

    shape = NetworkShape(input_size=4, hidden_size=3, output_size=2, batch_size=5)
    data = balanced_random(10, 4, 2, seed=0)

    net = FeedForwardNet(shape)
    Trainer(net, seed=9).learn_weights(data, epochs=0)

    reference = FeedForwardNet(shape)
    reference.store.init_weights(np.random.default_rng(9))
    assert np.array_equal(net.store.weights, reference.store.weights)

    print("✓ No update without epochs")


def test_invalid_size_fails_before_mutation():
    """Row count not a multiple of batch size fails with weights untouched."""
    print("\n" + "=" * 60)
    print("Test: Invalid dataset size")
    print("=" * 60)

    shape = NetworkShape(input_size=2, hidden_size=3, output_size=2, batch_size=10)
    net = FeedForwardNet(shape)
    net.store.init_weights(np.random.default_rng(123))
    before = net.store.weights.copy()
    version = net.store.version

    for rows in (105, 5, 0):
        bad = linearly_separable(num_items=max(rows, 2), num_features=2)[:rows]
        try:
            Trainer(net, lr=0.1, reg=0.0, seed=0).learn_weights(bad, epochs=3)
            raise AssertionError(f"{rows} rows should be rejected")
        except ValueError:
            pass
        assert np.array_equal(net.store.weights, before)
        assert net.store.version == version

    wrong_cols = np.zeros((10, 4), dtype=np.uint8)
    for fn in (lambda: Trainer(net).learn_weights(wrong_cols, 1), lambda: evaluate(net, wrong_cols)):
        try:
            fn()
            raise AssertionError("wrong column count should be rejected")
        except ValueError:
            pass
    assert np.array_equal(net.store.weights, before)

    try:
        Trainer(net).learn_weights(linearly_separable(20, 2), epochs=-1)
        raise AssertionError("negative epochs should be rejected")
    except ValueError:
        pass
    assert np.array_equal(net.store.weights, before)

    print("✓ Rejected before any weight mutation")


def test_bad_label_fails_before_mutation():
    """A label outside [0, output) late in the data is rejected before init or any update."""
    print("\n" + "=" * 60)
    print("Test: Out-of-range label")
    print("=" * 60)

    shape = NetworkShape(input_size=2, hidden_size=3, output_size=2, batch_size=10)
    net = FeedForwardNet(shape)
    net.store.init_weights(np.random.default_rng(5))
    before = net.store.weights.copy()
    version = net.store.version

    data = linearly_separable(40, 2, seed=0)
    data[35, -1] = 7
    for fn in (lambda: Trainer(net, lr=0.1, reg=0.0, seed=0).learn_weights(data, epochs=1),
               lambda: evaluate(net, data)):
        try:
            fn()
            raise AssertionError("label 7 should be rejected for 2 outputs")
        except ValueError:
            pass
        assert net.store.version == version
        assert np.array_equal(net.store.weights, before)

    print("✓ Labels checked up front")


def test_shuffle_keeps_rows_and_labels_together():
    """Permuted batches carry each row with its own label; caller data untouched."""
    print("\n" + "=" * 60)
    print("Test: Shuffle keeps rows and labels together")
    print("=" * 60)

    shape = NetworkShape(input_size=2, hidden_size=2, output_size=4, batch_size=4)
    data = np.zeros((12, 3), dtype=np.uint8)
    data[:, 0] = np.arange(12)          # row id
    data[:, 1] = np.arange(12) * 2
    data[:, 2] = np.arange(12) % 4      # label derived from row id
    original = data.copy()

    order = np.random.default_rng(0).permutation(12)
    seen = []
    for features, labels in iter_batches(data, shape, order=order):
        assert features.shape == (4, 2) and labels.shape == (4,)
        assert np.array_equal(labels, features[:, 0] % 4)
        seen.extend(features[:, 0].tolist())
    assert sorted(seen) == list(range(12)), "every row exactly once"

    net = FeedForwardNet(shape)
    Trainer(net, lr=0.1, reg=0.0, seed=0).learn_weights(data, epochs=3)
    assert np.array_equal(data, original), "training must not mutate the dataset"

    print("✓ Index permutation only")


def test_shuffle_is_fresh_each_epoch():
    """Two epochs see different permutations."""
    print("\n" + "=" * 60)
    print("Test: Fresh permutation per epoch")
    print("=" * 60)

    shape = NetworkShape(input_size=1, hidden_size=2, output_size=2, batch_size=5)
    data = np.zeros((50, 2), dtype=np.uint8)
    data[:, 0] = np.arange(50)
    data[:, 1] = np.arange(50) % 2

    orders = []

    class RecordingTrainer(Trainer):
        def train_batch(self, features, labels):
            orders[-1].extend(features[:, 0].tolist())
            return super().train_batch(features, labels)

        def train_epoch(self, data, epoch=1, num_epochs=1):
            orders.append([])
            return super().train_epoch(data, epoch, num_epochs)

    RecordingTrainer(FeedForwardNet(shape), seed=4).learn_weights(data, epochs=2)
    assert len(orders) == 2
    assert sorted(orders[0]) == sorted(orders[1]) == list(range(50))
    assert orders[0] != orders[1]

    print("✓ Each epoch draws its own permutation")


def test_evaluate_order_and_ties():
    """Evaluation is deterministic and breaks ties by the lowest index."""
    print("\n" + "=" * 60)
    print("Test: Evaluation ties and determinism")
    print("=" * 60)

    shape = NetworkShape(input_size=3, hidden_size=2, output_size=3, batch_size=2)
    net = FeedForwardNet(shape)      # all-zero weights: every output is 0.5
    data = np.array([[1, 2, 3, 0],
                     [4, 5, 6, 1],
                     [7, 8, 9, 0],
                     [0, 0, 0, 2]], dtype=np.uint8)

    result = score(net, data)
    assert result['correct'] == 2 and result['total'] == 4
    assert evaluate(net, data) == 50.0
    assert evaluate(net, data) == evaluate(net, data)

    print("✓ First maximum wins, results repeatable")


def test_validate_dataset():
    """validate_dataset rejects non-multiples, wrong widths and out-of-range labels."""
    print("\n" + "=" * 60)
    print("Test: validate_dataset")
    print("=" * 60)

    shape = NetworkShape(input_size=2, hidden_size=2, output_size=2, batch_size=3)
    validate_dataset(np.zeros((6, 3), dtype=np.uint8), shape)
    for bad in (np.zeros((0, 3)), np.zeros((4, 3)), np.zeros((6, 2)), np.zeros(6)):
        try:
            validate_dataset(bad, shape)
        except ValueError:
            continue
        raise AssertionError(f"shape {bad.shape} should be rejected")

    labels_out = np.zeros((6, 3), dtype=np.uint8)
    labels_out[4, 2] = 2
    try:
        validate_dataset(labels_out, shape)
        raise AssertionError("label 2 should be rejected for 2 outputs")
    except ValueError:
        pass

    print("✓ Dataset validation")


def test_history_and_csv_log():
    """History records per epoch and the CSV logger receives one row per epoch."""
    print("\n" + "=" * 60)
    print("Test: History and CSV log")
    print("=" * 60)

    class Cfg:
        input_size = 2
        hidden_size = 4
        output_size = 2
        batch_size = 10
        learning_rate = 0.1
        regularization = 0.0

    data = linearly_separable(40, 2, seed=2)
    net = FeedForwardNet(NetworkShape(input_size=2, hidden_size=4, output_size=2, batch_size=10))

    with tempfile.TemporaryDirectory() as tmp:
        log_path = os.path.join(tmp, 'train.csv')
        trainer = Trainer(net, lr=0.1, reg=0.0, seed=0, eval_every=2,
                          csv_logger=CSVLogger(log_path, Cfg()))
        history = trainer.learn_weights(data, epochs=4)

        assert [rec['epoch'] for rec in history] == [1, 2, 3, 4]
        assert 'train_acc' not in history[0] and 'train_acc' in history[1]
        assert all(rec['weight_norm'] > 0 for rec in history)

        df = pd.read_csv(log_path)
        assert len(df) == 4
        assert list(df['epoch']) == [1, 2, 3, 4]
        assert df['batch_size'].iloc[0] == 10
        assert np.isnan(df['train_acc'].iloc[0]) and not np.isnan(df['train_acc'].iloc[1])

    print("✓ History and CSV rows per epoch")


def test_plot_history():
    """Training curves are written to an image file."""
    print("\n" + "=" * 60)
    print("Test: plot_history")
    print("=" * 60)

    history = [
        {"epoch": 1, "train_cost": 0.30},
        {"epoch": 2, "train_cost": 0.20, "train_acc": 80.0},
        {"epoch": 3, "train_cost": 0.15},
    ]
    with tempfile.TemporaryDirectory() as tmp:
        out = plot_history(history, os.path.join(tmp, "plots", "curves.png"))
        assert out.exists() and out.stat().st_size > 0
        # no accuracy snapshots: right panel falls back to a note
        bare = plot_history(history[:1], os.path.join(tmp, "bare.png"))
        assert bare.exists()

    print("✓ Curves saved")


def run_all_tests():
    print("\n" + "=" * 70)
    print(" " * 22 + "TRAINING TEST SUITE")
    print("=" * 70)

    test_separable_two_class()
    test_zero_epochs_is_chance()
    test_zero_epochs_keeps_initial_weights()
    test_invalid_size_fails_before_mutation()
    test_bad_label_fails_before_mutation()
    test_shuffle_keeps_rows_and_labels_together()
    test_shuffle_is_fresh_each_epoch()
    test_evaluate_order_and_ties()
    test_validate_dataset()
    test_history_and_csv_log()
    test_plot_history()

    print("\n✅ All training tests passed!")


if __name__ == "__main__":
    run_all_tests()
