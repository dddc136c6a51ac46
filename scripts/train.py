#!/usr/bin/env python
"""
Train the 784-30-10 network on MNIST and report test-set accuracy.

Usage:
    python scripts/train.py /path/to/mnist/
    python scripts/train.py /path/to/mnist/ --rate 0.015 --reg 0.095 --epochs 20
    python scripts/train.py                      # prompts for everything
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

import argparse
import time

from config.mnist_config import MnistConfig
from ffnn.data.idx import IdxFormatError, load_mnist
from ffnn.models.network import FeedForwardNet
from ffnn.models.weights import NetworkShape
from ffnn.training.evaluation import evaluate, validate_dataset
from ffnn.training.trainer import Trainer
from ffnn.utils.csv_logger import CSVLogger
from ffnn.utils.prompting import parse_or_default, read_value


def build_parser():
    parser = argparse.ArgumentParser(description='Train a three-layer network on MNIST')
    parser.add_argument('path', nargs='?', default=None, help='Directory holding the MNIST IDX files')
    parser.add_argument('--rate', type=str, default=None, help='Learning rate (default 0.015)')
    parser.add_argument('--reg', type=str, default=None, help='Regularization param (default 0.095)')
    parser.add_argument('--epochs', type=str, default=None, help='No. of epochs (default 20)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for init and shuffling')
    parser.add_argument('--no-prompt', action='store_true', help='Use defaults instead of prompting')
    parser.add_argument('--plot', action='store_true', help='Save training curves to output_dir')
    parser.add_argument('--csv-log', action='store_true', help='Append epoch metrics to a CSV in log_dir')
    return parser


def resolve_hyperparameters(args, config, reader=input):
    """
    Learning rate, regularization and epochs: take the flag when given (an
    invalid flag value falls back to the default), otherwise prompt unless
    --no-prompt, otherwise use the default.
    """
    prompts = [
        ('rate', 'Learning rate', config.learning_rate, float, lambda v: v > 0),
        ('reg', 'Regularization param', config.regularization, float, lambda v: v >= 0),
        ('epochs', 'No. of epochs', config.num_epochs, int, lambda v: v >= 0),
    ]
    values = {}
    for name, label, default, cast, check in prompts:
        given = getattr(args, name)
        if given is not None:
            value, used_default = parse_or_default(given, default, cast, check)
            if used_default:
                print(f"Invalid {label.lower()} {given!r}. Using {default}.")
        elif args.no_prompt:
            value = default
        else:
            value = read_value(f"{label} (default {default}): ", default, cast, check, reader=reader)
        values[name] = value
    return values['rate'], values['reg'], values['epochs']


def main(argv=None, reader=input):
    """Main training function. Returns a process exit status."""
    args = build_parser().parse_args(argv)
    config = MnistConfig()

    print("=" * 60)
    print("MNIST Three-Layer Network")
    print("=" * 60)

    path = args.path
    if path is None:
        path = reader("Absolute path to MNIST data files: ").strip() if not args.no_prompt else config.data_dir

    rate, reg, epochs = resolve_hyperparameters(args, config, reader=reader)
    seed = args.seed if args.seed is not None else config.seed
    print(f"Learning rate: {rate}, Regularization: {reg}, Epochs: {epochs}, Seed: {seed}")
    print()

    # Load both splits before any training
    print("Loading datasets...")
    try:
        train_set = load_mnist(path, 'train')
        test_set = load_mnist(path, 'test')
    except (FileNotFoundError, IdxFormatError) as e:
        print(f"ERROR: {e}")
        return 1
    print(f"Training set: {train_set.shape[0]} items, Test set: {test_set.shape[0]} items")
    if (train_set.shape[0], test_set.shape[0]) != (config.train_size, config.test_size):
        print(f"Note: not the full MNIST database ({config.train_size}/{config.test_size} items)")
    print()

    shape = NetworkShape(
        input_size=config.input_size,
        hidden_size=config.hidden_size,
        output_size=config.output_size,
        batch_size=config.batch_size,
    )
    try:
        validate_dataset(train_set, shape)
        validate_dataset(test_set, shape)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1
    net = FeedForwardNet(shape)

    csv_logger = None
    if args.csv_log:
        config.learning_rate, config.regularization, config.num_epochs, config.seed = rate, reg, epochs, seed
        timestamp = time.strftime('%Y%m%d_%H%M%S')
        csv_path = os.path.join(config.log_dir, f'training_log_{timestamp}.csv')
        csv_logger = CSVLogger(csv_path, config)
        print(f"CSV logging enabled: {csv_path}")

    trainer = Trainer(
        net,
        lr=rate,
        reg=reg,
        seed=seed,
        eval_every=config.eval_every,
        show_progress=config.show_progress,
        csv_logger=csv_logger,
    )

    print("Training...")
    start = time.time()
    history = trainer.learn_weights(train_set, epochs)
    print(f"Training finished in {time.time() - start:.1f}s")

    if args.plot and history:
        from ffnn.utils.visualization import plot_history
        out = plot_history(history, os.path.join(config.output_dir, 'training.png'), label='mnist')
        print(f"Training curves saved to {out}")

    accuracy = evaluate(net, test_set)
    print(accuracy)
    return 0


if __name__ == "__main__":
    sys.exit(main())
