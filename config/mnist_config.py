"""Configuration for the 784-30-10 MNIST network."""

from .base_config import BaseConfig


class MnistConfig(BaseConfig):
    """Configuration for the MNIST digit classifier."""

    # Network shape
    input_size = 784        # 28 x 28 pixels
    hidden_size = 30
    output_size = 10        # digits 0-9
    batch_size = 50         # must divide both split sizes

    # Training
    learning_rate = 0.015
    regularization = 0.095  # L2 strength (lambda), bias weights excluded
    num_epochs = 20

    # Dataset sizes known from the MNIST database
    train_size = 60000
    test_size = 10000
