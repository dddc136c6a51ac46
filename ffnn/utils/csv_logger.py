"""CSV logger for per-epoch training metrics and configuration."""

import csv
from datetime import datetime
from pathlib import Path


class CSVLogger:
    """Logger for writing training metrics to CSV file."""

    def __init__(self, log_path, config=None):
        """
        Initialize CSV logger.

        Args:
            log_path: Path to CSV file
            config: Configuration object (class attributes are read with getattr)
        """
        self.log_path = Path(log_path)
        self.config = config
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        # Header is written only for a new file
        self.file_exists = self.log_path.exists()
        self.columns = self._get_columns()
        if not self.file_exists:
            self._write_header()

    def _get_columns(self):
        """Define all columns for the CSV file."""
        return [
            # Timestamp and identification
            'timestamp',
            'epoch',

            # Training metrics
            'train_cost',
            'train_acc',
            'weight_norm',

            # Network shape (from config)
            'input_size',
            'hidden_size',
            'output_size',
            'batch_size',

            # Hyperparameters
            'learning_rate',
            'regularization',
            'num_epochs',
            'seed',

            # Timing
            'epoch_time_seconds',
        ]

    def _write_header(self):
        """Write CSV header."""
        with open(self.log_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=self.columns)
            writer.writeheader()

    def _get_config_params(self):
        """Extract relevant parameters from config."""
        params = {}
        if self.config is None:
            return params
        for key in ('input_size', 'hidden_size', 'output_size', 'batch_size',
                    'learning_rate', 'regularization', 'num_epochs', 'seed'):
            if hasattr(self.config, key):
                params[key] = getattr(self.config, key)
        return params

    def log(self, metrics):
        """
        Log metrics to CSV file.

        Args:
            metrics: Dictionary of metrics to log (unknown keys are ignored)
        """
        if 'timestamp' not in metrics:
            metrics['timestamp'] = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

        for key, value in self._get_config_params().items():
            if key not in metrics:
                metrics[key] = value

        # Missing columns are left empty
        row = {col: metrics.get(col, '') for col in self.columns}

        with open(self.log_path, 'a', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=self.columns)
            writer.writerow(row)

    def log_epoch(self, epoch, metrics):
        """
        Convenience method to log an epoch with standard metrics.

        Args:
            epoch: Epoch number
            metrics: Dictionary of metrics
        """
        metrics['epoch'] = epoch
        self.log(metrics)
