"""Base configuration shared by all runs."""

class BaseConfig:
    """Shared configuration across all runs."""

    # Reproducibility
    seed = 0            # Seeds weight init and per-epoch shuffling (None = fresh entropy)

    # Logging
    eval_every = 5      # Training-set accuracy every N epochs (None = never)
    show_progress = True

    # Paths
    data_dir = "data"
    log_dir = "logs"
    output_dir = "outputs"
