"""Training curve plots."""

from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def plot_history(history, save_path, label='ffnn'):
    """
    Plot per-epoch cost and (if recorded) training accuracy side by side.

    Args:
        history: List of epoch records from Trainer.learn_weights
        save_path: Output image path
        label: Legend label

    Returns:
        save_path as a Path
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    epochs = [rec['epoch'] for rec in history]
    costs = [rec['train_cost'] for rec in history]
    acc_marks = [rec['epoch'] for rec in history if 'train_acc' in rec]
    accs = [rec['train_acc'] for rec in history if 'train_acc' in rec]

    fig, ax = plt.subplots(1, 2, figsize=(11, 4.5))
    ax[0].plot(epochs, costs, label=label)
    ax[0].set_title(f"[{label}] Training Cost (avg per batch)")
    ax[0].set_xlabel("Epoch"); ax[0].set_ylabel("Cost"); ax[0].legend()
    if accs:
        ax[1].plot(acc_marks, accs, marker=".", label=label)
        ax[1].set_title(f"[{label}] Training Accuracy")
        ax[1].set_xlabel("Epoch"); ax[1].set_ylabel("Accuracy (%)"); ax[1].legend()
    else:
        ax[1].text(0.5, 0.5, f"[{label}] Accuracy snapshots unavailable",
                   ha="center", va="center", transform=ax[1].transAxes)
        ax[1].set_axis_off()
    plt.tight_layout()
    plt.savefig(save_path, dpi=150)
    plt.close(fig)
    return save_path
