"""Convert IDX image/label file pairs to CSV."""

import csv
from pathlib import Path

from tqdm import tqdm

from ffnn.data.idx import ImageParser, LabelParser, MNIST_FILES, check_item_counts


def export_csv(images_path, labels_path, csv_path, show_progress=False):
    """
    Write one CSV row per item: id, X0..X{n-1} (pixels), Y (label).

    Args:
        images_path: IDX image file
        labels_path: IDX label file
        csv_path: Output CSV path (parent directories are created)
        show_progress: Show a tqdm bar while writing rows

    Returns:
        num_items: Number of rows written (header excluded)
    """
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with ImageParser(images_path) as images_parser, LabelParser(labels_path) as labels_parser:
        check_item_counts(images_parser, labels_parser)
        images = images_parser.parse()
        labels = labels_parser.parse()

    num_items, image_size = images.shape
    header = ['id'] + [f'X{i}' for i in range(image_size)] + ['Y']

    with open(csv_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(header)
        rows = range(num_items)
        if show_progress:
            rows = tqdm(rows, desc=f"  {csv_path.name}", leave=False)
        for i in rows:
            writer.writerow([i, *images[i].tolist(), int(labels[i])])

    return num_items


def export_mnist_csv(directory, output_dir=None, show_progress=True):
    """Convert the train and test splits in a directory to train.csv and test.csv."""
    directory = Path(directory)
    output_dir = Path(output_dir) if output_dir is not None else directory
    written = {}
    for split, (images_name, labels_name) in MNIST_FILES.items():
        out = output_dir / f'{split}.csv'
        print(f"Opened {images_name} and {labels_name} for reading and {out.name} for writing.")
        written[split] = export_csv(directory / images_name, directory / labels_name, out,
                                    show_progress=show_progress)
        print(f"Wrote {written[split]} items to {out}")
    return written
