#!/usr/bin/env python
"""
Convert the MNIST IDX files in a directory to train.csv and test.csv.

Usage:
    python scripts/to_csv.py /path/to/mnist/
    python scripts/to_csv.py /path/to/mnist/ --output-dir data/csv
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

import argparse

from ffnn.data.csv_export import export_mnist_csv
from ffnn.data.idx import IdxFormatError


def main(argv=None):
    parser = argparse.ArgumentParser(description='Convert MNIST IDX files to CSV')
    parser.add_argument('path', nargs='?', default='.', help='Directory holding the MNIST IDX files')
    parser.add_argument('--output-dir', type=str, default=None, help='Where to write the CSV files')
    parser.add_argument('--quiet', action='store_true', help='No progress bars')
    args = parser.parse_args(argv)

    try:
        export_mnist_csv(args.path, args.output_dir, show_progress=not args.quiet)
    except (FileNotFoundError, IdxFormatError) as e:
        print(f"ERROR: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
