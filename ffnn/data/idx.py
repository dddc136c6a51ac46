"""
Readers and writers for the MNIST IDX file format.

Image files: 16-byte header (magic 0x803, item count, rows, cols), then one
unsigned byte per pixel, row-wise. Label files: 8-byte header (magic 0x801,
item count), then one unsigned byte per label. All header integers are
32-bit big-endian.
"""

import os
import struct
from pathlib import Path

import numpy as np


MAGIC_LABEL_FILE = 0x801
MAGIC_IMAGE_FILE = 0x803
HEADER_SIZE_LABEL_FILE = 8
HEADER_SIZE_IMAGE_FILE = 16

MNIST_FILES = {
    'train': ('train-images.idx3-ubyte', 'train-labels.idx1-ubyte'),
    'test': ('t10k-images.idx3-ubyte', 't10k-labels.idx1-ubyte'),
}


class IdxFormatError(RuntimeError):
    """Base class for malformed IDX files."""


class TruncatedReadError(IdxFormatError):
    """File ended before the header or body was fully read."""


class MagicNumberError(IdxFormatError):
    """Header magic number does not match the expected file kind."""


class ItemCountError(IdxFormatError):
    """Image and label files disagree on the number of items."""


def read_big_endian_int32(buffer, offset=0):
    return struct.unpack_from('>i', buffer, offset)[0]


class _IdxParser:
    """Opens an IDX file and reads its header; subclasses parse the body."""

    magic_number = None
    header_size = None
    kind = None

    def __init__(self, path):
        self.path = str(path)
        if not os.path.isfile(self.path):
            raise FileNotFoundError(f"File not found: {self.path}")
        self._file = open(self.path, 'rb')
        try:
            header = self._read_exact(self.header_size, f"{self.kind} file header")
            magic = read_big_endian_int32(header)
            if magic != self.magic_number:
                raise MagicNumberError(
                    f"Unexpected magic number for {self.kind} file {self.path}: "
                    f"0x{magic:x} (expected 0x{self.magic_number:x})"
                )
            self.num_items = read_big_endian_int32(header, 4)
            self._read_dimensions(header)
        except Exception:
            self._file.close()
            raise
        self._done = False

    def _read_dimensions(self, header):
        pass

    def _read_exact(self, count, what):
        data = self._file.read(count)
        if len(data) != count:
            raise TruncatedReadError(
                f"Could not read {what} from {self.path}: "
                f"expected {count} bytes, got {len(data)}"
            )
        return data

    def is_done(self):
        return self._done

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def parse(self):
        if self._done:
            raise RuntimeError(f"{self.kind.capitalize()} file already parsed: {self.path}")
        try:
            result = self._parse_body()
        finally:
            self._done = True
            self.close()
        return result

    def _parse_body(self):
        raise NotImplementedError


class ImageParser(_IdxParser):
    """Parses an IDX image file into an (items, rows*cols) uint8 matrix."""

    magic_number = MAGIC_IMAGE_FILE
    header_size = HEADER_SIZE_IMAGE_FILE
    kind = 'image'

    def _read_dimensions(self, header):
        self.num_rows = read_big_endian_int32(header, 8)
        self.num_cols = read_big_endian_int32(header, 12)

    @property
    def image_size(self):
        return self.num_rows * self.num_cols

    def _parse_body(self):
        body = self._read_exact(self.num_items * self.image_size, "images")
        return np.frombuffer(body, dtype=np.uint8).reshape(self.num_items, self.image_size).copy()


class LabelParser(_IdxParser):
    """Parses an IDX label file into an (items,) uint8 vector."""

    magic_number = MAGIC_LABEL_FILE
    header_size = HEADER_SIZE_LABEL_FILE
    kind = 'label'

    def _parse_body(self):
        body = self._read_exact(self.num_items, "labels")
        return np.frombuffer(body, dtype=np.uint8).copy()


def check_item_counts(images_parser, labels_parser):
    if images_parser.num_items != labels_parser.num_items:
        raise ItemCountError(
            f"Numbers of images and labels don't match: "
            f"{images_parser.num_items} in {images_parser.path} vs "
            f"{labels_parser.num_items} in {labels_parser.path}"
        )


def load_dataset(images_path, labels_path):
    """
    Load an image file and its label file into one matrix.

    Returns:
        data: (items, features + 1) uint8 matrix, labels in the last column
    """
    with ImageParser(images_path) as images_parser, LabelParser(labels_path) as labels_parser:
        check_item_counts(images_parser, labels_parser)
        images = images_parser.parse()
        labels = labels_parser.parse()

    data = np.empty((images.shape[0], images.shape[1] + 1), dtype=np.uint8)
    data[:, :-1] = images
    data[:, -1] = labels
    return data


def load_mnist(directory, split='train'):
    """Load the standard MNIST files for 'train' or 't10k'/'test' from a directory."""
    if split == 't10k':
        split = 'test'
    if split not in MNIST_FILES:
        raise ValueError(f"split must be 'train' or 'test', got {split!r}")
    images_name, labels_name = MNIST_FILES[split]
    directory = Path(directory)
    return load_dataset(directory / images_name, directory / labels_name)


def write_idx_images(path, images, num_rows=None, num_cols=None):
    """Write an (items, rows*cols) uint8 matrix as an IDX image file."""
    images = np.asarray(images, dtype=np.uint8)
    num_items, size = images.shape
    if num_rows is None or num_cols is None:
        side = int(round(size ** 0.5))
        num_rows, num_cols = (side, side) if side * side == size else (1, size)
    if num_rows * num_cols != size:
        raise ValueError(f"rows*cols = {num_rows * num_cols} does not match image size {size}")
    with open(path, 'wb') as f:
        f.write(struct.pack('>iiii', MAGIC_IMAGE_FILE, num_items, num_rows, num_cols))
        f.write(images.tobytes())


def write_idx_labels(path, labels):
    """Write a uint8 label vector as an IDX label file."""
    labels = np.asarray(labels, dtype=np.uint8).reshape(-1)
    with open(path, 'wb') as f:
        f.write(struct.pack('>ii', MAGIC_LABEL_FILE, labels.shape[0]))
        f.write(labels.tobytes())
