"""Reader for MNIST-style IDX image and label files."""

from __future__ import annotations

import os
import struct

import numpy as np

TRAIN_IMAGES = "train-86-images-idx3-ubyte"
TEST_IMAGES = "t10k-86-images-idx3-ubyte"
TRAIN_LABELS = "train-86-labels-idx1-ubyte"
TEST_LABELS = "t10k-86-labels-idx1-ubyte"


def _limit(count, batch_size):
    """Use ``batch_size`` items when it is positive and below ``count``."""
    return batch_size if 0 < batch_size < count else count


def _read_exact(stream, size, what):
    chunk = stream.read(size)
    if len(chunk) != size:
        raise ValueError(f"unexpected end of file while reading {what}")
    return chunk


class MNIST:
    """Loads a data set stored as big-endian IDX files in one directory.

    Images become ``(rows * cols) x samples`` float matrices, one image per
    column in row-major pixel order; labels become ``1 x samples`` matrices.
    """

    def __init__(self, data_dir):
        self.data_dir = os.fspath(data_dir)
        self.train_data = np.zeros((0, 0), dtype=np.float32)
        self.train_labels = np.zeros((0, 0), dtype=np.float32)
        self.test_data = np.zeros((0, 0), dtype=np.float32)
        self.test_labels = np.zeros((0, 0), dtype=np.float32)

    def _path(self, name):
        return os.path.join(self.data_dir, name)

    def read_mnist_data(self, filename, batch_size=-1):
        """Read an image file, keeping at most ``batch_size`` images when positive."""
        with open(filename, "rb") as stream:
            header = _read_exact(stream, 16, "image header")
            _magic, count, rows, cols = struct.unpack(">4i", header)
            if count < 0 or rows < 0 or cols < 0:
                raise ValueError("negative size in image header")
            n = _limit(count, batch_size)
            pixels = _read_exact(stream, n * rows * cols, "image data")
        images = np.frombuffer(pixels, dtype=np.uint8).reshape(n, rows * cols)
        return np.ascontiguousarray(images.T, dtype=np.float32)

    def read_mnist_label(self, filename, batch_size=-1):
        """Read a label file, keeping at most ``batch_size`` labels when positive."""
        with open(filename, "rb") as stream:
            header = _read_exact(stream, 8, "label header")
            _magic, count = struct.unpack(">2i", header)
            if count < 0:
                raise ValueError("negative size in label header")
            n = _limit(count, batch_size)
            raw = _read_exact(stream, n, "label data")
        labels = np.frombuffer(raw, dtype=np.uint8).astype(np.float32)
        return labels.reshape(1, n)

    def read(self):
        """Read the full training and test sets."""
        self.train_data = self.read_mnist_data(self._path(TRAIN_IMAGES))
        self.test_data = self.read_mnist_data(self._path(TEST_IMAGES))
        self.train_labels = self.read_mnist_label(self._path(TRAIN_LABELS))
        self.test_labels = self.read_mnist_label(self._path(TEST_LABELS))

    def read_test_data(self, batch_size):
        """Read the first ``batch_size`` test images and labels."""
        self.test_data = self.read_mnist_data(self._path(TEST_IMAGES), batch_size)
        self.test_labels = self.read_mnist_label(self._path(TEST_LABELS), batch_size)