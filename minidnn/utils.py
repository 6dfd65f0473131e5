"""Matrix helpers shared by layers, losses and the network.

Matrices are two-dimensional ``float32`` arrays laid out as
``features x samples``: every column holds one sample.
"""

from __future__ import annotations

import numpy as np

_generator = np.random.default_rng()


def set_normal_random(n, mu, sigma):
    """Return ``n`` samples drawn from the normal distribution N(mu, sigma^2)."""
    return _generator.normal(mu, sigma, size=int(n)).astype(np.float32)


def shuffle_data(data, labels):
    """Return ``(data, labels)`` with their columns permuted the same way."""
    data = np.asarray(data, dtype=np.float32)
    labels = np.asarray(labels, dtype=np.float32)
    if data.ndim != 2 or labels.ndim != 2:
        raise ValueError("data and labels must be two-dimensional")
    if data.shape[1] != labels.shape[1]:
        raise ValueError("data and labels must have the same number of columns")
    perm = _generator.permutation(data.shape[1])
    return data[:, perm], labels[:, perm]


def _flat_labels(labels, count):
    values = np.asarray(labels).reshape(-1, order="F")
    if values.size < count:
        raise ValueError("not enough labels for the given samples")
    return values[:count]


def one_hot_encode(y, n_value):
    """Encode the class indices in ``y`` as an ``n_value x n`` one-hot matrix."""
    y = np.asarray(y)
    n = y.shape[1] if y.ndim == 2 else y.size
    classes = _flat_labels(y, n).astype(np.int64)
    if classes.size and (classes.min() < 0 or classes.max() >= n_value):
        raise ValueError("label out of range for one-hot encoding")
    encoded = np.zeros((n_value, n), dtype=np.float32)
    encoded[classes, np.arange(n)] = 1.0
    return encoded


def compute_accuracy(predictions, labels):
    """Return the fraction of columns whose largest entry is at the label index.

    Ties resolve to the first maximal row. An empty batch yields NaN.
    """
    predictions = np.asarray(predictions, dtype=np.float32)
    n = predictions.shape[1]
    if n == 0:
        return float("nan")
    predicted = np.argmax(predictions, axis=0)
    expected = _flat_labels(labels, n)
    return float(np.count_nonzero(predicted == expected) / n)