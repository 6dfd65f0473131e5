"""Loss functions evaluated on a batch of column-wise predictions."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


def _checked(pred, target):
    pred = np.asarray(pred, dtype=np.float32)
    target = np.asarray(target, dtype=np.float32)
    if pred.shape != target.shape:
        raise ValueError(
            f"prediction shape {pred.shape} does not match target shape {target.shape}"
        )
    return pred, target


class Loss(ABC):
    """A loss stores its last value and the gradient with respect to the prediction."""

    def __init__(self):
        self.loss = 0.0
        self.grad_bottom = np.zeros((0, 0), dtype=np.float32)

    @abstractmethod
    def evaluate(self, pred, target):
        """Compute the loss and its gradient for ``pred`` against ``target``."""

    def output(self):
        """Return the last computed loss value."""
        return self.loss

    def back_gradient(self):
        """Return the gradient of the loss with respect to the prediction."""
        return self.grad_bottom


class MSE(Loss):
    """Squared error summed over features, averaged over samples."""

    def evaluate(self, pred, target):
        pred, target = _checked(pred, target)
        n = pred.shape[1]
        diff = pred - target
        self.loss = float(np.sum(diff * diff) / n)
        self.grad_bottom = diff * 2 / n


class CrossEntropy(Loss):
    """Cross-entropy ``-sum(y * log(p)) / n`` with a small stabilising epsilon."""

    _EPS = 1e-8

    def evaluate(self, pred, target):
        pred, target = _checked(pred, target)
        n = pred.shape[1]
        shifted = pred + np.float32(self._EPS)
        self.loss = float(-np.sum(target * np.log(shifted)) / n)
        self.grad_bottom = -(target / shifted) / n