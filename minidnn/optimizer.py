"""Optimizers that update parameter arrays in place."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Optimizer(ABC):
    """Base optimizer with a learning rate and a weight-decay factor."""

    def __init__(self, lr=0.01, decay=0.0):
        self.lr = lr
        self.decay = decay

    @abstractmethod
    def update(self, w, dw):
        """Update the array ``w`` in place using the gradient ``dw``."""


class SGD(Optimizer):
    """Stochastic gradient descent with optional momentum and Nesterov momentum.

    A velocity is kept for every parameter buffer, identified by the memory
    address of ``w``; pass the same (possibly reshaped) array on every step.
    """

    def __init__(self, lr=0.01, decay=0.0, momentum=0.0, nesterov=False):
        super().__init__(lr, decay)
        self.momentum = momentum
        self.nesterov = nesterov
        self._velocity: dict[int, np.ndarray] = {}

    def update(self, w, dw):
        if not isinstance(w, np.ndarray):
            raise TypeError("parameters must be a numpy array updated in place")
        dw = np.asarray(dw, dtype=w.dtype)
        if dw.size != w.size:
            raise ValueError("gradient size does not match parameter size")
        dw = dw.reshape(w.shape)

        key = w.__array_interface__["data"][0]
        velocity = self._velocity.get(key)
        if velocity is None or velocity.shape != w.shape:
            velocity = np.zeros_like(w)

        grad = dw + self.decay * w
        velocity = self.momentum * velocity + grad
        self._velocity[key] = velocity

        step = self.momentum * velocity + grad if self.nesterov else velocity
        w -= (self.lr * step).astype(w.dtype, copy=False)