"""Element-wise and column-wise activation layers."""

from __future__ import annotations

import numpy as np

from .layer import Layer


class ReLU(Layer):
    """Rectified linear unit: ``a = max(z, 0)``."""

    def forward(self, bottom):
        self.top = np.maximum(np.asarray(bottom, dtype=np.float32), np.float32(0.0))

    def backward(self, bottom, grad_top):
        positive = (np.asarray(bottom, dtype=np.float32) > 0).astype(np.float32)
        self.grad_bottom = np.asarray(grad_top, dtype=np.float32) * positive


class Sigmoid(Layer):
    """Logistic activation: ``a = 1 / (1 + exp(-z))``."""

    def forward(self, bottom):
        bottom = np.asarray(bottom, dtype=np.float32)
        with np.errstate(over="ignore"):
            self.top = (1.0 / (1.0 + np.exp(-bottom))).astype(np.float32)

    def backward(self, bottom, grad_top):
        da_dz = self.top * (1.0 - self.top)
        self.grad_bottom = np.asarray(grad_top, dtype=np.float32) * da_dz


class Softmax(Layer):
    """Softmax over each column."""

    def forward(self, bottom):
        bottom = np.asarray(bottom, dtype=np.float32)
        exp = np.exp(bottom - bottom.max(axis=0, keepdims=True))
        self.top = exp / exp.sum(axis=0, keepdims=True)

    def backward(self, bottom, grad_top):
        grad_top = np.asarray(grad_top, dtype=np.float32)
        weighted_sum = (self.top * grad_top).sum(axis=0, keepdims=True)
        self.grad_bottom = self.top * (grad_top - weighted_sum)