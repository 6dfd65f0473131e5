"""Base class of every network layer."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Layer(ABC):
    """A layer holds its last output and the gradient with respect to its input."""

    def __init__(self):
        self.top = np.zeros((0, 0), dtype=np.float32)
        self.grad_bottom = np.zeros((0, 0), dtype=np.float32)

    @abstractmethod
    def forward(self, bottom):
        """Compute the output for the input matrix ``bottom``."""

    @abstractmethod
    def backward(self, bottom, grad_top):
        """Compute the gradient with respect to ``bottom`` given ``grad_top``."""

    def update(self, opt):
        """Apply an optimizer step; layers without parameters have nothing to do."""

    def output(self):
        """Return the output of the last forward pass."""
        return self.top

    def back_gradient(self):
        """Return the input gradient of the last backward pass."""
        return self.grad_bottom

    def output_dim(self):
        """Return the number of output features, or -1 when not fixed."""
        return -1

    def get_parameters(self):
        """Return the trainable parameters as one flat array."""
        return np.zeros(0, dtype=np.float32)

    def get_derivatives(self):
        """Return the parameter gradients as one flat array."""
        return np.zeros(0, dtype=np.float32)

    def set_parameters(self, param):
        """Load parameters from a flat array; parameterless layers ignore it."""