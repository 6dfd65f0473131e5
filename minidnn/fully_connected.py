"""Fully connected (dense) layer."""

from __future__ import annotations

import numpy as np

from .layer import Layer
from .utils import set_normal_random


class FullyConnected(Layer):
    """Affine map ``z = w' x + b`` applied to every column.

    The weight matrix is ``dim_in x dim_out``; its flat form is column-major,
    followed by the bias.
    """

    def __init__(self, dim_in, dim_out):
        super().__init__()
        if dim_in <= 0 or dim_out <= 0:
            raise ValueError("dimensions must be positive")
        self.dim_in = dim_in
        self.dim_out = dim_out
        self.weight = set_normal_random(dim_in * dim_out, 0.0, 0.01).reshape(
            (dim_in, dim_out), order="F")
        self.bias = set_normal_random(dim_out, 0.0, 0.01)
        self.grad_weight = np.zeros((dim_in, dim_out), dtype=np.float32)
        self.grad_bias = np.zeros(dim_out, dtype=np.float32)

    def _check_bottom(self, bottom):
        bottom = np.asarray(bottom, dtype=np.float32)
        if bottom.ndim != 2 or bottom.shape[0] != self.dim_in:
            raise ValueError(
                f"expected input with {self.dim_in} rows, got shape {bottom.shape}")
        return bottom

    def forward(self, bottom):
        bottom = self._check_bottom(bottom)
        self.top = (self.weight.T @ bottom + self.bias[:, None]).astype(np.float32)

    def backward(self, bottom, grad_top):
        bottom = self._check_bottom(bottom)
        grad_top = np.asarray(grad_top, dtype=np.float32)
        if grad_top.shape != (self.dim_out, bottom.shape[1]):
            raise ValueError(
                f"expected output gradient of shape {(self.dim_out, bottom.shape[1])}")
        self.grad_weight = (bottom @ grad_top.T).astype(np.float32)
        self.grad_bias = grad_top.sum(axis=1).astype(np.float32)
        self.grad_bottom = (self.weight @ grad_top).astype(np.float32)

    def update(self, opt):
        opt.update(self.weight, self.grad_weight)
        opt.update(self.bias, self.grad_bias)

    def output_dim(self):
        return self.dim_out

    def get_parameters(self):
        return np.concatenate([self.weight.ravel(order="F"), self.bias])

    def set_parameters(self, param):
        param = np.asarray(param, dtype=np.float32).reshape(-1)
        n_weight = self.weight.size
        if param.size != n_weight + self.bias.size:
            raise ValueError("Parameter size does not match")
        self.weight[...] = param[:n_weight].reshape(self.weight.shape, order="F")
        self.bias[...] = param[n_weight:]

    def get_derivatives(self):
        return np.concatenate([self.grad_weight.ravel(order="F"), self.grad_bias])