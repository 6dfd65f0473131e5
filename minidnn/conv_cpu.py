"""Inference-only convolution computed directly on the host."""

from __future__ import annotations

import time

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .conv import _ConvBase, _pack_parameters, _unpack_parameters


def conv_forward_cpu(input, mask, batch, map_out, channel, height, width, k):
    """Valid ``k x k`` convolution of a batch of images, without bias.

    ``input`` holds ``batch x channel x height x width`` values and ``mask``
    holds ``map_out x channel x k x k`` values, both flattened in that order.
    Returns a flat array of ``batch x map_out x (height-k+1) x (width-k+1)``.
    """
    if batch < 0:
        raise ValueError("batch size must not be negative")
    if min(map_out, channel, height, width, k) <= 0:
        raise ValueError("dimensions must be positive")
    height_out = height - k + 1
    width_out = width - k + 1
    if height_out <= 0 or width_out <= 0:
        raise ValueError("kernel is larger than the input")

    x = np.asarray(input, dtype=np.float32).reshape(-1)
    if x.size != batch * channel * height * width:
        raise ValueError("input size does not match the given dimensions")
    weights = np.asarray(mask, dtype=np.float32).reshape(-1)
    if weights.size != map_out * channel * k * k:
        raise ValueError("mask size does not match the given dimensions")

    x = x.reshape(batch, channel, height, width)
    weights = weights.reshape(map_out, channel, k, k)
    windows = sliding_window_view(x, (k, k), axis=(2, 3))
    out = np.einsum("bchwpq,mcpq->bmhw", windows, weights, optimize=True)
    return np.ascontiguousarray(out, dtype=np.float32).reshape(-1)


class ConvCPU(_ConvBase):
    """Convolution layer whose forward pass runs :func:`conv_forward_cpu`.

    Only square kernels with unit stride and no padding are supported, and
    the bias is not applied.
    """

    def forward(self, bottom):
        bottom = self._check_bottom(bottom)
        if (self.height_kernel != self.width_kernel or self.stride != 1
                or self.pad_w != 0 or self.pad_h != 0):
            raise ValueError(
                "CPU convolution supports only square kernels, unit stride and no padding")
        n_sample = bottom.shape[1]

        print("Conv-CPU==")
        start = time.perf_counter()
        result = conv_forward_cpu(
            bottom.ravel(order="F"), self.weight.ravel(order="F"), n_sample,
            self.channel_out, self.channel_in, self.height_in, self.width_in,
            self.height_kernel)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        print(f"Op Time: {elapsed_ms} ms")

        self.top = result.reshape((self.dim_out, n_sample), order="F")

    def backward(self, bottom, grad_top):
        """Inference only: gradients are left as they are."""

    def update(self, opt):
        opt.update(self.weight, self.grad_weight)
        opt.update(self.bias, self.grad_bias)

    def output_dim(self):
        return self.dim_out

    def get_parameters(self):
        return _pack_parameters(self.weight, self.bias)

    def get_derivatives(self):
        return _pack_parameters(self.grad_weight, self.grad_bias)

    def set_parameters(self, param):
        _unpack_parameters(self.weight, self.bias, param)