"""Two-dimensional convolution layer computed through im2col products."""

from __future__ import annotations

import numpy as np

from .layer import Layer
from .utils import set_normal_random


def _trunc_div(numerator, denominator):
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def _pack_parameters(weight, bias):
    """Flatten a weight matrix (column-major) followed by its bias."""
    return np.concatenate([weight.ravel(order="F"), bias])


def _unpack_parameters(weight, bias, param):
    """Copy a flat parameter vector into ``weight`` and ``bias`` in place."""
    param = np.asarray(param, dtype=np.float32).reshape(-1)
    n_weight = weight.size
    if param.size != n_weight + bias.size:
        raise ValueError("Parameter size does not match")
    weight[...] = param[:n_weight].reshape(weight.shape, order="F")
    bias[...] = param[n_weight:]


class _ConvBase(Layer):
    """Shape bookkeeping and parameter storage shared by convolution layers.

    Inputs are ``(channel_in * height_in * width_in) x samples`` matrices whose
    columns hold channel-major, row-major images.  The weight matrix has one
    row per ``(channel, kernel row, kernel col)`` and one column per output
    channel; its flat form is column-major, followed by the bias.
    """

    def __init__(self, channel_in, height_in, width_in, channel_out,
                 height_kernel, width_kernel, stride=1, pad_w=0, pad_h=0):
        super().__init__()
        sizes = (channel_in, height_in, width_in, channel_out,
                 height_kernel, width_kernel, stride)
        if min(sizes) <= 0:
            raise ValueError("sizes and stride must be positive")
        if pad_w < 0 or pad_h < 0:
            raise ValueError("padding must not be negative")
        self.channel_in = channel_in
        self.height_in = height_in
        self.width_in = width_in
        self.channel_out = channel_out
        self.height_kernel = height_kernel
        self.width_kernel = width_kernel
        self.stride = stride
        self.pad_w = pad_w
        self.pad_h = pad_h
        self.dim_in = channel_in * height_in * width_in

        self.height_out = 1 + _trunc_div(height_in - height_kernel + 2 * pad_h, stride)
        self.width_out = 1 + _trunc_div(width_in - width_kernel + 2 * pad_w, stride)
        if self.height_out <= 0 or self.width_out <= 0:
            raise ValueError("kernel does not fit into the padded input")
        self.dim_out = self.height_out * self.width_out * channel_out

        rows = channel_in * height_kernel * width_kernel
        self.weight = set_normal_random(rows * channel_out, 0.0, 0.01).reshape(
            (rows, channel_out), order="F")
        self.bias = set_normal_random(channel_out, 0.0, 0.01)
        self.grad_weight = np.zeros((rows, channel_out), dtype=np.float32, order="F")
        self.grad_bias = np.zeros(channel_out, dtype=np.float32)

    def _check_bottom(self, bottom):
        bottom = np.asarray(bottom, dtype=np.float32)
        if bottom.ndim != 2 or bottom.shape[0] != self.dim_in:
            raise ValueError(
                f"expected input with {self.dim_in} rows, got shape {bottom.shape}")
        return bottom


class Conv(_ConvBase):
    """Convolution with bias, stride and zero padding, trainable by backprop."""

    def __init__(self, channel_in, height_in, width_in, channel_out,
                 height_kernel, width_kernel, stride=1, pad_w=0, pad_h=0):
        super().__init__(channel_in, height_in, width_in, channel_out,
                         height_kernel, width_kernel, stride, pad_w, pad_h)
        self.data_cols = []
        self._build_index()

    def _build_index(self):
        hw_out = self.height_out * self.width_out
        hw_kernel = self.height_kernel * self.width_kernel
        out_idx = np.arange(hw_out)
        start = ((out_idx // self.width_out) * self.width_in * self.stride
                 + (out_idx % self.width_out) * self.stride)
        taps = np.arange(hw_kernel)
        cur_col = ((start % self.width_in)[:, None]
                   + (taps % self.width_kernel)[None, :] - self.pad_w)
        cur_row = ((start // self.width_in)[:, None]
                   + (taps // self.width_kernel)[None, :] - self.pad_h)
        self._valid = ((cur_col >= 0) & (cur_col < self.width_in)
                       & (cur_row >= 0) & (cur_row < self.height_in))
        self._pick = np.where(self._valid, cur_row * self.width_in + cur_col, 0)

    def _col_shape(self):
        return (self.height_out * self.width_out,
                self.height_kernel * self.width_kernel * self.channel_in)

    def im2col(self, image):
        """Unfold one image into a ``hw_out x (hw_kernel * channel_in)`` matrix."""
        image = np.asarray(image, dtype=np.float32).reshape(-1)
        if image.size != self.dim_in:
            raise ValueError(f"expected an image of {self.dim_in} values")
        maps = image.reshape(self.channel_in, self.height_in * self.width_in)
        cols = np.where(self._valid, maps[:, self._pick], np.float32(0.0))
        return cols.transpose(1, 0, 2).reshape(self._col_shape())

    def col2im(self, data_col):
        """Fold a column matrix back into an image, summing overlapping taps."""
        data_col = np.asarray(data_col, dtype=np.float32)
        if data_col.shape != self._col_shape():
            raise ValueError(f"expected a matrix of shape {self._col_shape()}")
        hw_in = self.height_in * self.width_in
        blocks = data_col.reshape(
            self.height_out * self.width_out, self.channel_in, -1).transpose(1, 0, 2)
        targets = (np.arange(self.channel_in) * hw_in)[:, None] + self._pick[self._valid][None, :]
        image = np.zeros(self.dim_in, dtype=np.float32)
        np.add.at(image, targets, blocks[:, self._valid])
        return image

    def forward(self, bottom):
        bottom = self._check_bottom(bottom)
        top = np.empty((self.dim_out, bottom.shape[1]), dtype=np.float32)
        self.data_cols = []
        for i, column in enumerate(bottom.T):
            data_col = self.im2col(column)
            self.data_cols.append(data_col)
            result = data_col @ self.weight + self.bias
            top[:, i] = result.ravel(order="F")
        self.top = top

    def backward(self, bottom, grad_top):
        bottom = self._check_bottom(bottom)
        n_sample = bottom.shape[1]
        grad_top = np.asarray(grad_top, dtype=np.float32)
        if grad_top.shape != (self.dim_out, n_sample):
            raise ValueError(
                f"expected output gradient of shape {(self.dim_out, n_sample)}")
        if len(self.data_cols) != n_sample:
            raise ValueError("forward must be run on the same batch before backward")

        hw_out = self.height_out * self.width_out
        self.grad_weight.fill(0.0)
        self.grad_bias.fill(0.0)
        grad_bottom = np.zeros((self.dim_in, n_sample), dtype=np.float32)
        for i, (data_col, column) in enumerate(zip(self.data_cols, grad_top.T)):
            grad_col = column.reshape(self.channel_out, hw_out).T
            self.grad_weight += data_col.T @ grad_col
            self.grad_bias += grad_col.sum(axis=0)
            grad_bottom[:, i] = self.col2im(grad_col @ self.weight.T)
        self.grad_bottom = grad_bottom

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