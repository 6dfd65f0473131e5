"""Max and average pooling layers over channel-major, row-major images."""

from __future__ import annotations

import math

import numpy as np

from .layer import Layer

_LOWEST = np.finfo(np.float32).min


class _Pooling(Layer):
    """Window geometry shared by the pooling layers.

    The output size is ``1 + ceil((in - height_pool) / stride)`` along both
    axes. Windows that overhang the input skip the missing pixels.
    """

    def __init__(self, channel_in, height_in, width_in,
                 height_pool, width_pool, stride=1):
        super().__init__()
        sizes = (channel_in, height_in, width_in, height_pool, width_pool, stride)
        if min(sizes) <= 0:
            raise ValueError("sizes and stride must be positive")
        self.channel_in = channel_in
        self.height_in = height_in
        self.width_in = width_in
        self.height_pool = height_pool
        self.width_pool = width_pool
        self.stride = stride
        self.dim_in = channel_in * height_in * width_in

        self.channel_out = channel_in
        self.height_out = 1 + math.ceil((height_in - height_pool) / stride)
        self.width_out = 1 + math.ceil((width_in - height_pool) / stride)
        if self.height_out <= 0 or self.width_out <= 0:
            raise ValueError("pooling window does not fit into the input")
        self.dim_out = self.height_out * self.width_out * self.channel_out
        self._build_index()

    def _build_index(self):
        hw_in = self.height_in * self.width_in
        hw_out = self.height_out * self.width_out
        hw_pool = self.height_pool * self.width_pool
        out_idx = np.arange(hw_out)
        start = ((out_idx // self.width_out) * self.width_in * self.stride
                 + (out_idx % self.width_out) * self.stride)
        taps = np.arange(hw_pool)
        col = (start % self.width_in)[:, None] + (taps % self.width_pool)[None, :]
        row = (start // self.width_in)[:, None] + (taps // self.width_pool)[None, :]
        self._valid = (col < self.width_in) & (row < self.height_in)
        local = (start[:, None] + (taps // self.width_pool)[None, :] * self.width_in
                 + (taps % self.width_pool)[None, :])
        local = np.where(self._valid, local, 0)
        offsets = np.arange(self.channel_in) * hw_in
        # shape: (channel, hw_out, hw_pool)
        self._pick = local[None, :, :] + offsets[:, None, None]

    def _check_bottom(self, bottom):
        bottom = np.asarray(bottom, dtype=np.float32)
        if bottom.ndim != 2 or bottom.shape[0] != self.dim_in:
            raise ValueError(
                f"expected input with {self.dim_in} rows, got shape {bottom.shape}")
        return bottom

    def _check_grad_top(self, grad_top, n_sample):
        grad_top = np.asarray(grad_top, dtype=np.float32)
        if grad_top.shape != (self.dim_out, n_sample):
            raise ValueError(
                f"expected output gradient of shape {(self.dim_out, n_sample)}")
        return grad_top

    def _windows(self, bottom):
        """Gather every window: shape (samples, channel, hw_out, hw_pool)."""
        return bottom.T[:, self._pick]


class MaxPooling(_Pooling):
    """Maximum over each window; ties resolve to the last window position."""

    def __init__(self, channel_in, height_in, width_in,
                 height_pool, width_pool, stride=1):
        super().__init__(channel_in, height_in, width_in,
                         height_pool, width_pool, stride)
        self.max_idxs = np.zeros((0, self.dim_out), dtype=np.int64)

    def forward(self, bottom):
        bottom = self._check_bottom(bottom)
        n_sample = bottom.shape[1]
        values = np.where(self._valid, self._windows(bottom), _LOWEST)
        maxima = values.max(axis=-1)
        hits = (values == maxima[..., None]) & self._valid
        last = hits.shape[-1] - 1 - np.argmax(hits[..., ::-1], axis=-1)
        picks = np.broadcast_to(self._pick, hits.shape)
        chosen = np.take_along_axis(picks, last[..., None], axis=-1)[..., 0]
        indices = np.where(hits.any(axis=-1), chosen, 0)

        self.top = np.ascontiguousarray(
            maxima.reshape(n_sample, self.dim_out).T, dtype=np.float32)
        self.max_idxs = indices.reshape(n_sample, self.dim_out).astype(np.int64)

    def backward(self, bottom, grad_top):
        bottom = self._check_bottom(bottom)
        n_sample = self.max_idxs.shape[0]
        if bottom.shape[1] != n_sample:
            raise ValueError("forward must be run on the same batch before backward")
        grad_top = self._check_grad_top(grad_top, n_sample)
        grad_bottom = np.zeros(bottom.shape, dtype=np.float32)
        samples = np.arange(n_sample)[:, None]
        np.add.at(grad_bottom, (self.max_idxs, samples), grad_top.T)
        self.grad_bottom = grad_bottom

    def output_dim(self):
        return self.dim_out


class AvePooling(_Pooling):
    """Sum of the pixels in each window divided by the full window size."""

    def forward(self, bottom):
        bottom = self._check_bottom(bottom)
        n_sample = bottom.shape[1]
        hw_pool = self.height_pool * self.width_pool
        sums = np.where(self._valid, self._windows(bottom), np.float32(0.0)).sum(axis=-1)
        averages = (sums / hw_pool).astype(np.float32)
        self.top = np.ascontiguousarray(averages.reshape(n_sample, self.dim_out).T)

    def backward(self, bottom, grad_top):
        bottom = self._check_bottom(bottom)
        n_sample = bottom.shape[1]
        grad_top = self._check_grad_top(grad_top, n_sample)
        hw_pool = self.height_pool * self.width_pool
        hw_out = self.height_out * self.width_out

        shape = (n_sample, self.channel_in, hw_out, hw_pool)
        share = grad_top.T.reshape(n_sample, self.channel_in, hw_out)[..., None] / hw_pool
        share = np.broadcast_to(share.astype(np.float32), shape)
        picks = np.broadcast_to(self._pick, shape)
        samples = np.broadcast_to(np.arange(n_sample)[:, None, None, None], shape)
        mask = np.broadcast_to(self._valid, shape)

        grad_bottom = np.zeros(bottom.shape, dtype=np.float32)
        np.add.at(grad_bottom, (picks[mask], samples[mask]), share[mask])
        self.grad_bottom = grad_bottom

    def output_dim(self):
        return self.dim_out