"""A sequential network of layers with a loss on top."""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass

import numpy as np

_rng = random.Random()


@dataclass(frozen=True)
class GradientCheck:
    """One analytic derivative compared with its finite-difference estimate."""

    layer: int
    param: int
    derivative: float
    estimate: float

    @property
    def diff(self):
        return self.estimate - self.derivative


class Network:
    """Layers applied in order, followed by a loss used for training."""

    def __init__(self):
        self.layers = []
        self.loss = None

    def add_layer(self, layer):
        self.layers.append(layer)

    def add_loss(self, loss):
        self.loss = loss

    def _require_loss(self):
        if self.loss is None:
            raise ValueError("network has no loss")
        return self.loss

    def forward(self, input):
        """Run every layer in turn; an empty network does nothing."""
        data = input
        for layer in self.layers:
            layer.forward(data)
            data = layer.output()

    def backward(self, input, target):
        """Evaluate the loss and propagate gradients back through all layers."""
        if not self.layers:
            return
        loss = self._require_loss()
        loss.evaluate(self.layers[-1].output(), target)
        grad = loss.back_gradient()
        for index in range(len(self.layers) - 1, -1, -1):
            bottom = self.layers[index - 1].output() if index > 0 else input
            self.layers[index].backward(bottom, grad)
            grad = self.layers[index].back_gradient()

    def update(self, opt):
        for layer in self.layers:
            layer.update(opt)

    def output(self):
        if not self.layers:
            raise ValueError("network has no layers")
        return self.layers[-1].output()

    def get_loss(self):
        return self._require_loss().output()

    def get_parameters(self):
        """Return one flat parameter array per layer."""
        return [np.asarray(layer.get_parameters(), dtype=np.float32) for layer in self.layers]

    def set_parameters(self, param):
        if len(param) != len(self.layers):
            raise ValueError("Parameter size does not match")
        for layer, values in zip(self.layers, param):
            layer.set_parameters(values)

    def get_derivatives(self):
        """Return one flat derivative array per layer."""
        return [np.asarray(layer.get_derivatives(), dtype=np.float32) for layer in self.layers]

    def _loss_at(self, input, target, param):
        self.set_parameters(param)
        self.forward(input)
        self.backward(input, target)
        return float(self._require_loss().output())

    def check_gradient(self, input, target, n_points, seed=-1):
        """Compare analytic derivatives with central differences at random points.

        Prints and returns one record per checked parameter; picks that land on
        a layer without parameters are skipped.
        """
        if seed > 0:
            _rng.seed(seed)

        self.forward(input)
        self.backward(input, target)
        param = [values.copy() for values in self.get_parameters()]
        deriv = self.get_derivatives()

        eps = np.float32(1e-4)
        results = []
        if not deriv:
            return results
        for _ in range(n_points):
            layer_id = _rng.randrange(len(deriv))
            n_param = deriv[layer_id].size
            if n_param < 1:
                continue
            param_id = _rng.randrange(n_param)
            old = param[layer_id][param_id]

            param[layer_id][param_id] = old - eps
            loss_pre = self._loss_at(input, target, param)
            param[layer_id][param_id] = old + eps
            loss_post = self._loss_at(input, target, param)
            param[layer_id][param_id] = old

            check = GradientCheck(layer_id, param_id,
                                  float(deriv[layer_id][param_id]),
                                  (loss_post - loss_pre) / float(eps) / 2)
            print(f"[layer {layer_id}, param {param_id}] deriv = {check.derivative:g}, "
                  f"est = {check.estimate:g}, diff = {check.diff:g}")
            results.append(check)

        self.set_parameters(param)
        return results

    def save_parameters(self, filename):
        """Write the layer count, then each layer's size and float32 values."""
        with open(filename, "wb") as out:
            out.write(struct.pack("<i", len(self.layers)))
            print(f"Num Layers: {len(self.layers)}")
            for index, layer in enumerate(self.layers):
                values = np.asarray(layer.get_parameters(), dtype="<f4").reshape(-1)
                print(f"Layer {index} size: {values.size}")
                out.write(struct.pack("<i", values.size))
                out.write(values.tobytes())

    def load_parameters(self, filename):
        """Read parameters written by :meth:`save_parameters` into the layers."""
        with open(filename, "rb") as stream:
            data = stream.read()
        try:
            (n_layer,) = struct.unpack_from("<i", data, 0)
            offset = 4
            if n_layer < 0:
                raise ValueError("negative layer count in parameter file")
            params = []
            for _ in range(n_layer):
                (size,) = struct.unpack_from("<i", data, offset)
                offset += 4
                if size < 0 or offset + 4 * size > len(data):
                    raise ValueError("parameter file is truncated or corrupt")
                values = np.frombuffer(data, dtype="<f4", count=size, offset=offset)
                params.append(values.astype(np.float32))
                offset += 4 * size
        except struct.error as exc:
            raise ValueError("parameter file is truncated") from exc
        self.set_parameters(params)