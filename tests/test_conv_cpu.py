import numpy as np
import pytest

from minidnn.conv import Conv
from minidnn.conv_cpu import ConvCPU, conv_forward_cpu
from minidnn.optimizer import SGD


def _random(shape, seed=0):
    return np.random.default_rng(seed).standard_normal(shape).astype(np.float32)


def test_unit_mask_returns_input():
    x = _random(2 * 3 * 3)
    out = conv_forward_cpu(x, [1.0], 2, 1, 1, 3, 3, 1)
    np.testing.assert_array_equal(out, x)


def test_ones_mask_sums_windows():
    x = np.arange(1, 10, dtype=np.float32)
    out = conv_forward_cpu(x, np.ones(4), 1, 1, 1, 3, 3, 2)
    np.testing.assert_allclose(out, [12.0, 16.0, 24.0, 28.0])


def test_channels_are_summed():
    x = _random(3 * 2 * 4 * 4, seed=1)
    out = conv_forward_cpu(x, [1.0, 1.0], 3, 1, 2, 4, 4, 1)
    expected = x.reshape(3, 2, 16).sum(axis=1).ravel()
    np.testing.assert_allclose(out, expected, rtol=1e-6)


def test_output_maps_follow_mask_order():
    x = _random(2 * 9, seed=2)
    out = conv_forward_cpu(x, [1.0, 2.0], 2, 2, 1, 3, 3, 1)
    per_image = x.reshape(2, 9)
    expected = np.concatenate([np.concatenate([img, 2 * img]) for img in per_image])
    np.testing.assert_allclose(out, expected, rtol=1e-6)


def test_input_size_mismatch_raises():
    with pytest.raises(ValueError):
        conv_forward_cpu(np.zeros(8), np.ones(4), 1, 1, 1, 3, 3, 2)


def test_kernel_too_large_raises():
    with pytest.raises(ValueError):
        conv_forward_cpu(np.zeros(9), np.ones(16), 1, 1, 1, 3, 3, 4)


def test_forward_matches_conv_without_bias():
    conv = Conv(2, 6, 6, 3, 3, 3)
    cpu = ConvCPU(2, 6, 6, 3, 3, 3)
    params = _random(conv.get_parameters().size, seed=3)
    conv.set_parameters(params)
    cpu.set_parameters(params)
    x = _random((conv.dim_in, 4), seed=4)
    conv.forward(x)
    cpu.forward(x)
    hw_out = conv.height_out * conv.width_out
    expected = conv.output() - np.repeat(conv.bias, hw_out)[:, None]
    np.testing.assert_allclose(cpu.output(), expected, rtol=1e-4, atol=1e-5)


def test_forward_ignores_bias():
    cpu = ConvCPU(1, 5, 5, 2, 2, 2)
    x = _random((cpu.dim_in, 2), seed=5)
    params = _random(cpu.get_parameters().size, seed=6)
    cpu.set_parameters(params)
    cpu.forward(x)
    first = cpu.output().copy()
    params[-cpu.channel_out:] += 10.0
    cpu.set_parameters(params)
    cpu.forward(x)
    np.testing.assert_array_equal(cpu.output(), first)


def test_forward_reports_timing(capsys):
    cpu = ConvCPU(1, 4, 4, 1, 2, 2)
    cpu.forward(_random((cpu.dim_in, 1)))
    out = capsys.readouterr().out
    assert "Conv-CPU==" in out
    assert "Op Time:" in out


def test_forward_rejects_stride():
    cpu = ConvCPU(1, 5, 5, 1, 3, 3, stride=2)
    with pytest.raises(ValueError):
        cpu.forward(_random((cpu.dim_in, 1)))


def test_parameters_round_trip():
    cpu = ConvCPU(2, 4, 4, 3, 2, 2)
    params = np.arange(cpu.get_parameters().size, dtype=np.float32)
    cpu.set_parameters(params)
    np.testing.assert_array_equal(cpu.get_parameters(), params)


def test_set_parameters_wrong_size_raises():
    cpu = ConvCPU(1, 4, 4, 1, 2, 2)
    with pytest.raises(ValueError):
        cpu.set_parameters(np.zeros(3))


def test_backward_leaves_gradient_untouched():
    cpu = ConvCPU(1, 4, 4, 1, 2, 2)
    x = _random((cpu.dim_in, 1))
    cpu.forward(x)
    cpu.backward(x, _random((cpu.dim_out, 1), seed=7))
    assert cpu.back_gradient().size == 0


def test_update_with_decay_shrinks_parameters():
    cpu = ConvCPU(1, 4, 4, 2, 2, 2)
    before = cpu.get_parameters().copy()
    cpu.update(SGD(lr=0.1, decay=0.5))
    np.testing.assert_allclose(cpu.get_parameters(), before * (1 - 0.1 * 0.5), rtol=1e-6)