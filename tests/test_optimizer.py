import numpy as np
import pytest

from minidnn.optimizer import SGD, Optimizer


def test_optimizer_is_abstract():
    with pytest.raises(TypeError):
        Optimizer()


def test_plain_step():
    w = np.array([1.0], dtype=np.float32)
    SGD(lr=0.5).update(w, np.array([1.0], dtype=np.float32))
    assert w[0] == pytest.approx(0.5)


def test_zero_learning_rate_keeps_weights():
    w = np.array([1.0, -2.0, 3.0], dtype=np.float32)
    before = w.copy()
    SGD(lr=0.0, momentum=0.9).update(w, np.ones(3, dtype=np.float32))
    assert np.array_equal(w, before)


def test_decay_shrinks_weights():
    w = np.array([2.0, -2.0], dtype=np.float32)
    before = w.copy()
    SGD(lr=0.1, decay=0.5).update(w, np.zeros(2, dtype=np.float32))
    assert np.all(np.abs(w) < np.abs(before))
    assert np.array_equal(np.sign(w), np.sign(before))


def test_momentum_accumulates():
    momentum = 0.5
    opt = SGD(lr=0.1, momentum=momentum)
    w = np.zeros(3, dtype=np.float32)
    dw = np.ones(3, dtype=np.float32)
    opt.update(w, dw)
    first = -w.copy()
    opt.update(w, dw)
    second = -w - first
    assert np.allclose(second / first, 1 + momentum, rtol=1e-5)


def test_nesterov_first_step_looks_ahead():
    momentum = 0.9
    w_plain = np.zeros(2, dtype=np.float32)
    w_nest = np.zeros(2, dtype=np.float32)
    dw = np.ones(2, dtype=np.float32)
    SGD(lr=0.1).update(w_plain, dw)
    SGD(lr=0.1, momentum=momentum, nesterov=True).update(w_nest, dw)
    assert np.allclose(w_nest / w_plain, 1 + momentum, rtol=1e-5)


def test_separate_buffers_have_separate_velocity():
    opt = SGD(lr=0.1, momentum=0.9)
    a = np.zeros(2, dtype=np.float32)
    b = np.zeros(2, dtype=np.float32)
    dw = np.ones(2, dtype=np.float32)
    opt.update(a, dw)
    opt.update(b, dw)
    assert np.array_equal(a, b)


def test_velocity_follows_buffer_through_views():
    momentum = 0.5
    opt = SGD(lr=0.1, momentum=momentum)
    weight = np.zeros((2, 2), dtype=np.float32)
    dw = np.ones(4, dtype=np.float32)
    opt.update(weight.reshape(-1), dw)
    first = -weight.copy()
    opt.update(weight.reshape(-1), dw)
    second = -weight - first
    assert np.allclose(second / first, 1 + momentum, rtol=1e-5)


def test_size_mismatch_raises():
    with pytest.raises(ValueError):
        SGD().update(np.zeros(3, dtype=np.float32), np.zeros(2, dtype=np.float32))


def test_non_array_parameters_rejected():
    with pytest.raises(TypeError):
        SGD().update([1.0, 2.0], np.zeros(2, dtype=np.float32))