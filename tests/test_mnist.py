import struct

import numpy as np
import pytest

from minidnn.mnist import MNIST, TEST_IMAGES, TEST_LABELS, TRAIN_IMAGES, TRAIN_LABELS


def write_images(path, images):
    images = np.asarray(images, dtype=np.uint8)
    n, rows, cols = images.shape
    with open(path, "wb") as stream:
        stream.write(struct.pack(">4i", 2051, n, rows, cols))
        stream.write(images.tobytes())


def write_labels(path, labels):
    labels = np.asarray(labels, dtype=np.uint8)
    with open(path, "wb") as stream:
        stream.write(struct.pack(">2i", 2049, labels.size))
        stream.write(labels.tobytes())


@pytest.fixture
def images():
    return np.arange(3 * 2 * 3, dtype=np.uint8).reshape(3, 2, 3) * 7


def test_read_images_one_column_per_image(tmp_path, images):
    path = tmp_path / "img"
    write_images(path, images)
    data = MNIST(tmp_path).read_mnist_data(path)
    assert data.shape == (6, 3)
    assert data.dtype == np.float32
    for i, image in enumerate(images):
        np.testing.assert_array_equal(data[:, i], image.reshape(-1).astype(np.float32))


def test_read_images_batch_limit(tmp_path, images):
    path = tmp_path / "img"
    write_images(path, images)
    data = MNIST(tmp_path).read_mnist_data(path, 2)
    assert data.shape == (6, 2)
    np.testing.assert_array_equal(data[:, 1], images[1].reshape(-1))


@pytest.mark.parametrize("batch_size", [0, -1, 3, 10])
def test_read_images_batch_outside_range_reads_all(tmp_path, images, batch_size):
    path = tmp_path / "img"
    write_images(path, images)
    assert MNIST(tmp_path).read_mnist_data(path, batch_size).shape == (6, 3)


def test_read_labels(tmp_path):
    path = tmp_path / "lbl"
    write_labels(path, [3, 1, 4, 1, 5])
    mnist = MNIST(tmp_path)
    np.testing.assert_array_equal(mnist.read_mnist_label(path), [[3, 1, 4, 1, 5]])
    np.testing.assert_array_equal(mnist.read_mnist_label(path, 2), [[3, 1]])


def test_truncated_image_file_raises(tmp_path, images):
    path = tmp_path / "img"
    write_images(path, images)
    path.write_bytes(path.read_bytes()[:-1])
    with pytest.raises(ValueError):
        MNIST(tmp_path).read_mnist_data(path)


def test_short_label_header_raises(tmp_path):
    path = tmp_path / "lbl"
    path.write_bytes(b"\x00\x00\x08")
    with pytest.raises(ValueError):
        MNIST(tmp_path).read_mnist_label(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        MNIST(tmp_path).read_mnist_data(tmp_path / "absent")


def test_read_all_sets(tmp_path, images):
    write_images(tmp_path / TRAIN_IMAGES, images)
    write_images(tmp_path / TEST_IMAGES, images[:2])
    write_labels(tmp_path / TRAIN_LABELS, [1, 2, 3])
    write_labels(tmp_path / TEST_LABELS, [4, 5])
    mnist = MNIST(tmp_path)
    mnist.read()
    assert mnist.train_data.shape == (6, 3)
    assert mnist.test_data.shape == (6, 2)
    np.testing.assert_array_equal(mnist.train_labels, [[1, 2, 3]])
    np.testing.assert_array_equal(mnist.test_labels, [[4, 5]])


def test_read_test_data_with_batch(tmp_path, images):
    write_images(tmp_path / TEST_IMAGES, images)
    write_labels(tmp_path / TEST_LABELS, [7, 8, 9])
    mnist = MNIST(str(tmp_path) + "/")
    mnist.read_test_data(1)
    assert mnist.test_data.shape == (6, 1)
    np.testing.assert_array_equal(mnist.test_labels, [[7]])
    assert mnist.train_data.size == 0