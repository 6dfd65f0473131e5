"""The convolutional network used for 86x86 fashion-MNIST inference."""

from __future__ import annotations

import argparse
import re

from .activations import ReLU, Softmax
from .conv import Conv
from .conv_cpu import ConvCPU
from .fully_connected import FullyConnected
from .loss import CrossEntropy
from .mnist import MNIST
from .network import Network
from .pooling import MaxPooling
from .utils import compute_accuracy

DEFAULT_WEIGHTS = "weights-86.bin"
DEFAULT_DATA_DIR = "/projects/bche/project/data/fmnist-86/"
DEFAULT_BATCH_SIZE = 10000


def create_network_cpu(custom_cpu_conv=False, weights_path=DEFAULT_WEIGHTS):
    """Build the network and load its weights from ``weights_path``."""
    conv_type = ConvCPU if custom_cpu_conv else Conv
    conv1 = conv_type(1, 86, 86, 4, 7, 7)
    pool1 = MaxPooling(4, 80, 80, 2, 2, 2)
    conv2 = conv_type(4, 40, 40, 16, 7, 7)
    pool2 = MaxPooling(16, 34, 34, 4, 4, 4)
    fc3 = FullyConnected(pool2.output_dim(), 32)
    fc4 = FullyConnected(32, 10)

    dnn = Network()
    for layer in (conv1, ReLU(), pool1, conv2, ReLU(), pool2,
                  fc3, ReLU(), fc4, Softmax()):
        dnn.add_layer(layer)
    dnn.add_loss(CrossEntropy())
    dnn.load_parameters(weights_path)
    return dnn


def inference_only(batch_size, data_dir=DEFAULT_DATA_DIR, weights_path=DEFAULT_WEIGHTS):
    """Classify the test set with the host convolution and return the accuracy."""
    print("Loading fashion-mnist data...", end="", flush=True)
    dataset = MNIST(data_dir)
    dataset.read_test_data(batch_size)
    print("Done")

    print("Loading model...", end="", flush=True)
    dnn = create_network_cpu(True, weights_path)
    print("Done")

    dnn.forward(dataset.test_data)
    accuracy = compute_accuracy(dnn.output(), dataset.test_labels)
    print()
    print(f"Test Accuracy: {accuracy:g}")
    print()
    return accuracy


def _atoi(text):
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run test-set inference.")
    parser.add_argument("batch_size", nargs="?", default=None,
                        help="number of test images to classify")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR)
    parser.add_argument("--weights", default=DEFAULT_WEIGHTS)
    args = parser.parse_args(argv)

    batch_size = DEFAULT_BATCH_SIZE if args.batch_size is None else _atoi(args.batch_size)
    print(f"Test batch size: {batch_size}")
    inference_only(batch_size, args.data_dir, args.weights)
    return 0