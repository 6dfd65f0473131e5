# minidnn

A small neural-network library built on NumPy. It provides the building
blocks of a classic convolutional network and a ready-made model for
single-channel 86×86 images stored as IDX files (the Fashion-MNIST layout).

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Data layout

Every matrix is a 2-D NumPy `float32` array with **one sample per column**.
An image with `C` channels of `H × W` pixels is a column of length `C*H*W`,
stored channel by channel, row by row.

## Building blocks

| Module                    | Contents                                             |
|---------------------------|------------------------------------------------------|
| `minidnn.layer`           | `Layer`, the base class of every layer               |
| `minidnn.conv`            | `Conv`, an im2col convolution with forward and backward passes, stride and zero padding |
| `minidnn.conv_cpu`        | `conv_forward_cpu` and `ConvCPU`, a direct, inference-only convolution |
| `minidnn.pooling`         | `MaxPooling`, `AvePooling`                           |
| `minidnn.fully_connected` | `FullyConnected`                                     |
| `minidnn.activations`     | `ReLU`, `Sigmoid`, `Softmax` (column-wise)           |
| `minidnn.loss`            | `Loss`, `MSE`, `CrossEntropy`                        |
| `minidnn.optimizer`       | `Optimizer`, `SGD` (momentum, weight decay, Nesterov) |
| `minidnn.network`         | `Network` and the `GradientCheck` record             |
| `minidnn.mnist`           | `MNIST`, a reader for IDX image and label files      |
| `minidnn.utils`           | `set_normal_random`, `shuffle_data`, `one_hot_encode`, `compute_accuracy` |
| `minidnn.model`           | the prebuilt network and the inference runner        |

Each layer offers `forward(bottom)`, `backward(bottom, grad_top)`,
`update(opt)`, `output()`, `back_gradient()` and `output_dim()`. Layers with
weights also offer `get_parameters()`, `set_parameters(param)` and
`get_derivatives()`, which work on one flat array: the weight matrix in
column-major order followed by the bias. A wrong parameter count raises
`ValueError`.

Notes on individual layers:

- `ConvCPU` accepts only square kernels with stride 1 and no padding, does
  not add the bias, and its `backward` leaves gradients untouched. Each
  forward pass prints `Conv-CPU==` and the time the convolution took.
- `MaxPooling` resolves ties to the last position in the window; its
  `backward` must follow a `forward` on the same batch.
- `AvePooling` divides each window's sum by the full window size, even for
  windows that overhang the input.
- `SGD` keeps one velocity per parameter array, identified by the array's
  memory address, and updates arrays in place.

## Training a small network

```python
import numpy as np

from minidnn.activations import ReLU, Softmax
from minidnn.fully_connected import FullyConnected
from minidnn.loss import CrossEntropy
from minidnn.network import Network
from minidnn.optimizer import SGD
from minidnn.utils import compute_accuracy, one_hot_encode

x = np.random.rand(4, 64).astype(np.float32)         # 64 samples, 4 features
y = (x[0] > 0.5).astype(np.float32).reshape(1, -1)   # labels 0 or 1

net = Network()
net.add_layer(FullyConnected(4, 16))
net.add_layer(ReLU())
net.add_layer(FullyConnected(16, 2))
net.add_layer(Softmax())
net.add_loss(CrossEntropy())

opt = SGD(lr=0.1, momentum=0.9)
target = one_hot_encode(y, 2)
for _ in range(200):
    net.forward(x)
    net.backward(x, target)
    net.update(opt)

print("loss:", net.get_loss())
print("accuracy:", compute_accuracy(net.output(), y))
```

`Network.check_gradient(input, target, n_points, seed)` compares analytic
derivatives with central finite differences at randomly chosen parameters.
It prints one line per checked parameter and returns a list of
`GradientCheck` records (`layer`, `param`, `derivative`, `estimate`, `diff`).
A positive `seed` makes the choice of parameters repeatable.

## Saving and loading weights

`Network.save_parameters(filename)` writes a little-endian binary file: the
number of layers as a 32-bit integer, then for each layer its parameter count
as a 32-bit integer followed by that many 32-bit floats. It prints the layer
count and each layer's size as it goes.
`Network.load_parameters(filename)` reads the same format back; the layer
count and each layer's parameter count must match the network, and a
truncated file raises `ValueError`.

## Reading IDX data

`MNIST(data_dir)` reads big-endian IDX files. `read_mnist_data(filename,
batch_size=-1)` and `read_mnist_label(filename, batch_size=-1)` return an
image matrix (`rows*cols × samples`) or a `1 × samples` label matrix,
keeping at most `batch_size` items when it is positive. `read()` fills
`train_data`, `train_labels`, `test_data` and `test_labels` from the files
`train-86-images-idx3-ubyte`, `train-86-labels-idx1-ubyte`,
`t10k-86-images-idx3-ubyte` and `t10k-86-labels-idx1-ubyte` in `data_dir`;
`read_test_data(batch_size)` fills only the test attributes.

## The prebuilt model

`minidnn.model.create_network_cpu(custom_cpu_conv=False,
weights_path="weights-86.bin")` builds:

```
Conv(1→4, 7×7) → ReLU → MaxPool(2) →
Conv(4→16, 7×7) → ReLU → MaxPool(4) →
FullyConnected(→32) → ReLU → FullyConnected(32→10) → Softmax
```

with a cross-entropy loss, and loads its weights from `weights_path`. With
`custom_cpu_conv` true the convolutions are `ConvCPU` layers, otherwise
`Conv` layers.

`minidnn.model.inference_only(batch_size, data_dir, weights_path)` reads the
first `batch_size` test images and labels from `data_dir`, runs the model
with `ConvCPU` convolutions, prints the test accuracy and returns it.

## Command line

```
minidnn-infer [BATCH_SIZE] [--data-dir DIR] [--weights FILE]
```

runs inference on the first `BATCH_SIZE` test images (10000 by default) and
prints the test accuracy. `--weights` defaults to `weights-86.bin` in the
current directory; `--data-dir` should point at the directory that holds the
test IDX files.

## What this package does not do

- There is no GPU convolution: all computation runs on the host with NumPy.
- The command only runs inference. Training is done from Python with
  `Network`, and no trained weights or data sets are shipped or downloaded.