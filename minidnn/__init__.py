"""NumPy neural-network layers, losses and optimizers, with an IDX reader and an inference runner."""

__version__ = "0.1.0"