"""A two-layer NumPy neural network for MNIST digits, with matrix I/O, statistics and a command line."""

__version__ = "0.1.0"
__all__ = ["cli", "model_io", "network", "stats"]