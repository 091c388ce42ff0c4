"""A two-layer fully connected classifier with ReLU and softmax activations."""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from .model_io import load_matrix_csv, save_matrix_csv

PathLike = Union[str, "os.PathLike[str]"]

_PARAMETER_FILES = {
    "w1": "model_W1.csv",
    "b1": "model_b1.csv",
    "w2": "model_W2.csv",
    "b2": "model_b2.csv",
}


@dataclass(frozen=True)
class ForwardResult:
    """Intermediate values of a forward pass; columns are samples."""

    z1: np.ndarray
    a1: np.ndarray
    z2: np.ndarray
    a2: np.ndarray


@dataclass(frozen=True)
class Gradients:
    """Gradients of the cross-entropy loss with respect to each parameter."""

    dw1: np.ndarray
    db1: np.ndarray
    dw2: np.ndarray
    db2: np.ndarray


def relu(x) -> np.ndarray:
    """Element-wise max(x, 0)."""
    return np.maximum(np.asarray(x, dtype=float), 0.0)


def softmax(x) -> np.ndarray:
    """Column-wise softmax: every column of the result sums to one."""
    values = np.asarray(x, dtype=float)
    shifted = np.exp(values - values.max(axis=0, keepdims=True))
    return shifted / shifted.sum(axis=0, keepdims=True)


def _label_row(labels) -> np.ndarray:
    array = np.asarray(labels)
    if array.ndim == 2:
        if array.shape[0] != 1:
            raise ValueError("labels must be a row vector")
        return array[0]
    if array.ndim != 1:
        raise ValueError("labels must be a row vector")
    return array


def one_hot(labels, num_classes: int) -> np.ndarray:
    """Encode a row of class labels as a ``num_classes`` x m matrix.

    Labels outside ``[0, num_classes)`` trigger a warning and leave their
    column all zero.
    """
    classes = _label_row(labels).astype(int)
    encoded = np.zeros((num_classes, classes.size))
    valid = (classes >= 0) & (classes < num_classes)
    for label in classes[~valid]:
        warnings.warn(
            f"label {label} is out of bounds for one-hot encoding",
            RuntimeWarning,
            stacklevel=2,
        )
    encoded[classes[valid], np.flatnonzero(valid)] = 1.0
    return encoded


def predictions(a2) -> np.ndarray:
    """Index of the largest entry in each column (the first one on ties)."""
    return np.argmax(np.asarray(a2), axis=0).astype(int)


def accuracy(predicted, true_labels) -> float:
    """Fraction of positions where the predicted label equals the true one."""
    guess = np.asarray(predicted).reshape(-1)
    truth = np.asarray(true_labels).reshape(-1)
    if guess.size != truth.size:
        raise ValueError(
            f"size mismatch: {guess.size} predictions for {truth.size} labels"
        )
    if guess.size == 0:
        return float("nan")
    return float(np.count_nonzero(guess == truth)) / guess.size


class NeuralNetwork:
    """Input -> ReLU hidden layer -> softmax output, trained by gradient descent."""

    def __init__(
        self,
        input_size: int,
        hidden_size: int,
        output_size: int,
        learning_rate: float,
        load_path: Optional[PathLike] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.input_size = input_size
        self.hidden_size = hidden_size
        self.output_size = output_size
        self.learning_rate = learning_rate

        if load_path is not None and str(load_path) != "":
            self._load(Path(load_path))
        else:
            generator = rng if rng is not None else np.random.default_rng()
            self.w1 = generator.uniform(-0.5, 0.5, size=(hidden_size, input_size))
            self.b1 = generator.uniform(-0.5, 0.5, size=hidden_size)
            self.w2 = generator.uniform(-0.5, 0.5, size=(output_size, hidden_size))
            self.b2 = generator.uniform(-0.5, 0.5, size=output_size)

    def _load(self, directory: Path) -> None:
        expected = {
            "w1": (self.hidden_size, self.input_size),
            "b1": (self.hidden_size,),
            "w2": (self.output_size, self.hidden_size),
            "b2": (self.output_size,),
        }
        for name, filename in _PARAMETER_FILES.items():
            matrix = load_matrix_csv(directory / filename)
            if len(expected[name]) == 1:
                matrix = matrix.reshape(-1)
            if matrix.shape != expected[name]:
                raise ValueError(
                    f"{directory / filename}: expected shape {expected[name]}, "
                    f"found {matrix.shape}"
                )
            setattr(self, name, matrix)

    def forward(self, x) -> ForwardResult:
        """Run the network on a matrix whose columns are samples."""
        inputs = np.asarray(x, dtype=float)
        z1 = self.w1 @ inputs + self.b1[:, np.newaxis]
        a1 = relu(z1)
        z2 = self.w2 @ a1 + self.b2[:, np.newaxis]
        a2 = softmax(z2)
        return ForwardResult(z1=z1, a1=a1, z2=z2, a2=a2)

    def backward(self, x, y, forward_result: ForwardResult) -> Gradients:
        """Gradients of the mean cross-entropy loss for labels ``y``."""
        inputs = np.asarray(x, dtype=float)
        targets = one_hot(y, self.output_size)
        m = targets.shape[1]

        dz2 = forward_result.a2 - targets
        dw2 = (dz2 @ forward_result.a1.T) / m
        db2 = dz2.sum(axis=1) / m

        relu_derivative = (forward_result.z1 > 0).astype(float)
        dz1 = (self.w2.T @ dz2) * relu_derivative
        dw1 = (dz1 @ inputs.T) / m
        db1 = dz1.sum(axis=1) / m
        return Gradients(dw1=dw1, db1=db1, dw2=dw2, db2=db2)

    def update_parameters(self, gradients: Gradients) -> None:
        """Take one gradient descent step at the current learning rate."""
        rate = self.learning_rate
        self.w1 = self.w1 - rate * gradients.dw1
        self.b1 = self.b1 - rate * gradients.db1
        self.w2 = self.w2 - rate * gradients.dw2
        self.b2 = self.b2 - rate * gradients.db2

    def decay_learning_rate(self, factor: float) -> float:
        """Multiply the learning rate by a factor in (0, 1) and return the new rate."""
        if not 0 < factor < 1:
            raise ValueError(f"decay factor must lie strictly between 0 and 1, got {factor}")
        self.learning_rate *= factor
        return self.learning_rate

    def save(self, directory: PathLike) -> Optional[Path]:
        """Write the parameters as CSV files into ``directory``.

        An empty directory name saves nothing and returns None.
        """
        if str(directory) == "":
            return None
        target = Path(directory)
        target.mkdir(parents=True, exist_ok=True)
        for name, filename in _PARAMETER_FILES.items():
            save_matrix_csv(getattr(self, name), target / filename)
        return target