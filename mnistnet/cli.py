"""Command line entry point: train the classifier or predict labels for test images."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .model_io import CsvFormatError, csv_read
from .network import NeuralNetwork, accuracy, predictions

PathLike = Union[str, "os.PathLike[str]"]

TRAIN_PATH = "./MNIST_handwritten_dataset/train.csv"
TEST_PATH = "./mnist_mock_test.csv"
MODEL_DIR = "./model_params/"
VALIDATION_SPLIT = 0.2

INPUT_SIZE = 784
HIDDEN_SIZE = 128
OUTPUT_SIZE = 10

_PIXEL_SCALE = 255.0
_SHOWN_PREDICTIONS = 10


@dataclass(frozen=True)
class TrainingConfig:
    """Schedule for full-batch gradient descent with step learning-rate decay."""

    epochs: int = 200
    initial_lr: float = 0.1
    lr_decay_step: int = 20
    lr_decay_factor: float = 0.75
    lr_decay_start: int = 40
    evaluate_every: int = 5


def load_and_split_data(
    path: PathLike,
    validation_split: float = VALIDATION_SPLIT,
    input_size: int = INPUT_SIZE,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Read a labelled CSV and split it into training and validation sets.

    Each row holds a label followed by ``input_size`` pixel values. The first
    ``validation_split`` share of rows becomes the validation set. Returns
    ``(x_train, y_train, x_dev, y_dev)`` with samples as columns, pixels
    scaled to [0, 1], ``y_train`` as a float row and ``y_dev`` as integers.
    """
    raw = csv_read(path, header=True).T
    if raw.shape[0] < input_size + 1:
        raise ValueError(
            f"{path}: expected a label and {input_size} values per row, "
            f"found {raw.shape[0]} columns"
        )
    total = raw.shape[1]
    dev_count = int(validation_split * total)

    y_dev = raw[0, :dev_count].astype(int)
    x_dev = raw[1 : input_size + 1, :dev_count] / _PIXEL_SCALE
    y_train = raw[0:1, dev_count:]
    x_train = raw[1 : input_size + 1, dev_count:] / _PIXEL_SCALE
    return x_train, y_train, x_dev, y_dev


def train_model(
    network: NeuralNetwork,
    x_train,
    y_train,
    x_dev,
    y_dev,
    config: Optional[TrainingConfig] = None,
    model_dir: PathLike = MODEL_DIR,
) -> float:
    """Train ``network`` in place and return the best validation accuracy.

    Whenever the validation accuracy improves the model is saved to
    ``model_dir`` (nothing is saved when it is empty).
    """
    config = config or TrainingConfig()
    print(f"Training started: \nEpochs {config.epochs}")
    print(f"Learning Rate {config.initial_lr}")
    print(f"Learning Rate Decay {config.lr_decay_factor}")
    print(f"Learning Rate Step {config.lr_decay_step}")
    print(f"Learning Rate decay start {config.lr_decay_start}")

    best_accuracy = 0.0
    for epoch in range(1, config.epochs + 1):
        result = network.forward(x_train)
        network.update_parameters(network.backward(x_train, y_train, result))

        if epoch % config.evaluate_every == 0:
            score = accuracy(predictions(network.forward(x_dev).a2), y_dev)
            print(f"Epoch {epoch} - Accuracy: {score * 100:.2f}%")
            if score > best_accuracy:
                best_accuracy = score
                if network.save(model_dir) is not None:
                    print(f"Model saved {model_dir}")

        if epoch >= config.lr_decay_start and epoch % config.lr_decay_step == 0:
            new_rate = network.decay_learning_rate(config.lr_decay_factor)
            print(f"Learning Rate updated by a factor {config.lr_decay_factor:.8f}")
            print(f"New Learning Rate {new_rate:.8f}")
    return best_accuracy


def load_test_data(path: PathLike) -> np.ndarray:
    """Read unlabelled images from a CSV with a header; samples become columns scaled to [0, 1]."""
    return csv_read(path, header=True).T / _PIXEL_SCALE


def test_model(network: NeuralNetwork, images) -> List[int]:
    """Predicted label of every image column."""
    return [int(label) for label in predictions(network.forward(images).a2)]


def _parser() -> argparse.ArgumentParser:
    defaults = TrainingConfig()
    parser = argparse.ArgumentParser(
        prog="mnistnet", description="Classify handwritten digits with a small neural network."
    )
    parser.add_argument("--train", action="store_true", help="train a fresh model first")
    parser.add_argument("--train-path", default=TRAIN_PATH)
    parser.add_argument("--test-path", default=TEST_PATH)
    parser.add_argument("--model-dir", default=MODEL_DIR)
    parser.add_argument("--validation-split", type=float, default=VALIDATION_SPLIT)
    parser.add_argument("--epochs", type=int, default=defaults.epochs)
    parser.add_argument("--learning-rate", type=float, default=defaults.initial_lr)
    parser.add_argument("--input-size", type=int, default=INPUT_SIZE)
    parser.add_argument("--hidden-size", type=int, default=HIDDEN_SIZE)
    parser.add_argument("--output-size", type=int, default=OUTPUT_SIZE)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load or train a model, then print predictions for the first test images."""
    args = _parser().parse_args(argv)
    sizes = (args.input_size, args.hidden_size, args.output_size)

    try:
        if args.train:
            x_train, y_train, x_dev, y_dev = load_and_split_data(
                args.train_path, args.validation_split, args.input_size
            )
            print("Dataset successfully loaded")
            network = NeuralNetwork(*sizes, args.learning_rate)
            config = TrainingConfig(epochs=args.epochs, initial_lr=args.learning_rate)
            train_model(network, x_train, y_train, x_dev, y_dev, config, args.model_dir)
        else:
            print("Loading weights and biases... ")
            network = NeuralNetwork(*sizes, args.learning_rate, load_path=args.model_dir)
            print(f"Model loaded from: {args.model_dir}")
    except (OSError, CsvFormatError, ValueError) as error:
        print(f"Failed to prepare the model: {error}", file=sys.stderr)
        return 1

    try:
        images = load_test_data(args.test_path)
    except (OSError, CsvFormatError) as error:
        print(f"Failed to load test data from {args.test_path}: {error}", file=sys.stderr)
        return 1

    try:
        labels = test_model(network, images)
    except ValueError as error:
        print(f"Test data does not fit the model: {error}", file=sys.stderr)
        return 1

    for index, label in enumerate(labels[:_SHOWN_PREDICTIONS]):
        print(f"Prediction[{index}] = {label}")
    return 0


if __name__ == "__main__":
    sys.exit(main())