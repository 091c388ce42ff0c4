# mnistnet

mnistnet is a small neural network for classifying handwritten digits from
the MNIST dataset. It is written on NumPy. The network has one hidden layer
with ReLU activation and a softmax output layer. It is trained by full-batch
gradient descent, and the learning rate decays in steps.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Command line

```
mnistnet
```

With no options, the command loads the weights from `./model_params/`. It
then reads the test images from `./mnist_mock_test.csv` and prints the
predictions for the first ten of them:

```
Loading weights and biases... 
Model loaded from: ./model_params/
Prediction[0] = 7
Prediction[1] = 2
...
```

To train a fresh network before predicting:

```
mnistnet --train --train-path train.csv --epochs 200
```

Options:

| Option | Default | Meaning |
| --- | --- | --- |
| `--train` | off | train a new network instead of loading one |
| `--train-path` | `./MNIST_handwritten_dataset/train.csv` | labelled training CSV |
| `--test-path` | `./mnist_mock_test.csv` | unlabelled test CSV |
| `--model-dir` | `./model_params/` | where weights are loaded from or saved to |
| `--validation-split` | `0.2` | share of training rows kept for validation |
| `--epochs` | `200` | training epochs |
| `--learning-rate` | `0.1` | initial learning rate |
| `--input-size` | `784` | pixels per image |
| `--hidden-size` | `128` | hidden units |
| `--output-size` | `10` | classes |

During training, the model is saved to the model directory each time the
validation accuracy improves. The predictions that follow training come from
the network as it stands after the last epoch. The command exits with status 1
and a message on standard error in these cases:

- the data or the weights cannot be read;
- a CSV file is malformed;
- the test data does not fit the network's sizes.

File formats:

- Training CSV: a header row, then one row per image. Each row is the label
  followed by the pixel values (0–255). The first `--validation-split` share
  of rows becomes the validation set.
- Test CSV: a header row, then one row of pixel values per image.
- Model directory: `model_W1.csv`, `model_b1.csv`, `model_W2.csv` and
  `model_b2.csv`, as written by `NeuralNetwork.save`.

Pixel values are divided by 255 when they are loaded.

## Library use

```python
from mnistnet.cli import TrainingConfig, load_and_split_data, train_model, test_model
from mnistnet.network import NeuralNetwork, accuracy, predictions

x_train, y_train, x_dev, y_dev = load_and_split_data(
    "train.csv", validation_split=0.2, input_size=784
)

config = TrainingConfig(epochs=50)
network = NeuralNetwork(784, 128, 10, config.initial_lr)
best = train_model(network, x_train, y_train, x_dev, y_dev, config, "model_params")

print(best, accuracy(predictions(network.forward(x_dev).a2), y_dev))
```

Each column of a matrix is one sample. Inputs have shape `(input_size, m)`.

### `mnistnet.network`

- `NeuralNetwork(input_size, hidden_size, output_size, learning_rate, load_path=None, rng=None)`:
  - If `load_path` is given, the weights are read from that directory and
    their shapes are checked.
  - Otherwise the weights are drawn uniformly from [-0.5, 0.5), using `rng`
    if one is passed.
- `forward(x)` returns a `ForwardResult` with the fields `z1`, `a1`, `z2`
  and `a2`.
- `backward(x, y, forward_result)` returns `Gradients` with the fields
  `dw1`, `db1`, `dw2` and `db2`.
- `update_parameters(gradients)` takes one gradient descent step.
- `decay_learning_rate(factor)` multiplies the rate by a factor that must lie
  in (0, 1), and returns the new rate.
- `save(directory)` writes the four CSV files. It returns `None` and writes
  nothing when the directory name is empty.
- The module also has these functions:
  - `relu` and `softmax`. The softmax works column by column.
  - `one_hot(labels, num_classes)`. An out-of-range label raises a
    `RuntimeWarning` and leaves its column zero.
  - `predictions(a2)`, the argmax of each column.
  - `accuracy(predicted, true_labels)`.

### `mnistnet.cli`

`TrainingConfig` holds the training schedule. Its fields and defaults:

- `epochs`: 200
- `initial_lr`: 0.1
- `lr_decay_step`: 20
- `lr_decay_factor`: 0.75
- `lr_decay_start`: 40
- `evaluate_every`: 5

The learning rate decays on every `lr_decay_step`th epoch from
`lr_decay_start` onward. `train_model` returns the best validation accuracy.

The module also has `load_and_split_data`, `load_test_data`, `test_model` and
`main(argv=None)`.

### `mnistnet.model_io`

- `csv_read(path, header=False)` is a strict numeric CSV reader. It raises
  `CsvFormatError` (a `ValueError`) when a cell is not a number or when rows
  differ in length.
- `save_matrix_csv` and `load_matrix_csv` give a full-precision CSV round
  trip. An empty file loads as a 0x0 matrix.
- `save_matrix_binary` and `load_matrix_binary` use a binary format:
  - the row and column counts as little-endian 64-bit integers;
  - then the values as float64, in column-major order.

  Truncated files raise `ValueError`. A 1-D array is saved as a column
  vector by both writers.

### `mnistnet.stats`

- `mean(values)`
- `variance(values, sample=False)`
- `stdev(values, sample=False)`

With `sample=True`, the variance divides by n − 1 when there is more than one
value. An empty input raises `ValueError`.

## What it does not do

- Training is full-batch only. There are no mini-batches, no other
  optimisers and no control over threads.
- The package does not download or unpack MNIST. The CSV files must already
  be on disk.