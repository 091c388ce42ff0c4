import numpy as np
import pytest

from mnistnet import cli
from mnistnet.network import NeuralNetwork


def _write_csv(path, header, rows):
    lines = [header] + [",".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _labelled_rows():
    return [
        [3, 0, 51, 102, 255],
        [1, 255, 0, 0, 0],
        [0, 0, 0, 255, 0],
        [2, 10, 20, 30, 40],
        [1, 5, 5, 5, 5],
    ]


def _separable_rows(count):
    rows = []
    for index in range(count):
        if index % 2 == 0:
            rows.append([0, 255, 200, 0, 0])
        else:
            rows.append([1, 0, 0, 200, 255])
    return rows


def test_training_config_defaults_follow_schedule():
    config = cli.TrainingConfig()
    assert (config.epochs, config.lr_decay_step, config.lr_decay_start) == (200, 20, 40)
    assert config.initial_lr == pytest.approx(0.1)
    assert config.lr_decay_factor == pytest.approx(0.75)


def test_load_and_split_data(tmp_path):
    rows = _labelled_rows()
    path = _write_csv(tmp_path / "train.csv", "label,a,b,c,d", rows)
    x_train, y_train, x_dev, y_dev = cli.load_and_split_data(path, 0.2, 4)
    data = np.array(rows, dtype=float)
    assert y_dev.tolist() == [3]
    assert np.allclose(x_dev, data[:1, 1:].T / 255.0)
    assert y_train.shape == (1, 4)
    assert y_train[0].tolist() == data[1:, 0].tolist()
    assert np.allclose(x_train, data[1:, 1:].T / 255.0)


def test_load_and_split_data_too_few_columns(tmp_path):
    path = _write_csv(tmp_path / "train.csv", "label,a", [[1, 2], [0, 3]])
    with pytest.raises(ValueError):
        cli.load_and_split_data(path, 0.5, 4)


def test_load_test_data_scales_and_transposes(tmp_path):
    rows = [[0, 255, 51], [102, 0, 255]]
    path = _write_csv(tmp_path / "test.csv", "a,b,c", rows)
    images = cli.load_test_data(path)
    assert images.shape == (3, 2)
    assert np.allclose(images, np.array(rows, dtype=float).T / 255.0)


def test_load_test_data_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        cli.load_test_data(tmp_path / "absent.csv")


def test_test_model_returns_label_per_image():
    net = NeuralNetwork(4, 3, 2, 0.1, rng=np.random.default_rng(0))
    images = np.random.default_rng(1).uniform(0, 1, size=(4, 7))
    labels = cli.test_model(net, images)
    assert len(labels) == 7
    assert all(label in (0, 1) for label in labels)
    assert labels == np.argmax(net.forward(images).a2, axis=0).tolist()


def test_train_model_saves_best_model(tmp_path, capsys):
    path = _write_csv(tmp_path / "train.csv", "label,a,b,c,d", _separable_rows(20))
    x_train, y_train, x_dev, y_dev = cli.load_and_split_data(path, 0.2, 4)
    net = NeuralNetwork(4, 3, 2, 0.5, rng=np.random.default_rng(3))
    config = cli.TrainingConfig(
        epochs=60, initial_lr=0.5, lr_decay_step=20, lr_decay_factor=0.5, lr_decay_start=40
    )
    model_dir = tmp_path / "model"
    best = cli.train_model(net, x_train, y_train, x_dev, y_dev, config, model_dir)
    assert 0.5 <= best <= 1.0
    assert (model_dir / "model_W1.csv").exists()
    assert net.learning_rate == pytest.approx(0.125)
    out = capsys.readouterr().out
    assert "Epoch 5 - Accuracy:" in out
    assert "Model saved" in out


def test_train_model_without_directory_saves_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = _write_csv(tmp_path / "train.csv", "label,a,b,c,d", _separable_rows(10))
    x_train, y_train, x_dev, y_dev = cli.load_and_split_data(path, 0.2, 4)
    net = NeuralNetwork(4, 3, 2, 0.5, rng=np.random.default_rng(4))
    config = cli.TrainingConfig(epochs=10, initial_lr=0.5)
    best = cli.train_model(net, x_train, y_train, x_dev, y_dev, config, "")
    assert 0.0 <= best <= 1.0
    assert not any(tmp_path.glob("model_*.csv"))


def test_main_prints_predictions(tmp_path, capsys):
    net = NeuralNetwork(4, 3, 2, 0.1, rng=np.random.default_rng(5))
    model_dir = net.save(tmp_path / "model")
    rows = [[0, 255, 10, 20], [255, 0, 30, 40], [5, 5, 5, 5]]
    test_path = _write_csv(tmp_path / "test.csv", "a,b,c,d", rows)
    code = cli.main(
        [
            "--test-path", str(test_path),
            "--model-dir", str(model_dir),
            "--input-size", "4",
            "--hidden-size", "3",
            "--output-size", "2",
        ]
    )
    assert code == 0
    expected = cli.test_model(net, cli.load_test_data(test_path))
    out = capsys.readouterr().out
    for index, label in enumerate(expected):
        assert f"Prediction[{index}] = {label}" in out
    assert "Prediction[3]" not in out


def test_main_fails_without_test_data(tmp_path):
    net = NeuralNetwork(4, 3, 2, 0.1, rng=np.random.default_rng(6))
    model_dir = net.save(tmp_path / "model")
    code = cli.main(
        [
            "--test-path", str(tmp_path / "absent.csv"),
            "--model-dir", str(model_dir),
            "--input-size", "4",
            "--hidden-size", "3",
            "--output-size", "2",
        ]
    )
    assert code == 1


def test_main_fails_without_model(tmp_path):
    test_path = _write_csv(tmp_path / "test.csv", "a,b,c,d", [[1, 2, 3, 4]])
    code = cli.main(
        ["--test-path", str(test_path), "--model-dir", str(tmp_path / "nothing")]
    )
    assert code == 1