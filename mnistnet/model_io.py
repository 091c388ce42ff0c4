"""Reading and writing matrices as CSV text and as raw binary files."""

from __future__ import annotations

import os
import struct
from pathlib import Path
from typing import Iterable, List, Union

import numpy as np

PathLike = Union[str, "os.PathLike[str]"]

_BINARY_HEADER = struct.Struct("<qq")
_FLOAT_DTYPE = np.dtype("<f8")


class CsvFormatError(ValueError):
    """Raised when CSV content is not a consistent table of numbers."""


def _split_cells(line: str) -> List[str]:
    """Split a line on commas the way a delimited stream reader does.

    An empty line yields no cells, and a single trailing delimiter does not
    produce an extra empty cell.
    """
    if not line:
        return []
    cells = line.split(",")
    if cells[-1] == "":
        cells.pop()
    return cells


def _parse_row(cells: Iterable[str], line_number: int) -> List[float]:
    row = []
    for cell in cells:
        try:
            row.append(float(cell))
        except ValueError:
            raise CsvFormatError(
                f"line {line_number}: cell {cell!r} is not a number"
            ) from None
    return row


def _parse_rows(lines: Iterable[str], first_line_number: int) -> np.ndarray:
    rows: List[List[float]] = []
    width = None
    for number, line in enumerate(lines, start=first_line_number):
        row = _parse_row(_split_cells(line), number)
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise CsvFormatError(
                f"line {number}: expected {width} columns, found {len(row)}"
            )
        rows.append(row)
    if not rows:
        return np.zeros((0, 0))
    return np.array(rows, dtype=float).reshape(len(rows), width)


def _as_matrix(matrix) -> np.ndarray:
    """Return a 2-D float array; a 1-D input is treated as a column vector."""
    array = np.asarray(matrix, dtype=float)
    if array.ndim == 1:
        return array.reshape(-1, 1)
    if array.ndim != 2:
        raise ValueError(f"expected a 1-D or 2-D array, got {array.ndim} dimensions")
    return array


def csv_read(path: PathLike, header: bool = False) -> np.ndarray:
    """Read a numeric CSV file into a 2-D array.

    When ``header`` is true the first line is skipped. Every cell must parse
    as a number and every row must have the same number of columns.
    """
    with open(path, encoding="utf-8", newline="") as handle:
        lines = handle.read().splitlines()
    if header and lines:
        lines = lines[1:]
    return _parse_rows(lines, 2 if header else 1)


def save_matrix_csv(matrix, path: PathLike) -> None:
    """Write a matrix as comma-separated rows at full precision."""
    array = _as_matrix(matrix)
    text = "\n".join(",".join(format(value, ".17g") for value in row) for row in array)
    Path(path).write_text(text, encoding="utf-8")


def load_matrix_csv(path: PathLike) -> np.ndarray:
    """Load a matrix written by :func:`save_matrix_csv`.

    An empty file gives a 0x0 matrix.
    """
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return _parse_rows(lines, 1)


def save_matrix_binary(matrix, path: PathLike) -> None:
    """Write the row and column counts as 64-bit integers, then the values in column-major order."""
    array = _as_matrix(matrix)
    rows, cols = array.shape
    with open(path, "wb") as handle:
        handle.write(_BINARY_HEADER.pack(rows, cols))
        handle.write(array.astype(_FLOAT_DTYPE).tobytes(order="F"))


def load_matrix_binary(path: PathLike) -> np.ndarray:
    """Load a matrix written by :func:`save_matrix_binary`."""
    data = Path(path).read_bytes()
    if len(data) < _BINARY_HEADER.size:
        raise ValueError(f"{path}: file too short for a matrix header")
    rows, cols = _BINARY_HEADER.unpack_from(data)
    if rows < 0 or cols < 0:
        raise ValueError(f"{path}: negative matrix dimensions {rows}x{cols}")
    expected = rows * cols * _FLOAT_DTYPE.itemsize
    payload = data[_BINARY_HEADER.size:]
    if len(payload) < expected:
        raise ValueError(
            f"{path}: expected {expected} bytes of matrix data, found {len(payload)}"
        )
    values = np.frombuffer(payload[:expected], dtype=_FLOAT_DTYPE)
    return values.reshape((rows, cols), order="F").astype(float)