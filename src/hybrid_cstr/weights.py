"""Load and save flat network parameter vectors as plain-text files.

The file format is one floating-point literal per line, no header and no
delimiter other than the line break.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt
import torch

from hybrid_cstr.exceptions import NotFoundError, ParseError, ShapeError

logger = logging.getLogger(__name__)

ParameterVector = npt.NDArray[np.float32]


def as_parameter_vector(values: Any) -> ParameterVector:
    """Convert a sequence or tensor to a read-only float32 ParameterVector.

    Args:
        values: 1-D sequence, numpy array, or torch tensor.

    Returns:
        Read-only float32 array, shape (n,).

    Raises:
        ShapeError: If values is not one-dimensional.
    """
    if isinstance(values, torch.Tensor):
        values = values.detach().cpu().numpy()
    vector = np.array(values, dtype=np.float32, copy=True)
    if vector.ndim != 1:
        raise ShapeError(f"Parameter vector must be 1-D, got shape {vector.shape}")
    vector.flags.writeable = False
    return vector


def load_parameters(
    path: str | Path,
    expected_length: int | None = None,
) -> ParameterVector:
    """Read newline-separated floats into a ParameterVector.

    A single trailing empty segment (the final newline) is discarded;
    any other empty or malformed line is an error.

    Args:
        path: Path to the weight file.
        expected_length: If given, the required number of parameters.

    Returns:
        Read-only float32 array, shape (n,).

    Raises:
        NotFoundError: If the file does not exist or cannot be read.
        ParseError: If the file is not UTF-8 text or a line is not a
            valid float literal.
        ShapeError: If expected_length is given and does not match.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError as exc:
        raise NotFoundError(f"Weight file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path}: not a UTF-8 text file: {exc}") from exc
    except OSError as exc:
        raise NotFoundError(f"Cannot read weight file {path}: {exc}") from exc

    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    values: list[np.float32] = []
    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip("\r")
        try:
            values.append(np.float32(float(line)))
        except ValueError as exc:
            raise ParseError(f"{path}:{lineno}: invalid float literal {line!r}") from exc

    vector = as_parameter_vector(values)
    if expected_length is not None and len(vector) != expected_length:
        raise ShapeError(
            f"{path} holds {len(vector)} parameters, expected {expected_length}"
        )

    logger.info(f"Loaded {len(vector)} parameters from {path}")
    return vector


def save_parameters(path: str | Path, parameters: Any) -> None:
    """Write a parameter vector as one float literal per line.

    Args:
        path: Output path. Parent directories are created.
        parameters: 1-D sequence, array, or tensor.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    vector = as_parameter_vector(parameters)
    with open(path, "w", encoding="utf-8") as f:
        for value in vector:
            f.write(f"{float(value)!r}\n")
    logger.info(f"Saved {len(vector)} parameters to {path}")


__all__ = ["ParameterVector", "as_parameter_vector", "load_parameters", "save_parameters"]
