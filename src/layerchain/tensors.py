import logging
from typing import List, Sequence, Tuple, Union

import numpy as np

from layerchain.errors import ShapeError

logger = logging.getLogger(__name__)

TensorLike = Union[np.ndarray, Sequence[np.ndarray], Sequence[Sequence[
    Sequence[float]]]]


def _to_array(values, what: str) -> np.ndarray:
    try:
        return np.asarray(values, dtype=np.float64)
    except ValueError as e:
        raise ShapeError(f"{what} is ragged or not numeric.") from e


def _stack_grids(values: Sequence) -> np.ndarray:
    grids: List[np.ndarray] = [
        _to_array(grid, f"Grid {i}") for i, grid in enumerate(values)
    ]

    for i, grid in enumerate(grids):
        if grid.ndim != 2:
            raise ShapeError(
                f"Grid {i} shape mismatch. Expected 2D array, got "
                f"{grid.ndim}D array with shape {grid.shape}.")

        if grid.shape != grids[0].shape:
            raise ShapeError(
                f"Grid {i} shape mismatch. Expected {grids[0].shape}, "
                f"got {grid.shape}.")

    return np.stack(grids)


def as_vector(values: Union[np.ndarray, Sequence[float]]) -> np.ndarray:
    vector = _to_array(values, "Vector")

    if vector.ndim != 1:
        raise ShapeError("Vector shape mismatch. Expected 1D array, got "
                         f"{vector.ndim}D array with shape {vector.shape}.")

    return vector


def as_tensor(values: TensorLike) -> np.ndarray:
    """Stacks a sequence of same-shaped 2D grids into a 3D array.

    A single 2D grid, as an array or as nested lists, is treated as a tensor
    with one grid.
    """
    if isinstance(values, np.ndarray):
        tensor = values.astype(np.float64, copy=False)
    else:
        if len(values) == 0:
            raise ShapeError("Tensor must contain at least one grid.")

        try:
            tensor = np.asarray(values, dtype=np.float64)
        except ValueError:
            # Grids of different shapes; report which one is off.
            tensor = _stack_grids(values)

    if tensor.ndim == 2:
        tensor = tensor[np.newaxis, :, :]

    if tensor.ndim != 3:
        raise ShapeError("Tensor shape mismatch. Expected 3D array, got "
                         f"{tensor.ndim}D array with shape {tensor.shape}.")

    if tensor.size == 0:
        raise ShapeError(
            f"Tensor must not have empty dimensions, got shape {tensor.shape}."
        )

    return tensor


def shape_of(tensor: TensorLike) -> Tuple[int, int, int]:
    length, rows, columns = as_tensor(tensor).shape
    return length, rows, columns


def flatten(tensor: TensorLike) -> np.ndarray:
    """Concatenates every grid element in grid-major, row-major order.

    Args:
        tensor: Sequence of equally shaped 2D grids, or a 3D array.

    Returns:
        1D array of length ``length * rows * columns``.

    Raises:
        ShapeError: If the tensor is empty or its grids disagree in shape.
    """
    stacked = as_tensor(tensor)
    vector = stacked.reshape(-1).copy()

    logger.debug("Flattened tensor with shape %s into vector of length %d.",
                 stacked.shape, vector.shape[0])

    return vector


def unflatten(vector: Union[np.ndarray, Sequence[float]], length: int,
              rows: int, columns: int) -> np.ndarray:
    """Partitions a vector into ``length`` grids of ``rows x columns``.

    Raises:
        ShapeError: If a dimension is not positive or the vector length does
            not equal ``length * rows * columns``.
    """
    if length <= 0 or rows <= 0 or columns <= 0:
        raise ShapeError("Tensor dimensions must be positive, got "
                         f"length={length}, rows={rows}, columns={columns}.")

    flat = as_vector(vector)

    expected = length * rows * columns
    if flat.shape[0] != expected:
        raise ShapeError(
            f"Vector length mismatch. Expected {expected} elements for "
            f"shape ({length}, {rows}, {columns}), got {flat.shape[0]}.")

    tensor = flat.reshape(length, rows, columns).copy()

    logger.debug("Unflattened vector of length %d into tensor with shape %s.",
                 flat.shape[0], tensor.shape)

    return tensor
