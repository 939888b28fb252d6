import numpy as np

from layerchain.layers.base import Layer


class MaxPool(Layer):
    """Max pooling over local regions. Not implemented yet.

    Every operation raises ``NotImplementedError`` so a chain containing this
    layer fails on first use instead of passing empty data along.
    """

    def _unsupported(self, operation: str) -> NotImplementedError:
        return NotImplementedError(
            f"{self.name}: {operation} is not implemented for max pooling.")

    @property
    def output_channels(self) -> int:
        raise self._unsupported("output_channels")

    @property
    def output_rows(self) -> int:
        raise self._unsupported("output_rows")

    @property
    def output_columns(self) -> int:
        raise self._unsupported("output_columns")

    @property
    def output_elements(self) -> int:
        raise self._unsupported("output_elements")

    def forward_vector(self, x: np.ndarray) -> np.ndarray:
        raise self._unsupported("forward")

    def backward_vector(self, dL_dy: np.ndarray) -> np.ndarray:
        raise self._unsupported("backward")
