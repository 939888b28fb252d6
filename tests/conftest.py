from typing import List

import numpy as np
import pytest

from layerchain.layers import FullyConnected, Layer


class RecordingLayer(Layer):
    """Identity layer that remembers what passed through it."""

    def __init__(self, size: int, name: str = "Recorder") -> None:
        super().__init__(name)
        self.size = size
        self.inputs: List[np.ndarray] = []
        self.gradients: List[np.ndarray] = []

    @property
    def output_channels(self) -> int:
        return 1

    @property
    def output_rows(self) -> int:
        return 1

    @property
    def output_columns(self) -> int:
        return self.size

    @property
    def output_elements(self) -> int:
        return self.size

    def forward_vector(self, x: np.ndarray) -> np.ndarray:
        self.inputs.append(x.copy())
        return x

    def backward_vector(self, dL_dy: np.ndarray) -> np.ndarray:
        self.gradients.append(dL_dy.copy())
        return dL_dy


@pytest.fixture
def recorder_factory():
    return RecordingLayer


@pytest.fixture
def identity_layer() -> FullyConnected:
    layer = FullyConnected(2, 2, seed=0, learning_rate=0.1)
    layer.weights[...] = np.eye(2)
    return layer
