import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from layerchain.activations import Activation, ReLU
from layerchain.errors import ShapeError, StateError
from layerchain.initializers import Initializer, RandomNormal
from layerchain.layers.base import Layer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwardCache:
    x: np.ndarray
    z: np.ndarray


class FullyConnected(Layer):
    """Dense layer computing ``relu(x @ W)`` with in-place SGD updates.

    ``W`` has shape ``(input_length, output_length)``: one row per input
    neuron and one column per output neuron. A backward call updates ``W``
    with plain gradient descent and passes the input gradient on to the
    previous layer.

    The activation is a hard ReLU going forward but its derivative floors at
    ``leak`` (0.01) for inactive units, so they keep receiving gradient.
    """

    def __init__(self,
                 input_length: int,
                 output_length: int,
                 seed: Optional[int] = None,
                 learning_rate: float = 0.01,
                 initializer: Optional[Initializer] = None,
                 leak: float = 0.01,
                 name: Optional[str] = None) -> None:
        super().__init__(name)

        if input_length <= 0:
            raise ShapeError(
                f"Input length must be positive, got {input_length}.")

        if output_length <= 0:
            raise ShapeError(
                f"Output length must be positive, got {output_length}.")

        if learning_rate < 0:
            raise ValueError(
                f"Learning rate must be non-negative, got {learning_rate}.")

        self.input_length = input_length
        self.output_length = output_length
        self.seed = seed
        self.learning_rate = learning_rate
        self.initializer = initializer or RandomNormal(seed=seed)
        self.activation: Activation = ReLU(leak=leak)

        self._W = np.empty((input_length, output_length), dtype=np.float64)
        self._dL_dW = np.zeros_like(self._W)
        self._cache: Optional[ForwardCache] = None

        self.set_random_weights()

        logger.info(
            "%s initialized with input_length=%d, output_length=%d, "
            "learning_rate=%.4f, initializer=%s.", self.name,
            self.input_length, self.output_length, self.learning_rate,
            self.initializer.name)

    @property
    def weights(self) -> np.ndarray:
        return self._W

    @property
    def params(self) -> Dict[str, np.ndarray]:
        return {"W": self._W}

    @property
    def grads(self) -> Dict[str, np.ndarray]:
        return {"W": self._dL_dW}

    @property
    def last_x(self) -> Optional[np.ndarray]:
        return self._cache.x if self._cache is not None else None

    @property
    def last_z(self) -> Optional[np.ndarray]:
        return self._cache.z if self._cache is not None else None

    @property
    def output_channels(self) -> int:
        return 1

    @property
    def output_rows(self) -> int:
        return 1

    @property
    def output_columns(self) -> int:
        return self.output_length

    @property
    def output_elements(self) -> int:
        return self.output_length

    def set_random_weights(self) -> None:
        weights = self.initializer(self._W.shape)

        if weights.shape != self._W.shape:
            raise ShapeError(
                f"Initializer {self.initializer.name} returned weights with "
                f"shape {weights.shape}, expected {self._W.shape}.")

        self._W[...] = weights

    def forward_vector(self, x: np.ndarray) -> np.ndarray:
        if x.ndim != 1:
            raise ShapeError("Input shape mismatch. Expected 1D array, got "
                             f"{x.ndim}D array with shape {x.shape}.")

        if x.shape[0] != self.input_length:
            raise ShapeError(
                "Input length mismatch. Expected vector of length "
                f"{self.input_length}, got {x.shape[0]}.")

        z = x @ self._W
        y = self.activation.forward(z)

        self._cache = ForwardCache(x=x.copy(), z=z)

        logger.debug("%s forward pass: input_shape=%s, output_shape=%s.",
                     self.name, x.shape, y.shape)

        return y

    def backward_vector(self, dL_dy: np.ndarray) -> np.ndarray:
        if self._cache is None:
            raise StateError(
                f"{self.name}: must call forward before backward.")

        if dL_dy.ndim != 1:
            raise ShapeError(
                "Output gradient shape mismatch. Expected 1D array, got "
                f"{dL_dy.ndim}D array with shape {dL_dy.shape}.")

        if dL_dy.shape[0] != self.output_length:
            raise ShapeError(
                "Output gradient length mismatch. Expected vector of length "
                f"{self.output_length}, got {dL_dy.shape[0]}.")

        cache, self._cache = self._cache, None

        dL_dz = self.activation.backward(dL_dy, cache.z)

        # Must use the weights from before this step's update.
        dL_dx = self._W @ dL_dz

        self._dL_dW[...] = np.outer(cache.x, dL_dz)
        self._W -= self.learning_rate * self._dL_dW

        logger.debug("%s backward pass: dL_dy_shape=%s, dL_dx_shape=%s.",
                     self.name, dL_dy.shape, dL_dx.shape)

        return dL_dx
