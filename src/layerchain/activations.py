import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)


class Activation(ABC):

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or self.__class__.__name__

    @abstractmethod
    def forward(self, z: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def derivative(self, z: np.ndarray) -> np.ndarray:
        pass

    def backward(self, dL_dy: np.ndarray, z: np.ndarray) -> np.ndarray:
        if dL_dy.shape != z.shape:
            raise ValueError(
                f"Shape mismatch between output gradients ({dL_dy.shape}) and "
                f"pre-activations ({z.shape}). They must be identical.")

        dL_dz = dL_dy * self.derivative(z)

        logger.debug("%s backward pass: dL_dy_shape=%s, dL_dz_shape=%s.",
                     self.name, dL_dy.shape, dL_dz.shape)

        return dL_dz


class ReLU(Activation):
    """Hard ReLU on the forward pass with a leaky derivative.

    Inactive units (``z <= 0``) output exactly zero but still pass
    ``leak`` times the incoming gradient backward. The two halves are
    deliberately not the same function.
    """

    def __init__(self, leak: float = 0.01, name: Optional[str] = None) -> None:
        super().__init__(name)

        if leak < 0:
            raise ValueError(f"Leak must be non-negative, got {leak}.")

        self.leak = leak

        logger.info("%s activation function initialized with leak=%.4f.",
                    self.name, self.leak)

    def forward(self, z: np.ndarray) -> np.ndarray:
        y = np.where(z > 0, z, 0.0)

        logger.debug("%s forward pass: input_shape=%s, output_shape=%s.",
                     self.name, z.shape, y.shape)

        return y

    def derivative(self, z: np.ndarray) -> np.ndarray:
        return np.where(z > 0, 1.0, self.leak)
