import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np

from layerchain import tensors
from layerchain.tensors import TensorLike

logger = logging.getLogger(__name__)

LayerInput = Union[TensorLike, Sequence[float]]


def is_vector(values: LayerInput) -> bool:
    if isinstance(values, np.ndarray):
        return values.ndim == 1

    return len(values) > 0 and np.ndim(values[0]) == 0


class Layer(ABC):
    """A node in a chain of layers.

    Forward calls run head to tail: every layer computes its own output and
    hands it to ``next_layer``, so the value returned to the outermost caller
    is the terminal layer's output. Backward calls run tail to head in the
    same way through ``prev_layer``.

    Inputs and gradients are either vectors (1D) or tensors (a 2D grid,
    a sequence of same-shaped grids or a 3D array). Subclasses implement the
    vector case; the tensor case flattens and delegates unless overridden.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or self.__class__.__name__
        self._next_layer: Optional["Layer"] = None
        self._prev_layer: Optional["Layer"] = None

    @property
    def next_layer(self) -> Optional["Layer"]:
        return self._next_layer

    @property
    def prev_layer(self) -> Optional["Layer"]:
        return self._prev_layer

    def attach_next(self, layer: "Layer") -> None:
        self._next_layer = layer

    def attach_prev(self, layer: "Layer") -> None:
        self._prev_layer = layer

    def detach_next(self) -> Optional["Layer"]:
        layer, self._next_layer = self._next_layer, None
        return layer

    def detach_prev(self) -> Optional["Layer"]:
        layer, self._prev_layer = self._prev_layer, None
        return layer

    @property
    def params(self) -> Dict[str, np.ndarray]:
        return {}

    @property
    @abstractmethod
    def output_channels(self) -> int:
        pass

    @property
    @abstractmethod
    def output_rows(self) -> int:
        pass

    @property
    @abstractmethod
    def output_columns(self) -> int:
        pass

    @property
    @abstractmethod
    def output_elements(self) -> int:
        pass

    @property
    def output_shape(self) -> Tuple[int, int, int]:
        return self.output_channels, self.output_rows, self.output_columns

    def compute_output(self, inputs: LayerInput) -> np.ndarray:
        if is_vector(inputs):
            y = self.forward_vector(tensors.as_vector(inputs))
        else:
            y = self.forward_tensor(inputs)

        if self._next_layer is not None:
            return self._next_layer.compute_output(y)

        return y

    def propagate_gradient(self, dL_dy: LayerInput) -> np.ndarray:
        if is_vector(dL_dy):
            dL_dx = self.backward_vector(tensors.as_vector(dL_dy))
        else:
            dL_dx = self.backward_tensor(dL_dy)

        if self._prev_layer is not None:
            self._prev_layer.propagate_gradient(dL_dx)

        return dL_dx

    def forward_tensor(self, x: TensorLike) -> np.ndarray:
        return self.forward_vector(tensors.flatten(x))

    def backward_tensor(self, dL_dy: TensorLike) -> np.ndarray:
        return self.backward_vector(tensors.flatten(dL_dy))

    @abstractmethod
    def forward_vector(self, x: np.ndarray) -> np.ndarray:
        pass

    @abstractmethod
    def backward_vector(self, dL_dy: np.ndarray) -> np.ndarray:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
