import logging
from typing import Iterator, List, Optional, Sequence

import numpy as np

from layerchain.layers import FullyConnected, Layer
from layerchain.layers.base import LayerInput

logger = logging.getLogger(__name__)


class Pipeline:
    """Owns an ordered list of layers and keeps their links consistent.

    The layer at index ``i`` is linked to ``i - 1`` as its predecessor and
    to ``i + 1`` as its successor. Layers can only be appended, and a layer
    that is already linked cannot be added, so the chain never has cycles.
    """

    def __init__(self,
                 layers: Sequence[Layer],
                 name: Optional[str] = None) -> None:
        if not layers:
            raise ValueError("Pipeline must have at least one layer.")

        self.name = name or self.__class__.__name__
        self._layers: List[Layer] = []

        for i, layer in enumerate(layers):
            self._check_can_link(layer, layers[:i])

        for layer in layers:
            self.add(layer)

        logger.info("%s initialized with %d layers.", self.name,
                    len(self._layers))

    @classmethod
    def dense(cls,
              sizes: Sequence[int],
              seed: int = 0,
              learning_rate: float = 0.01,
              name: Optional[str] = None) -> "Pipeline":
        if len(sizes) < 2:
            raise ValueError("At least an input and an output size are "
                             f"required, got {list(sizes)}.")

        layers: List[Layer] = [
            FullyConnected(D_in,
                           D_out,
                           seed=seed + i,
                           learning_rate=learning_rate,
                           name=f"FullyConnected_{i}")
            for i, (D_in, D_out) in enumerate(zip(sizes[:-1], sizes[1:]))
        ]

        return cls(layers, name=name)

    @property
    def head(self) -> Layer:
        return self._layers[0]

    @property
    def tail(self) -> Layer:
        return self._layers[-1]

    @property
    def layers(self) -> List[Layer]:
        return list(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, index: int) -> Layer:
        return self._layers[index]

    def _check_can_link(self, layer: Layer, existing: Sequence[Layer]) -> None:
        if any(layer is other for other in existing):
            raise ValueError(
                f"Layer {layer.name} is already part of {self.name}.")

        if layer.prev_layer is not None or layer.next_layer is not None:
            raise ValueError(
                f"Layer {layer.name} is already linked to another chain.")

    def add(self, layer: Layer) -> None:
        self._check_can_link(layer, self._layers)

        if self._layers:
            previous = self._layers[-1]
            previous.attach_next(layer)
            layer.attach_prev(previous)

        self._layers.append(layer)

        logger.debug("%s appended layer %s at index %d.", self.name,
                     layer.name,
                     len(self._layers) - 1)

    def predict(self, inputs: LayerInput) -> np.ndarray:
        y = self.head.compute_output(inputs)

        logger.debug("%s forward pass: output_shape=%s.", self.name, y.shape)

        return y

    def backpropagate(self, dL_dy: LayerInput) -> np.ndarray:
        dL_dx = self.tail.propagate_gradient(dL_dy)

        logger.debug("%s backward pass: tail_input_gradient_shape=%s.",
                     self.name, dL_dx.shape)

        return dL_dx
