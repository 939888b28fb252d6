import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class Initializer(ABC):
    """Produces the starting values of a weight matrix."""

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or self.__class__.__name__

    def __call__(
        self, shape: Tuple[int, ...], dtype: np.dtype = np.dtype("float64")
    ) -> np.ndarray:
        return self.initialize(shape, dtype)

    @abstractmethod
    def initialize(
        self, shape: Tuple[int, ...], dtype: np.dtype = np.dtype("float64")
    ) -> np.ndarray:
        pass


class Constant(Initializer):
    """Fills every weight with ``value``. Mostly useful in tests."""

    def __init__(self, value: float = 0.0, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.value = value
        logger.info("%s initializer created with value=%.4f.", self.name,
                    self.value)

    def initialize(
        self, shape: Tuple[int, ...], dtype: np.dtype = np.dtype("float64")
    ) -> np.ndarray:
        weights = np.full(shape, self.value, dtype=dtype)

        logger.info("%s filled weights with shape %s with %.4f.", self.name,
                    shape, self.value)
        return weights


class RandomNormal(Initializer):
    """Draws every entry independently from a Gaussian distribution.

    Each call to ``initialize`` starts from a fresh generator seeded with
    ``seed``, so the same seed and shape always give the same weights.
    """

    def __init__(self,
                 mean: float = 0.0,
                 stddev: float = 1.0,
                 seed: Optional[int] = None,
                 name: Optional[str] = None) -> None:
        super().__init__(name)

        if stddev < 0:
            raise ValueError(
                f"Standard deviation must be non-negative, got {stddev}.")

        self.mean = mean
        self.stddev = stddev
        self.seed = seed

        logger.info(
            "%s initializer created with mean=%.4f, stddev=%.4f, "
            "seed=%s.", self.name, self.mean, self.stddev,
            self.seed if self.seed is not None else "None")

    def initialize(
        self, shape: Tuple[int, ...], dtype: np.dtype = np.dtype("float64")
    ) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        weights = rng.normal(self.mean, self.stddev, shape).astype(dtype)

        logger.info(
            "%s initialized weights with shape %s from normal "
            "distribution.", self.name, shape)

        return weights
