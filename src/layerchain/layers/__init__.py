from layerchain.layers.base import Layer
from layerchain.layers.fully_connected import FullyConnected
from layerchain.layers.max_pool import MaxPool

__all__ = ["Layer", "FullyConnected", "MaxPool"]
