class ShapeError(ValueError):
    """Raised when a vector or tensor does not have the expected shape."""


class StateError(RuntimeError):
    """Raised when backward is called without a matching forward call."""
