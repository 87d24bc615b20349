"""Exceptions raised by the price graph."""


class GraphError(Exception):
    """Base exception for graph errors."""

    pass


class GraphConfigError(GraphError):
    """Raised when nodes are wired in an invalid way."""

    pass


class ModelNotFoundError(GraphError):
    """Raised when a provider is asked for an unknown model.

    :ivar model: Name of the missing model.
    """

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"model {model} not found")


class CrossRateError(GraphError):
    """Raised when two adjacent ticks share no asset."""

    pass
