"""Error types raised by the store and the product repository."""


class ListingsError(Exception):
    """Base class for all application errors."""


class ValidationError(ListingsError):
    """Request data is missing required fields or has the wrong shape."""


class NotFoundError(ListingsError):
    """The targeted product does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class StoreIOError(ListingsError):
    """The JSON document could not be read from or written to disk."""
