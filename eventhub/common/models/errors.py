"""Errors raised by the models.

Handlers translate these to HTTP status codes, see
`eventhub.common.http.handle_errors`.

"""
from typing import Any, Dict


class ModelError(Exception):
    """Base class of model errors.

    Keyword arguments are extra details that are returned to the client along
    with the message.

    """

    def __init__(self, message: str, **details: Any):
        """Initialize a ModelError instance.

        Args:
            message: Human readable error message.
            details: Extra details for the client, eg. `connectionStatus`.

        """
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details


class ValidationError(ModelError):
    """Missing or malformed input."""


class InvalidIdError(ValidationError):
    """The identifier is in neither the native nor the external format."""


class NotFoundError(ModelError):
    """The entity doesn't exist."""


class ConflictError(ModelError):
    """A uniqueness invariant would be violated."""


class ForbiddenError(ModelError):
    """The caller is not allowed to act on the entity."""
