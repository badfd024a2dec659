"""Error taxonomy for repository and record operations.

Every error raised by the store derives from StoreError and carries the
path it concerns plus the underlying cause, when there is one.
"""

from pathlib import Path
from typing import Optional, Union


class StoreError(Exception):
    """Base exception for store errors."""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.path = str(path) if path is not None else None
        self.original_error = original_error
        super().__init__(self.message)


class InvalidArgumentError(StoreError, ValueError):
    """A required input was missing or empty."""


class AlreadyExistsError(StoreError):
    """A versioned directory already exists at the target path."""


class NotFoundError(StoreError):
    """A repository, file or metadata entry does not exist."""


class IOFailureError(StoreError):
    """File-system or version-control failure not classified otherwise."""


class DecodeError(StoreError):
    """Stored metadata could not be deserialized into the expected shape."""


class ProtectedRepositoryError(StoreError):
    """A protected repository was asked to be removed without force."""
