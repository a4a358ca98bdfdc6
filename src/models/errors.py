"""Error kinds raised by the resource models and SQL builders.

Errors are raised at the point of detection and propagate unchanged to the caller. Each class carries
a `status` code so an outer transport layer can map it to a response without its own table.
"""

from __future__ import annotations


class ModelError(Exception):
    """Base class for all resource-model errors."""

    status: int = 500


class ValidationError(ModelError, ValueError):
    """Raised for malformed or disallowed input (empty update, unknown filter key, bad range)."""

    status = 400


class NotFoundError(ModelError):
    """Raised when a get/update/remove targets a key with no matching row."""

    status = 404


class AlreadyExistsError(ModelError):
    """Raised when a create targets a uniqueness key that is already present."""

    status = 409


class StorageError(ModelError):
    """Raised for any other storage-layer failure (connectivity, malformed statement)."""

    status = 500
