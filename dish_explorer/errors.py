from __future__ import annotations


class DishExplorerError(Exception):
    """Base class for errors surfaced by the dish catalog."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DishExplorerError):
    """Missing, empty or unrecognized caller input."""

    status_code = 400


class NotFoundError(DishExplorerError):
    status_code = 404


class DataLoadError(DishExplorerError):
    """The seed file could not be read or the batch could not be persisted."""
