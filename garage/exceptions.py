"""Custom exceptions for the garage backend and client."""

from typing import List, Optional


class GarageError(Exception):
    """Base exception for all garage errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


# -----------------------------------------------------------------------------
# Document store errors
# -----------------------------------------------------------------------------


class StoreError(GarageError):
    """Base class for document store errors."""


class StoreNotConnectedError(StoreError):
    """The store has not been connected."""

    def __init__(self) -> None:
        super().__init__(
            "Document store is not connected",
            "Set GARAGE_DB_PATH and restart the server.",
        )


class DuplicateKeyError(StoreError):
    """A unique field already holds this value."""

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for {field}", value)


class DocumentValidationError(StoreError):
    """Document failed schema validation."""

    def __init__(self, messages: List[str]) -> None:
        self.messages = messages
        super().__init__("Document validation failed", " ".join(messages))


# -----------------------------------------------------------------------------
# HTTP errors
# -----------------------------------------------------------------------------


class WeatherError(GarageError):
    """Weather provider call failed."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        super().__init__(message)


class BackendError(GarageError):
    """A request from the client to the garage backend failed."""

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None) -> None:
        self.url = url
        self.status = status
        message = f"Request to {url} failed"
        if status is not None:
            message += f" with status {status}"
        super().__init__(message, reason)
