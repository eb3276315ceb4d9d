"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class IrcWatchError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(IrcWatchError):
    """Raised for issues related to configuration loading or validation."""


class StorageError(IrcWatchError):
    """
    Raised when a storage operation fails for a recoverable reason such as a lost
    connection, a constraint violation or a failed transaction.
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class NotFoundError(StorageError):
    """Raised when a lookup or update targets an identity that has no row."""

    def __init__(self, entity: str, entity_id: int, operation: str | None = None):
        super().__init__(f"{entity} {entity_id} not found", operation=operation)
        self.entity = entity
        self.entity_id = entity_id


class FetchError(IrcWatchError):
    """Base exception for failures while fetching a remote resource."""

    def __init__(self, message: str, url: str):
        super().__init__(message)
        self.url = url


class UnreachableError(FetchError):
    """Raised when the request could not be completed (connection error, timeout)."""


class BadStatusError(FetchError):
    """Raised when the remote answered with a non-success status code."""

    def __init__(self, url: str, status: int):
        super().__init__(f"Bad status {status} from '{url}'", url)
        self.status = status


class LocalIOError(FetchError):
    """Raised when the destination file cannot be created or written."""
