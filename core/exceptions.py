"""
Error taxonomy for the dashboard service.
"""
from typing import Optional


class DashboardError(Exception):
    """Base class for dashboard errors."""


class InvalidApplicationKeyError(DashboardError, ValueError):
    """Raised when an application identifier cannot be interpreted."""


class ApplicationNotFoundError(DashboardError):
    """The application key matched no latest snapshot."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Application not found: {key}")


class DatamartUnavailableError(DashboardError):
    """Fetching rows from the datamart failed."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"Datamart query '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
