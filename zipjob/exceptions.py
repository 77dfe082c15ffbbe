"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class ZipJobError(Exception):
    """Base exception for all application-specific errors."""


class JobNotFoundError(ZipJobError):
    """Raised when a job identifier is not registered."""

    def __init__(self, job_id: str):
        super().__init__(f"task not found: {job_id}")
        self.job_id = job_id


class ValidationError(ZipJobError):
    """Raised when an item is rejected before it is attached to a job."""


class BadURLError(ValidationError):
    """Raised when an item URL cannot be parsed as an absolute http(s) URL."""


class UnsupportedTypeError(ValidationError):
    """Raised when an item URL does not point at an allowed file type."""


class TooManyItemsError(ValidationError):
    """Raised when a job already holds the maximum number of items."""


class StateConflictError(ZipJobError):
    """Raised when an operation is not legal in the job's current state."""


class AlreadyStartedError(StateConflictError):
    """Raised when mutating or starting a job that has already been started."""


class NoItemsError(StateConflictError):
    """Raised when starting a job that has no items."""


class BusyError(ZipJobError):
    """Raised when every admission slot is taken."""


class FetchError(ZipJobError):
    """Raised when a single item cannot be downloaded."""


class TooLargeError(FetchError):
    """Raised when a download exceeds the configured size ceiling."""


class PackagingError(ZipJobError):
    """Raised when the output archive cannot be written."""


class ConfigurationError(ZipJobError):
    """Raised for issues related to configuration loading or validation."""
