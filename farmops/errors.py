# farmops/errors.py


class FarmOpsError(Exception):
    """Base class for every error the dashboard shows to the user."""


class ValidationError(FarmOpsError):
    """A single record or form field failed validation."""

    def __init__(self, message: str, field: str | None = None, errors: dict | None = None):
        super().__init__(message)
        self.field = field
        self.message = message
        self.errors = errors or ({field: message} if field else {})


class NoValidRecordsError(ValidationError):
    """A planting import ended with nothing left to insert."""


class NotFoundReference(FarmOpsError):
    """A land or production natural key did not resolve."""


class RemoteFailure(FarmOpsError):
    """The record store rejected a read or write."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message


class SpreadsheetError(FarmOpsError):
    """An uploaded file could not be read as a sheet."""
