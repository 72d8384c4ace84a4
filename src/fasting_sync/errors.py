"""Exceptions raised by the fasting session client."""


class FastingSyncError(Exception):
    """Base class for client-side errors."""


class RemoteStoreError(FastingSyncError):
    """The remote session store could not be reached or answered unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidEmailError(FastingSyncError):
    """An email address was missing or malformed."""


class SessionImportError(FastingSyncError):
    """An uploaded export file could not be turned back into a session."""


class ReadOnlySessionError(FastingSyncError):
    """A mutation was attempted through a read-only session view."""
