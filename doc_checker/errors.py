"""
Domain error types.

Kept apart from the app module so storage, ingest and monitor can raise them
without importing FastAPI.
"""


class DocCheckerError(Exception):
    """Base class for errors surfaced to the user."""


class UploadLimitError(DocCheckerError):
    """Raised when a session already holds the maximum number of documents."""


class UnsupportedFileTypeError(DocCheckerError):
    """Raised when an upload's extension is not in the accepted list."""


class DocumentReadError(DocCheckerError):
    """Raised when an uploaded file cannot be read as text."""


class UnknownSessionError(DocCheckerError, KeyError):
    """Raised for a user id that was never initialised."""


class UnknownSourceError(DocCheckerError, KeyError):
    """Raised for an external source id the monitor does not know."""


class MonitorBusyError(DocCheckerError):
    """Raised when a source check is requested while another is running."""


class SourceFetchError(DocCheckerError):
    """Raised when a monitored URL cannot be fetched."""
