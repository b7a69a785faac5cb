"""Exception classes for the rasterfx processing core."""

from __future__ import annotations


class RasterFxError(Exception):
    """Base exception for rasterfx errors."""

    code: str = "RASTERFX_ERROR"


class InvalidInput(RasterFxError):
    """Raised for empty, unrecognized, oversized or corrupted image bytes."""

    code = "INVALID_INPUT"


class InvalidParameters(RasterFxError):
    """Raised when an effect option is outside its accepted range.

    Attributes:
        field: Name of the offending option
        accepted: Human-readable accepted range or value set
    """

    code = "INVALID_PARAMETERS"

    def __init__(self, field: str, accepted: str, message: str | None = None):
        self.field = field
        self.accepted = accepted
        super().__init__(message or f"{field} must be {accepted}")


class BackendFailure(RasterFxError):
    """Raised when a processing backend could not serve a request."""

    code = "BACKEND_FAILURE"

    def __init__(self, backend: str, cause: BaseException | str | None = None):
        self.backend = backend
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Backend '{backend}' failed{detail}")


class UnsupportedOperation(BackendFailure):
    """Raised by a backend for option combinations it cannot render."""

    code = "UNSUPPORTED_OPERATION"


class UnreadableImage(RasterFxError):
    """Raised when image dimensions cannot be determined."""

    code = "UNREADABLE_IMAGE"


class ProcessingFailure(RasterFxError):
    """Raised when processing times out or the worker pool fails."""

    code = "PROCESSING_FAILURE"


class Busy(RasterFxError):
    """Raised when the worker pool cannot admit another request."""

    code = "BUSY"
