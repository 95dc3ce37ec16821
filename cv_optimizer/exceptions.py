"""
Error types raised by the CV optimizer.

Every failure is terminal for the current request. The HTTP layer maps each
type to a status code; the messages carried here are safe to show to users.
"""


class CVOptimizerError(Exception):
    """Base class for all optimizer errors."""

    status_code = 500


class InputError(CVOptimizerError):
    """Raised when the caller supplied a missing or invalid input."""

    status_code = 400


class NotFound(CVOptimizerError):
    """Raised when a requested generated document does not exist."""

    status_code = 404


class MalformedResponse(CVOptimizerError):
    """Raised when the model reply is not the expected JSON object."""

    status_code = 502


class UpstreamUnavailable(CVOptimizerError):
    """Raised when the text-generation service call fails."""

    status_code = 503


class StorageError(CVOptimizerError):
    """Raised when reading or writing an upload or generated file fails."""

    status_code = 500
