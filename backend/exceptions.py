"""Error taxonomy for the intake API.

Every error is caught at the endpoint boundary and rendered as
``{success: false, message, errors?}`` with the status code below.
"""


class IntakeError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code = 500
    log_level = 'error'

    def __init__(self, message, errors=None, status_code=None):
        super().__init__(message)
        self.message = message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code


class MalformedInput(IntakeError):
    """Submission body could not be parsed."""
    status_code = 400
    log_level = 'warning'


class ValidationFailed(IntakeError):
    """Metadata violated the participant schema; ``errors`` lists every field."""
    status_code = 400
    log_level = 'warning'


class UnsupportedFileType(IntakeError):
    """A file part declared a non-image content type."""
    status_code = 415
    log_level = 'warning'


class FileTooLarge(IntakeError):
    """A file part exceeded the per-file size ceiling."""
    status_code = 413
    log_level = 'warning'


class NotFound(IntakeError):
    status_code = 404
    log_level = 'info'


class StorageFailure(IntakeError):
    """Writing or reading image bytes failed."""
    status_code = 500


class InternalError(IntakeError):
    status_code = 500
