"""Custom exception classes for the upload server."""


class UploadError(Exception):
    """
    Base exception class for all upload-related errors.
    """
    pass


class InvalidArgumentError(UploadError):
    """
    Raised when an identifier, size, range or payload is malformed.
    """
    pass


class SessionNotFoundError(UploadError):
    """
    Raised when no upload session or byte image exists for an identifier.
    """
    pass


class AlreadyInitializedError(UploadError):
    """
    Raised when init is called for an identifier that already has a session.
    """
    pass


class SizeMismatchError(UploadError):
    """
    Raised when a chunk declares a total size different from the one given at init.
    """

    def __init__(self, message: str, expected: int, received: int):
        super().__init__(message)
        self.expected = expected
        self.received = received


class NotInitializedError(UploadError):
    """
    Raised when a chunk arrives for an identifier that was never initialized.
    """
    pass


class StorageError(UploadError):
    """
    Raised when reading or writing the byte image or metadata record fails.
    """
    pass


class RangeNotSatisfiableError(UploadError):
    """
    Raised when a download range starts beyond the end of the byte image.
    """

    def __init__(self, message: str, file_size: int):
        super().__init__(message)
        self.file_size = file_size


class InvalidCredentialsError(UploadError):
    """
    Raised when login credentials are invalid.
    """
    pass


class InvalidTokenError(UploadError):
    """
    Raised when a bearer token is missing, malformed or expired.
    """
    pass
