"""Custom exception hierarchy."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes returned to callers in failed action results."""

    UNAUTHORIZED = "UNAUTHORIZED"
    MISSING_PROJECT = "MISSING_PROJECT"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    NOT_FOUND = "NOT_FOUND"
    RETRY_FAILED = "RETRY_FAILED"

    # Document management actions
    NO_DOCUMENTS = "NO_DOCUMENTS"
    FETCH_FAILED = "FETCH_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    MOVE_FAILED = "MOVE_FAILED"
    UPDATE_FAILED = "UPDATE_FAILED"
    BULK_DELETE_FAILED = "BULK_DELETE_FAILED"
    BULK_MOVE_FAILED = "BULK_MOVE_FAILED"


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class StorageError(AppError):
    """Raised when the object storage service rejects or fails a request."""
    pass


class DocumentNotFoundError(AppError):
    """Raised when a document is not found."""
    pass


class InvalidTransitionError(AppError):
    """Raised when a processing queue entry cannot move to the requested state."""

    def __init__(self, document_id, current: str, target: str):
        super().__init__(
            f"Cannot move queue entry for document {document_id} from '{current}' to '{target}'"
        )
        self.document_id = document_id
        self.current = current
        self.target = target


class FilingError(AppError):
    """Error that maps directly onto a caller-facing error code."""

    code: ErrorCode = ErrorCode.UPLOAD_FAILED

    def __init__(self, message: str, code: ErrorCode = None, original_error: Exception = None):
        super().__init__(message, original_error=original_error)
        if code is not None:
            self.code = code


class FileTooLargeError(FilingError):
    """Raised when an uploaded file exceeds the size ceiling."""

    code = ErrorCode.FILE_TOO_LARGE

    def __init__(self, file_name: str, size: int, limit: int):
        super().__init__(f"{file_name} exceeds {limit // (1024 * 1024)}MB limit")
        self.file_name = file_name
        self.size = size
        self.limit = limit


class InvalidFileTypeError(FilingError):
    """Raised when an uploaded file's content type is not allowed."""

    code = ErrorCode.INVALID_FILE_TYPE

    def __init__(self, file_name: str, content_type: str):
        super().__init__(f"{file_name} has unsupported type {content_type!r}")
        self.file_name = file_name
        self.content_type = content_type
