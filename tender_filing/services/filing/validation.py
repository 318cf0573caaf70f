from typing import Iterable, Optional, Sequence

from tender_filing.core.config import settings
from tender_filing.core.exceptions import FileTooLargeError, InvalidFileTypeError
from tender_filing.models.filing import IncomingFile
from tender_filing.utils.logging import get_logger

LOGGER = get_logger(__name__)


class UploadValidator:
    """Checks size and content type for a whole batch before any I/O."""

    def __init__(
        self,
        max_bytes: Optional[int] = None,
        allowed_mime_types: Optional[Iterable[str]] = None,
    ):
        self.max_bytes = max_bytes if max_bytes is not None else settings.filing.max_upload_bytes
        self.allowed_mime_types = frozenset(
            allowed_mime_types if allowed_mime_types is not None
            else settings.filing.allowed_mime_types
        )

    def validate_file(self, file: IncomingFile) -> None:
        """Raise for the first rule ``file`` breaks.

        Raises:
            FileTooLargeError: Size is above the ceiling (equal is accepted)
            InvalidFileTypeError: Content type is not in the allow-list
        """
        if file.size > self.max_bytes:
            raise FileTooLargeError(file.file_name, file.size, self.max_bytes)
        if file.content_type not in self.allowed_mime_types:
            raise InvalidFileTypeError(file.file_name, file.content_type)

    def validate_batch(self, files: Sequence[IncomingFile]) -> None:
        """Validate every file; the first violation rejects the batch."""
        for file in files:
            try:
                self.validate_file(file)
            except (FileTooLargeError, InvalidFileTypeError) as e:
                LOGGER.warning(
                    f"Upload batch rejected: {e}",
                    extra={"file_name": file.file_name, "error_code": e.code.value},
                )
                raise
