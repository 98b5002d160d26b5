"""Curation error types."""


class CurationError(Exception):
    """Base exception for curation errors."""


class DigestGenerationError(CurationError):
    """Raised when a digest cannot be generated.

    Only raised when the underlying storage read fails; there is no
    meaningful partial digest in that case.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error message.
            cause: Storage error that aborted generation.
        """
        self.message = message
        self.cause = cause
        super().__init__(message)
