"""Error types for the source adapter framework."""

from enum import Enum
from typing import Annotated

from pydantic import Field

from newsbrew.data_model import StrictBaseModel


ErrorDetails = dict[str, str | int | bool | None]


class AdapterErrorClass(str, Enum):
    """Why an adapter gave up on a source.

    FETCH covers transport and HTTP status failures, PARSE a body that is
    not valid JSON, XML or HTML, SCHEMA a parsed body missing the fields the
    adapter needs, and TIMEOUT a sync deadline reached mid-fetch.
    """

    FETCH = "FETCH"
    PARSE = "PARSE"
    SCHEMA = "SCHEMA"
    TIMEOUT = "TIMEOUT"


class AdapterError(Exception):
    """Base exception for adapter errors.

    Provides structured error information for logging and sync reports.
    """

    def __init__(
        self,
        error_class: AdapterErrorClass,
        message: str,
        source_name: str | None = None,
        details: ErrorDetails | None = None,
    ) -> None:
        """Initialize the adapter error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source_name: Name of the source that failed.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source_name = source_name
        self.details = details or {}


class ParseError(AdapterError):
    """Raised when a response body cannot be parsed."""

    def __init__(
        self,
        message: str,
        source_name: str | None = None,
        context: str | None = None,
    ) -> None:
        details: ErrorDetails = {}
        if context is not None:
            details["context"] = context[:200]
        super().__init__(
            error_class=AdapterErrorClass.PARSE,
            message=message,
            source_name=source_name,
            details=details,
        )


class SchemaError(AdapterError):
    """Raised when parsed data lacks required fields or has wrong types."""

    def __init__(
        self,
        message: str,
        source_name: str | None = None,
        field: str | None = None,
        expected: str | None = None,
    ) -> None:
        details: ErrorDetails = {}
        if field is not None:
            details["field"] = field
        if expected is not None:
            details["expected"] = expected
        super().__init__(
            error_class=AdapterErrorClass.SCHEMA,
            message=message,
            source_name=source_name,
            details=details,
        )
        self.field = field


class ErrorRecord(StrictBaseModel):
    """Serializable error record for sync reports."""

    error_class: AdapterErrorClass
    message: Annotated[str, Field(min_length=1)]
    source_name: str | None = None
    details: ErrorDetails = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, error: AdapterError) -> "ErrorRecord":
        """Snapshot ``error`` for the sync report."""
        return cls(
            error_class=error.error_class,
            message=error.message or type(error).__name__,
            source_name=error.source_name,
            details=error.details,
        )
