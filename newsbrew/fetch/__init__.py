"""HTTP fetch layer shared by source adapters."""

from newsbrew.fetch.client import HttpFetcher
from newsbrew.fetch.config import DomainProfile, FetchConfig
from newsbrew.fetch.metrics import FetchMetrics
from newsbrew.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
    RetryPolicy,
)
from newsbrew.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    "DomainProfile",
    "FetchConfig",
    "FetchError",
    "FetchErrorClass",
    "FetchMetrics",
    "FetchResult",
    "HttpFetcher",
    "ResponseSizeExceededError",
    "RetryPolicy",
    "redact_headers",
    "redact_url_credentials",
]
