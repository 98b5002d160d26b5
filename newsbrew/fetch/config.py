"""Fetch layer settings as they appear under ``fetch:`` in the config file."""

import re
from typing import Annotated

from pydantic import Field, field_validator

from newsbrew.data_model import StrictBaseModel
from newsbrew.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_USER_AGENT,
)
from newsbrew.fetch.models import RetryPolicy
from newsbrew.fetch.redact import SENSITIVE_HEADERS


Timeout = Annotated[float, Field(ge=1.0, le=300.0)]


class DomainProfile(StrictBaseModel):
    """Timeout and header overrides for hosts matching ``domain_pattern``.

    Profiles are checked in order and the first match wins. Credentials
    are refused here; adapters read them from the environment instead.
    """

    domain_pattern: Annotated[str, Field(min_length=1)]
    headers: dict[str, str] = Field(default_factory=dict)
    timeout_seconds: Timeout = 15.0

    @field_validator("domain_pattern")
    @classmethod
    def _compiles(cls, pattern: str) -> str:
        try:
            re.compile(pattern)
        except re.error as e:
            msg = f"Invalid regex pattern: {e}"
            raise ValueError(msg) from e
        return pattern

    @field_validator("headers")
    @classmethod
    def _no_credentials(cls, headers: dict[str, str]) -> dict[str, str]:
        secret = sorted(name for name in headers if name.lower() in SENSITIVE_HEADERS)
        if secret:
            msg = (
                f"Header '{secret[0]}' must not be stored in config; "
                "set it through the environment"
            )
            raise ValueError(msg)
        return headers

    def matches(self, domain: str) -> bool:
        return re.match(self.domain_pattern, domain) is not None


class FetchConfig(StrictBaseModel):
    """Limits and politeness settings shared by every HTTP request."""

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = DEFAULT_USER_AGENT
    default_timeout_seconds: Timeout = 15.0
    max_response_size_bytes: Annotated[
        int, Field(ge=1024, le=100 * 1024 * 1024)
    ] = DEFAULT_MAX_RESPONSE_SIZE_BYTES
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    domain_profiles: list[DomainProfile] = Field(default_factory=list)

    def profile_for(self, domain: str) -> DomainProfile | None:
        return next((p for p in self.domain_profiles if p.matches(domain)), None)

    def timeout_for(self, domain: str) -> float:
        """Request timeout in seconds for ``domain``."""
        profile = self.profile_for(domain)
        return profile.timeout_seconds if profile else self.default_timeout_seconds

    def headers_for(self, domain: str) -> dict[str, str]:
        """Extra headers configured for ``domain`` (a fresh dict)."""
        profile = self.profile_for(domain)
        return dict(profile.headers) if profile else {}
