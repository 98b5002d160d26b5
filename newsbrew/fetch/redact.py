"""Masking of credentials before headers and URLs reach the logs."""

import re


SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key"}
)

# Query parameters some feeds and APIs use to carry keys
SENSITIVE_PARAMS = ("token", "access_token", "api_key", "apikey", "key")

REDACTED_VALUE = "[REDACTED]"

_USERINFO = re.compile(r"(?P<scheme>https?://)[^:/@\s]+:[^@/\s]+@")
_SECRET_PARAM = re.compile(
    r"(?P<name>[?&](?:" + "|".join(SENSITIVE_PARAMS) + r"))=[^&#]*",
    re.IGNORECASE,
)


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of ``headers`` with credential values replaced."""
    return {
        name: REDACTED_VALUE if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def redact_url_credentials(url: str) -> str:
    """Mask ``user:password@`` userinfo and secret query parameters."""
    url = _USERINFO.sub(rf"\g<scheme>{REDACTED_VALUE}:{REDACTED_VALUE}@", url)
    return _SECRET_PARAM.sub(rf"\g<name>={REDACTED_VALUE}", url)
