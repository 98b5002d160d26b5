"""Fetch layer limits and defaults."""

DEFAULT_MAX_RESPONSE_SIZE_BYTES = 5 * 1024 * 1024

STREAM_CHUNK_BYTES = 8192

# Upper bound on a server-requested Retry-After wait
MAX_RETRY_AFTER_SECONDS = 30

# No request is started with less than this much of a deadline left
MIN_REQUEST_SECONDS = 0.5

DEFAULT_USER_AGENT = "newsbrew/0.1 (+https://github.com/newsbrew/newsbrew)"
