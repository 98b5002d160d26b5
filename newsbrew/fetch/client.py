"""Shared HTTP GET client used by every source adapter."""

import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from urllib.parse import urlsplit

import httpx
import structlog

from newsbrew.fetch.config import FetchConfig
from newsbrew.fetch.constants import (
    MAX_RETRY_AFTER_SECONDS,
    MIN_REQUEST_SECONDS,
    STREAM_CHUNK_BYTES,
)
from newsbrew.fetch.metrics import FetchMetrics
from newsbrew.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
    RetryPolicy,
)
from newsbrew.fetch.redact import redact_headers, redact_url_credentials


logger = structlog.get_logger()


def parse_retry_after(value: str | None, now: datetime | None = None) -> int | None:
    """Seconds to wait according to a Retry-After header.

    Accepts both delta-seconds and an HTTP date; anything else is ignored.
    """
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0, int((when - (now or datetime.now(UTC))).total_seconds()))


def classify_status(status_code: int, headers: httpx.Headers) -> FetchError | None:
    """Turn a non-2xx status into a fetch error."""
    if httpx.codes.is_success(status_code):
        return None
    if status_code == httpx.codes.TOO_MANY_REQUESTS:
        return FetchError(
            error_class=FetchErrorClass.RATE_LIMITED,
            message="Rate limited (429 Too Many Requests)",
            status_code=status_code,
            retry_after=parse_retry_after(headers.get("retry-after")),
        )
    if httpx.codes.is_client_error(status_code):
        error_class, label = FetchErrorClass.HTTP_4XX, "Client error"
    elif httpx.codes.is_server_error(status_code):
        error_class, label = FetchErrorClass.HTTP_5XX, "Server error"
    else:
        error_class, label = FetchErrorClass.UNKNOWN, "Unexpected status"
    return FetchError(
        error_class=error_class,
        message=f"{label} ({status_code})",
        status_code=status_code,
    )


def read_capped(response: httpx.Response, limit: int) -> bytes:
    """Read a streamed body, giving up as soon as it passes ``limit`` bytes.

    Raises:
        ResponseSizeExceededError: If the body is larger than the limit.
    """
    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_bytes(chunk_size=STREAM_CHUNK_BYTES):
        size += len(chunk)
        if size > limit:
            msg = f"Response body exceeds {limit} bytes"
            raise ResponseSizeExceededError(msg)
        chunks.append(chunk)
    return b"".join(chunks)


def _error_from_exception(exc: Exception) -> FetchError:
    if isinstance(exc, ResponseSizeExceededError):
        return FetchError(error_class=FetchErrorClass.RESPONSE_SIZE_EXCEEDED, message=str(exc))
    if isinstance(exc, httpx.TimeoutException):
        return FetchError(
            error_class=FetchErrorClass.NETWORK_TIMEOUT, message=f"Request timed out: {exc}"
        )
    if isinstance(exc, httpx.ConnectError):
        return FetchError(
            error_class=FetchErrorClass.CONNECTION_ERROR, message=f"Connection failed: {exc}"
        )
    return FetchError(
        error_class=FetchErrorClass.UNKNOWN,
        message=f"Unexpected error: {type(exc).__name__}: {exc}",
    )


def _failed(url: str, error: FetchError, status_code: int = 0) -> FetchResult:
    return FetchResult(status_code=status_code, final_url=url, error=error)


def _seconds_left(deadline: float | None) -> float | None:
    return None if deadline is None else deadline - time.monotonic()


def _backoff_seconds(policy: RetryPolicy, attempt: int, error: FetchError) -> float:
    delay = policy.get_delay_ms(attempt) / 1000
    if error.retry_after:
        delay = max(delay, min(error.retry_after, MAX_RETRY_AFTER_SECONDS))
    return delay


class HttpFetcher:
    """GET-only client shared by all adapters of a sync cycle.

    Every attempt opens its own ``httpx.Client``, so one fetcher can serve
    many worker threads. Failures are never raised; they come back as a
    ``FetchResult`` with ``error`` set, after retries allowed by the policy
    and the caller's deadline.
    """

    def __init__(self, config: FetchConfig, run_id: str) -> None:
        """Initialize the fetcher.

        Args:
            config: Timeouts, size limit, retry policy and domain profiles.
            run_id: Run identifier for logging.
        """
        self._config = config
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch", run_id=run_id)

    @property
    def config(self) -> FetchConfig:
        """Active fetch configuration."""
        return self._config

    def fetch(
        self,
        source_id: str,
        url: str,
        extra_headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        deadline: float | None = None,
    ) -> FetchResult:
        """GET a URL, retrying transient failures.

        Args:
            source_id: Source the request is made for (metrics and logs).
            url: Target URL.
            extra_headers: Headers layered over the defaults and domain profile.
            params: Query parameters.
            deadline: ``time.monotonic()`` instant after which no attempt
                or retry is started; request timeouts shrink to fit it.

        Returns:
            Result of the last attempt.
        """
        started = time.perf_counter()
        domain = urlsplit(url).netloc
        log = self._log.bind(source_id=source_id, url=redact_url_credentials(url))
        headers = self._headers_for(domain, extra_headers)
        timeout = self._config.timeout_for(domain)
        policy = self._config.retry_policy

        attempt = 0
        while True:
            left = _seconds_left(deadline)
            if left is not None and left < MIN_REQUEST_SECONDS:
                result = _failed(
                    url,
                    FetchError(
                        error_class=FetchErrorClass.DEADLINE_EXCEEDED,
                        message="Sync deadline reached before request",
                    ),
                )
                break

            result = self._attempt(
                source_id,
                url,
                headers,
                params,
                timeout if left is None else min(timeout, left),
                log.bind(attempt=attempt),
            )
            if result.error is None or not policy.should_retry(result.error, attempt):
                break

            delay = _backoff_seconds(policy, attempt, result.error)
            left = _seconds_left(deadline)
            if left is not None and left < delay + MIN_REQUEST_SECONDS:
                log.debug("retry_skipped_deadline", attempt=attempt)
                break
            self._metrics.record_retry(source_id)
            log.debug(
                "retry_scheduled",
                attempt=attempt + 1,
                delay_s=round(delay, 3),
                error_class=result.error.error_class.value,
            )
            time.sleep(delay)
            attempt += 1

        duration_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_duration(source_id, duration_ms)
        if result.error is not None:
            self._metrics.record_failure(source_id, result.error.error_class)

        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            attempts=attempt + 1,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def _headers_for(
        self, domain: str, extra_headers: dict[str, str] | None
    ) -> dict[str, str]:
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "*/*",
            "Accept-Encoding": "gzip, deflate",
        }
        headers.update(self._config.headers_for(domain))
        headers.update(extra_headers or {})
        return headers

    def _attempt(
        self,
        source_id: str,
        url: str,
        headers: dict[str, str],
        params: dict[str, str] | None,
        timeout: float,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        """Perform one GET and classify its outcome."""
        log.debug("http_request", headers=redact_headers(headers))
        limit = self._config.max_response_size_bytes
        try:
            with (
                httpx.Client(timeout=timeout, follow_redirects=True) as client,
                client.stream("GET", url, headers=headers, params=params) as response,
            ):
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > limit:
                    return _failed(
                        str(response.url),
                        FetchError(
                            error_class=FetchErrorClass.RESPONSE_SIZE_EXCEEDED,
                            message=f"Declared size {declared} exceeds {limit} bytes",
                            status_code=response.status_code,
                        ),
                        status_code=response.status_code,
                    )
                body = read_capped(response, limit)
                self._metrics.record_request(source_id, response.status_code, len(body))
                return FetchResult(
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    body_bytes=body,
                    error=classify_status(response.status_code, response.headers),
                )
        except Exception as e:  # noqa: BLE001
            return _failed(url, _error_from_exception(e))
