import asyncio
import random
from collections.abc import Callable
from dataclasses import dataclass

import httpx
import structlog

logger = structlog.get_logger(__name__)

_client: httpx.AsyncClient | None = None


@dataclass(frozen=True)
class RetryPolicy:
    """Which failures are retried and how long to wait between attempts."""

    max_attempts: int = 3
    base_delay: float = 2.0
    jitter_ratio: float = 0.25
    retryable_status_codes: frozenset = frozenset({429, 500, 502, 503, 504})

    def backoff(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    def with_jitter(self, delay: float) -> float:
        return delay + random.uniform(0, delay * self.jitter_ratio)


DEFAULT_RETRY_POLICY = RetryPolicy()


def init_http_client(transport: httpx.AsyncBaseTransport | None = None):
    """Create the shared client. Tests pass an ``httpx.MockTransport``."""
    global _client
    _client = httpx.AsyncClient(
        timeout=httpx.Timeout(60, connect=10),
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        transport=transport,
    )


async def close_http_client():
    global _client
    if _client:
        await _client.aclose()
        _client = None


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not initialized")
    return _client


async def http_request(
    method: str,
    url: str,
    *,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    error_handler: Callable[[httpx.Response], None] | None = None,
    retry_delay_parser: Callable[[httpx.Response, float], float] | None = None,
    **kwargs,
) -> httpx.Response:
    """Send one request, retrying throttling, 5xx and transport timeouts.

    Any other error status, or a retryable one on the last attempt, goes to
    ``error_handler`` (or ``raise_for_status``) without another try.
    """
    client = get_http_client()
    last_attempt = policy.max_attempts - 1

    for attempt in range(policy.max_attempts):
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            if attempt == last_attempt:
                raise
            delay = policy.with_jitter(policy.backoff(attempt))
            logger.warning(
                "http_timeout_retry",
                method=method,
                path=httpx.URL(url).path,
                attempt=attempt + 1,
                retry_in=round(delay, 2),
            )
            await asyncio.sleep(delay)
            continue

        if response.is_success:
            return response

        if response.status_code not in policy.retryable_status_codes or attempt == last_attempt:
            if error_handler:
                error_handler(response)
            response.raise_for_status()

        delay = _retry_delay(response, policy, attempt, retry_delay_parser)
        logger.warning(
            "http_retry",
            method=method,
            path=response.request.url.path,
            status=response.status_code,
            attempt=attempt + 1,
            retry_in=round(delay, 2),
        )
        await asyncio.sleep(delay)

    raise RuntimeError("Request failed after all retry attempts")


def _retry_delay(
    response: httpx.Response,
    policy: RetryPolicy,
    attempt: int,
    retry_delay_parser: Callable[[httpx.Response, float], float] | None,
) -> float:
    delay = policy.backoff(attempt)
    retry_after = response.headers.get("retry-after", "")
    if retry_after.isdigit():
        delay = float(retry_after)
    if retry_delay_parser:
        delay = retry_delay_parser(response, delay)
    return policy.with_jitter(delay)
