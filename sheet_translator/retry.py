"""Retry and rate-limit backoff around a single provider call."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from sheet_translator.providers.base import RateLimitError, ResponseParseError
from sheet_translator.run_logging import RunLogger

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 3.0
DEFAULT_MAX_RATE_LIMIT_RETRIES = 50


class RetryExhaustedError(Exception):
    """Raised when every attempt of a call failed."""

    def __init__(self, message: str, attempts: int, last_error: BaseException):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class RateLimitCeilingError(Exception):
    """Raised when a call stays rate limited past the configured ceiling."""

    def __init__(self, message: str, rate_limit_retries: int, waited: float):
        super().__init__(message)
        self.rate_limit_retries = rate_limit_retries
        self.waited = waited


async def call_with_retry(
    call: Callable[[], Awaitable[Any]],
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    max_rate_limit_retries: int = DEFAULT_MAX_RATE_LIMIT_RETRIES,
    max_rate_limit_wait: Optional[float] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    label: str = "",
    run_logger: Optional[RunLogger] = None
) -> Any:
    """
    Await call() with bounded retries and cooperative rate-limit backoff.

    Rate-limit signals sleep for the provider-supplied duration and re-issue
    the call without using up the retry budget. Every other exception
    counts as a failed attempt; attempts are separated by retry_delay.

    Args:
        call: Zero-argument coroutine function issuing the provider call
        retries: Maximum attempts for non rate-limit failures (default: 3)
        retry_delay: Seconds between failed attempts (default: 3.0)
        max_rate_limit_retries: Rate-limit signals tolerated per call (default: 50)
        max_rate_limit_wait: Optional cap on total seconds spent in rate-limit sleeps
        sleep: Sleep coroutine (injectable for tests)
        label: Name used in log lines (usually the localization key)
        run_logger: Optional run logger receiving retry records

    Returns:
        Whatever call() returns

    Raises:
        RetryExhaustedError: After `retries` failed attempts
        RateLimitCeilingError: When rate limiting outlasts the ceiling
    """
    if retries < 1:
        raise ValueError(f"retries must be at least 1, got {retries}")

    attempt = 0
    rate_limit_retries = 0
    rate_limit_waited = 0.0

    while True:
        try:
            return await call()

        except RateLimitError as e:
            wait_time = max(float(e.retry_after), 0.0)
            rate_limit_retries += 1

            over_count = rate_limit_retries > max_rate_limit_retries
            over_wait = (
                max_rate_limit_wait is not None
                and rate_limit_waited + wait_time > max_rate_limit_wait
            )
            if over_count or over_wait:
                raise RateLimitCeilingError(
                    f"[{label}] still rate limited after {rate_limit_retries - 1} waits "
                    f"({rate_limit_waited:.1f}s)",
                    rate_limit_retries=rate_limit_retries - 1,
                    waited=rate_limit_waited
                ) from e

            logger.warning(
                "[%s] rate limited, waiting %.1fs (signal %d)",
                label, wait_time, rate_limit_retries
            )
            if run_logger:
                run_logger.log_retry(label, "rate_limit", str(e), rate_limit_retries, wait_time)

            await sleep(wait_time)
            rate_limit_waited += wait_time

        except Exception as e:
            attempt += 1
            logger.warning("[%s] attempt %d/%d failed: %s", label, attempt, retries, e)
            raw = e.raw if isinstance(e, ResponseParseError) else None
            if raw is not None:
                logger.info("[%s] raw response: %s", label, raw)
            if run_logger:
                run_logger.log_retry(
                    label, type(e).__name__, str(e), attempt, retry_delay,
                    context={"raw": raw} if raw is not None else None
                )

            if attempt >= retries:
                raise RetryExhaustedError(
                    f"[{label}] all {retries} attempts failed: {e}",
                    attempts=attempt,
                    last_error=e
                ) from e

            await sleep(retry_delay)
