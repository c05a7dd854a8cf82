# printcart/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from printcart.utils.logging import get_logger
from printcart.utils.settings import RETRY_ATTEMPTS

logger = get_logger(__name__)


def is_transient_http_error(exc: BaseException) -> bool:
    """Connection errors, timeouts and 5xx answers; a 4xx will not change on retry."""
    if not isinstance(exc, requests.RequestException):
        return False
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status is None or status >= 500


def _policy(condition, base: float, cap: float, attempts: int | None):
    #the last error is re-raised to the caller, not wrapped in RetryError
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=condition,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def http_retry(attempts: int | None = None):
    return _policy(retry_if_exception(is_transient_http_error), 0.3, 3, attempts)


def redis_retry(attempts: int | None = None):
    return _policy(retry_if_exception_type(redis.RedisError), 0.2, 2, attempts)
