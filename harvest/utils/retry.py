# harvest/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from harvest.utils.logging import get_logger

logger = get_logger(__name__)

ATTEMPTS = 3


def _transport_retry(errors, base: float, cap: float):
    # only transport failures are retried; API and domain errors surface at once
    return retry(
        reraise=True,
        stop=stop_after_attempt(ATTEMPTS),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=retry_if_exception_type(errors),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def http_retry(errors=requests.RequestException):
    """Retry a call to the Harvest API on transport errors (by default any of them)."""
    return _transport_retry(errors, base=0.3, cap=3)


def redis_retry():
    """Retry a Redis command while the server is unreachable."""
    return _transport_retry(redis.RedisError, base=0.2, cap=2)
