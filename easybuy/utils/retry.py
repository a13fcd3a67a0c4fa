# easybuy/utils/retry.py
from tenacity import (
    retry,
    Retrying,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
    retry_if_exception_type,
    retry_if_result,
)
import requests
import redis


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_polling(wait_seconds: float) -> Retrying:
    """
    Polls a lock acquire call while it returns False.
    After wait_seconds tenacity raises RetryError (no reraise, the last result is False).
    """
    return Retrying(
        stop=stop_after_delay(wait_seconds),
        wait=wait_fixed(0.05),
        retry=retry_if_result(lambda acquired: not acquired),
    )
