# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, wait_fixed, retry_if_exception_type
from redis.exceptions import RedisError

from app.domain.errors import ConflictError


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(RedisError),
    )


def conflict_retry():
    # jedna ponowna proba, potem 409
    return retry(
        reraise=True,
        stop=stop_after_attempt(2),
        wait=wait_fixed(0.1),
        retry=retry_if_exception_type(ConflictError),
    )
