# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from storefront.utils.settings import RETRY_ATTEMPTS


def _backoff(exceptions, base: float, cap: float):
    return retry(
        reraise=True,
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=base, min=base, max=cap),
        retry=retry_if_exception_type(exceptions),
    )


#tylko bledy transportu, odpowiedz 4xx/5xx nie jest ponawiana
def http_retry():
    return _backoff((requests.ConnectionError, requests.Timeout), base=0.3, cap=3)


#odczyt/zapis koszyka w redisie
def redis_retry():
    return _backoff(redis.RedisError, base=0.2, cap=2)
