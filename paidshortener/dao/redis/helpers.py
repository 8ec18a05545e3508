import logging
import functools
from collections.abc import Callable
from typing import TypeVar

import redis

from paidshortener.dao.exceptions import DataStoreError


__all__ = []

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable)

REDIS_CONNECTIVITY_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def redis_address(client: redis.Redis) -> str:
    """host:port/db of a Redis client (credentials left out)"""
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error(method: F) -> F:
    """Turn Redis connectivity failures of a DAO method into DataStoreError

    Connection errors and socket timeouts (see `redis_socket_timeout`) alike mean
    the data store is unavailable. Other Redis errors (e.g. WRONGTYPE) are bugs
    and pass through unchanged.

    Example:
        >>> @handle_redis_connection_error
        ... def exists(self, shortcode):
        ...     return self.redis.exists(shortcode)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except REDIS_CONNECTIVITY_ERRORS as e:
            address = redis_address(self.redis)
            logger.warning(
                'Redis unavailable.',
                extra={'operation': method.__name__, 'redisAddress': address, 'cause': type(e).__name__},
            )
            raise DataStoreError(f"Can't connect to Redis at {address}.") from e

    return wrapper
