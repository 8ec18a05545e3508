"""Redis client setup shared by the Redis-backed DAOs

Connection parameters come from the Lambda's AppConfig 'redis' section, each key
prefixed with 'redis_' by the handler. Either discrete parameters:

    {"host": "redis.internal", "port": 6379, "db": 0, "username": "default",
     "password": "...", "ssl": true, "socket_timeout": 0.5}

or a single connection URL (rediss:// for TLS):

    {"url": "rediss://default:<password>@redis.internal:6380/0"}

Classes:
    RedisClientMixin: connect (or adopt a client), namespace keys, PING on init.

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO(redis_url='redis://localhost:6379/0', prefix='paidshortener:local')
    >>> dao.keys.link_key('abcD1234')
    'paidshortener:local:links:abcD1234'
"""

from typing import Optional

import redis

from paidshortener.dao.redis.redis_key_schema import RedisKeySchema
from paidshortener.dao.redis.helpers import redis_address, REDIS_CONNECTIVITY_ERRORS
from paidshortener.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Redis connection and key namespace for Redis-backed DAOs

    Responses are always decoded: the DAOs read and write str, never bytes.

    Attributes:
        redis (redis.Redis):
            Client shared by all operations of the DAO.
        keys (RedisKeySchema):
            Builder of namespaced key names.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_ssl: Optional[bool] = False,
        redis_socket_timeout: Optional[float] = None,
        redis_url: Optional[str] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Adopt `redis_client`, or connect with the given parameters, then PING Redis

        `redis_url` takes precedence over host/port/db/username/password/ssl.
        `prefix` namespaces every key, e.g. 'paidshortener:prod'.

        Raises:
            DataStoreError:
                If Redis doesn't answer the PING.
        """
        if redis_client is None:
            if redis_url:
                redis_client = redis.Redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_timeout=redis_socket_timeout,
                )
            else:
                redis_client = redis.Redis(
                    host=redis_host,
                    port=int(redis_port),
                    db=int(redis_db),
                    username=redis_username,
                    password=redis_password,
                    ssl=bool(redis_ssl),
                    socket_timeout=redis_socket_timeout,
                    decode_responses=True,
                )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered, False if not (only when raise_error=False).

        Raises:
            DataStoreError:
                If Redis is unreachable and raise_error=True.
        """
        try:
            self.redis.ping()
        except REDIS_CONNECTIVITY_ERRORS as e:
            if not raise_error:
                return False
            raise DataStoreError(f"Can't connect to Redis at {redis_address(self.redis)}.") from e
        return True
