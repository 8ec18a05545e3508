from paidshortener.dao.redis.redis_key_schema import RedisKeySchema
from paidshortener.dao.redis.short_url_redis_dao import ShortURLRedisDAO
from paidshortener.dao.redis.mixins import RedisClientMixin


__all__ = [
    'RedisKeySchema',
    'ShortURLRedisDAO',
    'RedisClientMixin',
]
