import pytest
import redis

from paidshortener.dao.redis.helpers import handle_redis_connection_error, redis_address
from paidshortener.dao.exceptions import DataStoreError


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('Cannot connect'), redis.exceptions.TimeoutError('Timed out')])
def test_handle_redis_connection_error(redis_client: redis.Redis, error: Exception):
    class DummyDAO:
        def __init__(self):
            self.redis = redis_client

        @handle_redis_connection_error
        def fail(self):
            raise error

    dao = DummyDAO()

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis.test:6379/0."):
        dao.fail()


def test_handle_redis_connection_error_passes_other_errors_through(redis_client: redis.Redis):
    class DummyDAO:
        def __init__(self):
            self.redis = redis_client

        @handle_redis_connection_error
        def fail(self):
            raise redis.exceptions.ResponseError('WRONGTYPE')

    with pytest.raises(redis.exceptions.ResponseError):
        DummyDAO().fail()


def test_redis_address_leaves_out_credentials(redis_client: redis.Redis):
    redis_client.connection_pool.connection_kwargs.update(username='default', password='hunter2')

    assert redis_address(redis_client) == 'redis.test:6379/0'
