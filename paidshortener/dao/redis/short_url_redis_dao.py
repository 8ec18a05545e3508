"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for CRUD-like
operations with ShortURLModel instances.

Data layout:
    <prefix>:links:<shortcode>             HASH  target, created_at, is_active, expires_at,
                                                 payment_tx_hash, payer_address, hits
    <prefix>:payers:<address>:links        ZSET  shortcodes scored by creation time

Responsibilities:
    - Insert short URLs atomically, enforcing shortcode uniqueness;
    - Retrieve short URLs and list them per payer;
    - Count accesses of active short URLs;
    - Soft-retire short URLs;
    - Provide defensive error handling and raise appropriate DAO exceptions.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from paidshortener.models import ShortURLModel
    >>> from paidshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")

    >>> short_url = ShortURLModel(
    ...     target="https://example.com/page",
    ...     shortcode="abcD1234"
    ... )
    >>> dao.insert(short_url).created_at
    datetime.datetime(...)

    >>> dao.hit("abcD1234")
    1
"""

from dataclasses import replace
from datetime import datetime, UTC

import redis
from beartype import beartype

from paidshortener.models import ShortURLModel
from paidshortener.dao.base import ShortURLBaseDAO
from paidshortener.dao.redis.mixins import RedisClientMixin
from paidshortener.dao.redis.helpers import handle_redis_connection_error
from paidshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


def _to_hash(short_url: ShortURLModel) -> dict[str, str | int]:
    # Redis hashes can't hold None: absent optionals are stored as ''
    # fmt: off
    return {
        'target': short_url.target,
        'created_at': short_url.created_at.isoformat() if short_url.created_at else '',
        'is_active': int(short_url.is_active),
        'expires_at': short_url.expires_at.isoformat() if short_url.expires_at else '',
        'payment_tx_hash': short_url.payment_tx_hash or '',
        'payer_address': short_url.payer_address or '',
        'hits': short_url.hits,
    }
    # fmt: on


def _from_hash(shortcode: str, data: dict[str, str]) -> ShortURLModel:
    created_at = data.get('created_at')
    expires_at = data.get('expires_at')
    return ShortURLModel(
        target=data['target'],
        shortcode=shortcode,
        created_at=datetime.fromisoformat(created_at) if created_at else None,
        is_active=data.get('is_active', '1') == '1',
        expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        payment_tx_hash=data.get('payment_tx_hash') or None,
        payer_address=data.get('payer_address') or None,
        hits=int(data.get('hits') or 0),
    )


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    The DAO expects a client created with decode_responses=True.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        exists(shortcode: str, **kwargs) -> bool
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLModel
        get(shortcode: str, **kwargs) -> ShortURLModel
        hit(shortcode: str, **kwargs) -> int
        deactivate(shortcode: str, **kwargs) -> bool
        by_payer(payer_address: str, limit: int = 50, **kwargs) -> list[ShortURLModel]

        All methods raise DataStoreError on connectivity issues with Redis.
    """

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a shortcode is taken

        Example:
            >>> dao.exists('abcD1234')
            False
        """
        return bool(self.redis.exists(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        """Insert a short URL mapping into Redis

        The insertion runs as an optimistic Redis transaction (WATCH/MULTI/EXEC):

        (writer 1): WATCH <app>:links:<shortcode>
                    EXISTS <app>:links:<shortcode>  => 0
                    ... interruption
        (writer 2): HSET <app>:links:<shortcode> ...  (same shortcode)
        (writer 1): MULTI / HSET ... / EXEC           => aborted (WatchError)

        So two writers racing for one shortcode can never both succeed: the loser
        gets ShortURLAlreadyExistsError, exactly as if EXISTS had returned 1.
        The record hash and the payer index entry are written in the same EXEC.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL mapping.
                `created_at` defaults to the current time.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel: the persisted record

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        link_key = self.keys.link_key(short_url.shortcode)
        record = replace(short_url, created_at=short_url.created_at or datetime.now(UTC))

        with self.redis.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(link_key)
                if pipe.exists(link_key):
                    raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")

                pipe.multi()
                pipe.hset(link_key, mapping=_to_hash(record))
                if record.payer_address:
                    # fmt: off
                    pipe.zadd(self.keys.payer_links_key(record.payer_address),
                              {record.shortcode: record.created_at.timestamp()})
                    # fmt: on
                pipe.execute()
            except redis.exceptions.WatchError as e:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.") from e

        return record

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL mapping by shortcode

        Retired records are returned too (with is_active=False).

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get('abcD1234')
            ShortURLModel(target='https://example.com', shortcode='abcD1234', ...)
        """
        data = self.redis.hgetall(self.keys.link_key(shortcode))
        if not data:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return _from_hash(shortcode, data)

    @handle_redis_connection_error
    @beartype
    def hit(self, shortcode: str, **kwargs) -> int:
        """Increment the access counter of an active short URL

        NOTE: the check and the increment are two round trips. Records are never
              deleted, so HINCRBY can't recreate a vanished hash. A record retired
              in between gets one last access counted, which is harmless.

        Return:
            int:
                access counter after the increment.

        Raises:
            ShortURLNotFoundError:
                If no active short URL with the given short code exists.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.hit('abcD1234')
            42
        """
        link_key = self.keys.link_key(shortcode)

        is_active = self.redis.hget(link_key, 'is_active')
        if is_active is None or is_active == '0':
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        return self.redis.hincrby(link_key, 'hits', 1)

    @handle_redis_connection_error
    @beartype
    def deactivate(self, shortcode: str, **kwargs) -> bool:
        """Soft-retire a short URL (the shortcode stays taken)

        Example:
            >>> dao.deactivate('abcD1234')
            True
        """
        link_key = self.keys.link_key(shortcode)
        if not self.redis.exists(link_key):
            return False
        self.redis.hset(link_key, 'is_active', 0)
        return True

    @handle_redis_connection_error
    @beartype
    def by_payer(self, payer_address: str, limit: int = 50, **kwargs) -> list[ShortURLModel]:
        """List the short URLs paid for by a payer address, newest first

        Example:
            >>> [url.shortcode for url in dao.by_payer('0x12...')]
            ['abcD1234', 'Gh71WPTa']
        """
        if limit <= 0:
            return []

        shortcodes = self.redis.zrevrange(self.keys.payer_links_key(payer_address), 0, limit - 1)
        if not shortcodes:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for shortcode in shortcodes:
                pipe.hgetall(self.keys.link_key(shortcode))
            hashes = pipe.execute()

        return [_from_hash(shortcode, data) for shortcode, data in zip(shortcodes, hashes) if data]
