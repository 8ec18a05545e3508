"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Provide an interface for inserting and retrieving ShortURLModel objects.
    - Enforce shortcode uniqueness at insert time and report violations with a
      dedicated exception (ShortURLAlreadyExistsError), distinct from outages.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from paidshortener.models import ShortURLModel
        >>> from paidshortener.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)

        >>> short_url = ShortURLModel(
        ...     target="https://example.com/blog/article-123",
        ...     shortcode="a1b2c3D4",
        ... )
        >>> dao.exists("a1b2c3D4")
        False
        >>> dao.insert(short_url)
        ShortURLModel(target='https://example.com/blog/article-123', shortcode='a1b2c3D4', ...)

        >>> dao.hit("a1b2c3D4")
        1
"""

from abc import ABC, abstractmethod

from paidshortener.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        exists(shortcode: str, **kwargs) -> bool:
            Check whether a shortcode is taken (active or retired).

        insert(short_url: ShortURLModel, **kwargs) -> ShortURLModel:
            Atomically insert a new ShortURLModel into the data store.
            Raises ShortURLAlreadyExistsError if the shortcode is taken.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve a ShortURLModel (active or retired) by shortcode.
            Raises ShortURLNotFoundError if the entry does not exist.

        hit(shortcode: str, **kwargs) -> int:
            Increment the access counter of an active short URL.
            Raises ShortURLNotFoundError if the entry doesn't exist or is retired.

        deactivate(shortcode: str, **kwargs) -> bool:
            Soft-retire a short URL.

        by_payer(payer_address: str, limit: int = 50, **kwargs) -> list[ShortURLModel]:
            List the short URLs bought by a payer, newest first.

        All methods raise DataStoreError on connection or read/write failure.

    NOTE:
        - Records are never physically deleted: retirement flips `is_active`.
          A retired shortcode stays taken.
    """

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a shortcode is already taken.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        """Insert a new ShortURLModel into the data store.

        The insert is all-or-nothing: either every field of the record is
        persisted, or nothing is.

        Args:
            short_url (ShortURLModel):
                The ShortURLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLModel: the persisted record

        Raises:
            ShortURLAlreadyExistsError:
                If a ShortURLModel with the same short code already exists,
                including one inserted concurrently by another writer.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a ShortURLModel from the data store by its short code.

        Raises:
            ShortURLNotFoundError:
                If no ShortURLModel with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def hit(self, shortcode: str, **kwargs) -> int:
        """Record one access of an active short URL.

        Returns:
            int: The access counter after incrementing.

        Raises:
            ShortURLNotFoundError:
                If the short URL doesn't exist or has been retired.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def deactivate(self, shortcode: str, **kwargs) -> bool:
        """Soft-retire a short URL.

        Returns:
            bool: True if a record was retired, False if no such record exists.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def by_payer(self, payer_address: str, limit: int = 50, **kwargs) -> list[ShortURLModel]:
        """List the short URLs paid for by a payer address, newest first.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
