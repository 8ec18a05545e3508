"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a ShortURLModel is not found in the data store.

    ShortURLAlreadyExistsError:
        Raised when inserting a ShortURLModel whose shortcode is taken. This is the
        data store's uniqueness violation: callers may retry with another shortcode.

    DataStoreError:
        Raised when the data store is unavailable (connection issues, timeouts, OOM, etc.).
        Never retried by the DAO.

Example:
    >>> from paidshortener.dao.exceptions import ShortURLAlreadyExistsError
    >>> raise ShortURLAlreadyExistsError("Short URL with code 'abcD1234' already exists.")
    Traceback (most recent call last):
        ...
    paidshortener.dao.exceptions.ShortURLAlreadyExistsError: Short URL with code 'abcD1234' already exists.
"""

from paidshortener.exceptions import PaidShortenerError


class DAOError(PaidShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a ShortURLModel is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'


class ShortURLAlreadyExistsError(DAOError):
    """Raised when inserting a ShortURLModel that already exists in the data store."""

    error_code = 'dao:short_url_already_exists_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'
