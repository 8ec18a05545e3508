"""Shortcode generation utility

This module provides helpers for generating short, unpredictable URL slugs from a
cryptographically secure random source, and for checking the shape of a slug.

Functions:
    generate_shortcode(length=8) -> str:
        Generate a random Base62 shortcode suitable for use as a URL slug.

    is_valid_shortcode(shortcode, length=8) -> bool:
        Check a shortcode's length and alphabet (not whether it exists).

Example:
    >>> from paidshortener.utils import generate_shortcode, is_valid_shortcode
    >>> shortcode = generate_shortcode()
    >>> len(shortcode)
    8
    >>> is_valid_shortcode(shortcode)
    True
"""

import secrets

from paidshortener.constants import ShortCode


ALPHABET = ShortCode.ALPHABET
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits
_ALPHABET_SET = frozenset(ALPHABET)


def generate_shortcode(length: int = ShortCode.LENGTH) -> str:
    """Generate a random, fixed-length Base62 shortcode.

    Draws `length` bytes from the operating system's CSPRNG and maps each byte
    onto the Base62 alphabet via modulo reduction. Nothing is counted or cached,
    so two calls may (rarely) return the same code: uniqueness is enforced by the
    caller against the data store, not here.

    Args:
        length (int, optional):
            Length of the resulting shortcode. Defaults to 8.

    Returns:
        str: A random alphanumeric shortcode.

    Example:
        >>> generate_shortcode()
        'Gh71WPTa'

    NOTE:
        - 256 % 62 != 0, so modulo reduction slightly favours the first 8 symbols
          of the alphabet. The bias doesn't make codes guessable in practice.
        - The alphabet is Base62 safe: [a-zA-Z0-9].
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    return ''.join(ALPHABET[byte % BASE] for byte in secrets.token_bytes(length))


def is_valid_shortcode(shortcode: str, length: int = ShortCode.LENGTH) -> bool:
    """Check that a shortcode has the expected length and only Base62 characters

    This is a cheap structural check. It says nothing about whether the shortcode
    denotes an existing short URL.

    Example:
        >>> is_valid_shortcode('abcD1234')
        True
        >>> is_valid_shortcode('abc-1234')
        False
    """
    return isinstance(shortcode, str) and len(shortcode) == length and all(char in _ALPHABET_SET for char in shortcode)
