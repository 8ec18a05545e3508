"""Unit tests for the RedisKeySchema class in redis_key_schema.py.

Test coverage includes:

1. Link key generation
2. Payer index key generation
3. Prefix behavior
4. Invalid prefix types
"""

import pytest

from paidshortener.dao.redis.redis_key_schema import RedisKeySchema


# -------------------------------
# 1. Link key generation
# -------------------------------

@pytest.mark.parametrize(
    "shortcode, expected",
    [
        ("abcD1234", "links:abcD1234"),
        ("XyZ78900", "links:XyZ78900"),
    ],
)
def test_link_key(shortcode, expected):
    """Ensure link_key() generates valid Redis keys."""
    keys = RedisKeySchema()
    assert keys.link_key(shortcode) == expected


# -------------------------------
# 2. Payer index key generation
# -------------------------------

def test_payer_links_key_is_case_insensitive():
    """Ensure checksummed and lowercase addresses share one index."""
    keys = RedisKeySchema()
    checksummed = keys.payer_links_key("0xAbCdEf0123456789aBcDeF0123456789AbCdEf01")
    lowercase = keys.payer_links_key("0xabcdef0123456789abcdef0123456789abcdef01")
    assert checksummed == lowercase == "payers:0xabcdef0123456789abcdef0123456789abcdef01:links"


# -------------------------------
# 3. Prefix behavior
# -------------------------------

@pytest.mark.parametrize(
    "prefix, expected_link_key, expected_payer_key",
    [
        ("testprefix", "testprefix:links:abcD1234", "testprefix:payers:0xab:links"),
        ("paidshortener:dev", "paidshortener:dev:links:abcD1234", "paidshortener:dev:payers:0xab:links"),
        (None, "links:abcD1234", "payers:0xab:links"),
    ],
)
def test_key_prefixing(prefix, expected_link_key, expected_payer_key):
    """Ensure keys are correctly prefixed when a prefix is provided."""
    keys = RedisKeySchema(prefix=prefix)
    assert keys.link_key("abcD1234") == expected_link_key
    assert keys.payer_links_key("0xAB") == expected_payer_key


# -------------------------------
# 4. Invalid prefix types
# -------------------------------

@pytest.mark.parametrize("prefix", [123, -1, 45.6, [], {}])
def test_invalid_prefix_type_raises_error(prefix):
    """Ensure invalid prefix types raise a TypeError."""
    with pytest.raises(TypeError):
        RedisKeySchema(prefix=prefix)
