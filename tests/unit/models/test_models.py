"""Unit tests for the dataclasses in models.py.

Test coverage includes:

1. ShortURLModel defaults, immutability and liveness
2. ValidationResult / VerificationResult consistency (never partially populated)
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, UTC

import pytest
from freezegun import freeze_time

from paidshortener.models import ShortURLModel, PaymentClaim, VerifiedClaim, ValidationResult, VerificationResult


# -------------------------------------------------
# 1. ShortURLModel
# -------------------------------------------------

def test_short_url_model_defaults():
    short_url = ShortURLModel(target='https://example.com/', shortcode='abcD1234')

    assert short_url.created_at is None
    assert short_url.is_active is True
    assert short_url.expires_at is None
    assert short_url.payment_tx_hash is None
    assert short_url.payer_address is None
    assert short_url.hits == 0


def test_short_url_model_is_immutable():
    short_url = ShortURLModel(target='https://example.com/', shortcode='abcD1234')
    with pytest.raises(FrozenInstanceError):
        short_url.shortcode = 'other000'


@freeze_time('2026-10-15')
@pytest.mark.parametrize(
    'is_active, expires_at, expected',
    [
        (True, None, True),
        (True, datetime(2026, 10, 16, tzinfo=UTC), True),
        (True, datetime(2026, 10, 15, tzinfo=UTC), False),
        (True, datetime(2026, 10, 14, tzinfo=UTC), False),
        (False, None, False),
    ],
)
def test_short_url_model_is_live(is_active, expires_at, expected):
    short_url = ShortURLModel(target='https://example.com/', shortcode='abcD1234', is_active=is_active, expires_at=expires_at)
    assert short_url.is_live() is expected


def test_short_url_model_is_live_at_given_time():
    expires_at = datetime(2026, 10, 15, tzinfo=UTC)
    short_url = ShortURLModel(target='https://example.com/', shortcode='abcD1234', expires_at=expires_at)

    assert short_url.is_live(now=expires_at - timedelta(seconds=1)) is True
    assert short_url.is_live(now=expires_at) is False


# -------------------------------------------------
# 2. Result objects
# -------------------------------------------------

def test_validation_result_constructors():
    assert ValidationResult.ok('https://example.com/') == ValidationResult(is_valid=True, normalized_url='https://example.com/')
    failed = ValidationResult.fail('URL_EMPTY', 'URL cannot be empty')
    assert (failed.is_valid, failed.code, failed.message) == (False, 'URL_EMPTY', 'URL cannot be empty')


@pytest.mark.parametrize(
    'kwargs',
    [
        {'is_valid': True},
        {'is_valid': True, 'normalized_url': 'https://example.com/', 'code': 'URL_EMPTY'},
        {'is_valid': False},
        {'is_valid': False, 'normalized_url': 'https://example.com/', 'code': 'URL_EMPTY'},
    ],
)
def test_validation_result_is_never_partially_populated(kwargs):
    with pytest.raises(ValueError):
        ValidationResult(**kwargs)


def test_verification_result_is_never_partially_populated():
    claim = PaymentClaim(tx_hash='0x01', payer_address='0x02', amount=1, asset='0x03', network='base-sepolia')
    verified = VerifiedClaim(claim=claim, verified_at=datetime(2026, 10, 15, tzinfo=UTC))

    assert VerificationResult.ok(verified).verified is verified
    assert VerificationResult.fail('AMOUNT_TOO_LOW', 'too low').verified is None
    with pytest.raises(ValueError):
        VerificationResult(is_valid=True)
    with pytest.raises(ValueError):
        VerificationResult(is_valid=False, verified=verified, code='AMOUNT_TOO_LOW')
