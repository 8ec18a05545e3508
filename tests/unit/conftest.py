import threading
from dataclasses import replace
from datetime import datetime, UTC

import pytest

from paidshortener.models import ShortURLModel, PaymentClaim
from paidshortener.policies import UrlPolicy, PaymentPolicy
from paidshortener.dao.base import ShortURLBaseDAO
from paidshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


TX_HASH = '0x' + 'ab' * 32
PAYER_ADDRESS = '0x' + '12' * 20
USDC_BASE_SEPOLIA = '0x036CbD53842c5426634e7929541eC2318f3dCF7e'


class InMemoryShortURLDAO(ShortURLBaseDAO):
    """Thread-safe dict-backed DAO: insert is atomic, like the Redis transaction"""

    def __init__(self):
        self.records: dict[str, ShortURLModel] = {}
        self.lock = threading.Lock()
        self.exists_calls = 0
        self.insert_calls = 0

    def exists(self, shortcode: str, **kwargs) -> bool:
        with self.lock:
            self.exists_calls += 1
            return shortcode in self.records

    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        with self.lock:
            self.insert_calls += 1
            if short_url.shortcode in self.records:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            record = replace(short_url, created_at=short_url.created_at or datetime.now(UTC))
            self.records[short_url.shortcode] = record
            return record

    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        with self.lock:
            if shortcode not in self.records:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
            return self.records[shortcode]

    def hit(self, shortcode: str, **kwargs) -> int:
        with self.lock:
            record = self.records.get(shortcode)
            if record is None or not record.is_active:
                raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
            self.records[shortcode] = replace(record, hits=record.hits + 1)
            return record.hits + 1

    def deactivate(self, shortcode: str, **kwargs) -> bool:
        with self.lock:
            if shortcode not in self.records:
                return False
            self.records[shortcode] = replace(self.records[shortcode], is_active=False)
            return True

    def by_payer(self, payer_address: str, limit: int = 50, **kwargs) -> list[ShortURLModel]:
        with self.lock:
            matches = [r for r in self.records.values() if (r.payer_address or '').lower() == payer_address.lower()]
        return sorted(matches, key=lambda r: r.created_at, reverse=True)[:limit]


@pytest.fixture
def memory_dao() -> InMemoryShortURLDAO:
    return InMemoryShortURLDAO()


@pytest.fixture
def url_policy() -> UrlPolicy:
    return UrlPolicy()


@pytest.fixture
def payment_policy() -> PaymentPolicy:
    return PaymentPolicy(network='base-sepolia', asset=USDC_BASE_SEPOLIA, min_amount=1000, max_amount=10000)


@pytest.fixture
def claim() -> PaymentClaim:
    return PaymentClaim(
        tx_hash=TX_HASH,
        payer_address=PAYER_ADDRESS,
        amount=5000,
        asset=USDC_BASE_SEPOLIA,
        network='base-sepolia',
        observed_at=datetime(2026, 10, 15, tzinfo=UTC),
    )
