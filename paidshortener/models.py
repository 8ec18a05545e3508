from dataclasses import dataclass
from datetime import datetime, UTC


# fmt: off
@dataclass(frozen=True)
class ShortURLModel:
    target: str                           # Canonical original URL
    shortcode: str                        # Unique short identifier of shortened URL
    created_at: datetime | None = None    # Creation timestamp (UTC)
    is_active: bool = True                # False once the record is soft-retired
    expires_at: datetime | None = None    # Optional expiration timestamp
    payment_tx_hash: str | None = None    # Transaction hash of the payment which bought this link
    payer_address: str | None = None      # Address of the payer
    hits: int = 0                         # Access counter (only ever increases)

    def is_live(self, now: datetime | None = None) -> bool:
        """True if the short URL may still be resolved (active and not expired)"""
        now = now or datetime.now(UTC)
        return self.is_active and (self.expires_at is None or self.expires_at > now)


@dataclass(frozen=True)
class PaymentClaim:
    tx_hash: str | None                   # 32-byte transaction hash as 0x-prefixed hex
    payer_address: str | None             # 20-byte payer address as 0x-prefixed hex
    amount: int | None                    # Amount in the asset's atomic units
    asset: str | None                     # Asset identifier (token contract address)
    network: str | None                   # Network identifier, e.g. 'base-sepolia'
    observed_at: datetime | None = None   # When the claim was extracted from the request


@dataclass(frozen=True)
class VerifiedClaim:
    claim: PaymentClaim                   # The claim which passed the payment policy
    verified_at: datetime                 # Verification timestamp (UTC)
# fmt: on


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a URL against the URL policy.

    Either valid with a normalized URL, or invalid with a reason code and message.
    """

    is_valid: bool
    normalized_url: str | None = None
    code: str | None = None
    message: str | None = None

    def __post_init__(self):
        if self.is_valid and (self.normalized_url is None or self.code is not None):
            raise ValueError('A valid result must carry a normalized URL and no reason code.')
        if not self.is_valid and (self.code is None or self.normalized_url is not None):
            raise ValueError('An invalid result must carry a reason code and no normalized URL.')

    @classmethod
    def ok(cls, normalized_url: str) -> 'ValidationResult':
        return cls(is_valid=True, normalized_url=normalized_url)

    @classmethod
    def fail(cls, code: str, message: str) -> 'ValidationResult':
        return cls(is_valid=False, code=code, message=message)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying a payment claim against the payment policy.

    Either valid with a verified claim, or invalid with a reason code and message.
    """

    is_valid: bool
    verified: VerifiedClaim | None = None
    code: str | None = None
    message: str | None = None

    def __post_init__(self):
        if self.is_valid and (self.verified is None or self.code is not None):
            raise ValueError('A valid result must carry a verified claim and no reason code.')
        if not self.is_valid and (self.code is None or self.verified is not None):
            raise ValueError('An invalid result must carry a reason code and no verified claim.')

    @classmethod
    def ok(cls, verified: VerifiedClaim) -> 'VerificationResult':
        return cls(is_valid=True, verified=verified)

    @classmethod
    def fail(cls, code: str, message: str) -> 'VerificationResult':
        return cls(is_valid=False, code=code, message=message)
