"""Payment claim verification against a PaymentPolicy

The verifier enforces *policy bounds* on a payment claim. It does not prove that the
payment happened: signature checks and settlement are done upstream by the payment
protocol layer, whose output (the claim) is trusted to be authentic.

Checks, in order:
    MISSING_FIELDS        - tx hash, payer address, amount, asset or network is absent
    INVALID_NETWORK       - network differs from the policy network
    INVALID_ASSET         - asset differs (case-insensitively) from the policy asset
    AMOUNT_TOO_LOW/HIGH   - amount outside the inclusive [min_amount, max_amount] range
    INVALID_TX_HASH       - tx hash isn't a 0x-prefixed 32-byte hex string
    INVALID_PAYER_ADDRESS - payer isn't a 0x-prefixed 20-byte hex string

Example:
    >>> from paidshortener.models import PaymentClaim
    >>> claim = PaymentClaim(
    ...     tx_hash='0x' + 'ab' * 32,
    ...     payer_address='0x' + '12' * 20,
    ...     amount=5000,
    ...     asset='0x036CbD53842c5426634e7929541eC2318f3dCF7e',
    ...     network='base-sepolia',
    ... )
    >>> verify_payment(claim, PaymentPolicy()).is_valid
    True
"""

from datetime import datetime, UTC

from paidshortener.constants import PaymentReason
from paidshortener.models import PaymentClaim, VerifiedClaim, VerificationResult
from paidshortener.policies import PaymentPolicy, HEX_ADDRESS_PATTERN, HEX_TX_HASH_PATTERN


REQUIRED_FIELDS = ('tx_hash', 'payer_address', 'amount', 'asset', 'network')


def verify_payment(claim: PaymentClaim | None, policy: PaymentPolicy) -> VerificationResult:
    """Verify a payment claim against the payment policy

    Args:
        claim (PaymentClaim | None):
            Claim decoded from the request. None is reported as PAYMENT_REQUIRED.
        policy (PaymentPolicy):
            Network, asset and amount bounds.

    Returns:
        VerificationResult:
            Valid with a VerifiedClaim stamped with the verification time, or
            invalid with a PaymentReason code and a human-readable message.
    """
    if claim is None:
        return VerificationResult.fail(PaymentReason.PAYMENT_REQUIRED, 'No payment data provided')

    missing = [name for name in REQUIRED_FIELDS if getattr(claim, name) in (None, '')]
    if missing:
        return VerificationResult.fail(
            PaymentReason.MISSING_FIELDS,
            f'Missing required payment fields: {", ".join(missing)}',
        )

    if claim.network != policy.network:
        return VerificationResult.fail(
            PaymentReason.INVALID_NETWORK,
            f'Invalid network. Expected {policy.network}, got {claim.network}',
        )

    if claim.asset.lower() != policy.asset.lower():
        return VerificationResult.fail(
            PaymentReason.INVALID_ASSET,
            f'Invalid asset. Expected {policy.asset}, got {claim.asset}',
        )

    if claim.amount < policy.min_amount:
        return VerificationResult.fail(
            PaymentReason.AMOUNT_TOO_LOW,
            f'Payment amount too low. Minimum: {policy.min_amount}, received: {claim.amount}',
        )
    if claim.amount > policy.max_amount:
        return VerificationResult.fail(
            PaymentReason.AMOUNT_TOO_HIGH,
            f'Payment amount too high. Maximum: {policy.max_amount}, received: {claim.amount}',
        )

    if not HEX_TX_HASH_PATTERN.fullmatch(claim.tx_hash):
        return VerificationResult.fail(PaymentReason.INVALID_TX_HASH, 'Invalid transaction hash format')
    if not HEX_ADDRESS_PATTERN.fullmatch(claim.payer_address):
        return VerificationResult.fail(PaymentReason.INVALID_PAYER_ADDRESS, 'Invalid payer address format')

    return VerificationResult.ok(VerifiedClaim(claim=claim, verified_at=datetime.now(UTC)))


class PaymentVerifier:
    """Payment claim verifier bound to a single PaymentPolicy."""

    def __init__(self, policy: PaymentPolicy):
        self.policy = policy

    def verify(self, claim: PaymentClaim | None) -> VerificationResult:
        return verify_payment(claim, self.policy)
