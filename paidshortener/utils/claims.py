"""Payment claim (de)serialization for the X-PAYMENT protocol headers

Clients prove payment by sending an `X-PAYMENT` header holding base64-encoded JSON:

    {
        "txHash": "0x<64 hex chars>",
        "creatorAddress": "0x<40 hex chars>",    # "payerAddress" is accepted too
        "amount": "5000",                        # atomic units, string or integer
        "asset": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
        "network": "base-sepolia"
    }

Decoding turns the header into a PaymentClaim (or raises MalformedClaimError).
It doesn't judge the claim: absent fields are kept as None so the verifier can
report MISSING_FIELDS, and bounds are checked by the verifier alone.

Functions:
    decode_payment_header(header: str | None) -> PaymentClaim | None
    extract_payment_claim(event: LambdaEvent) -> PaymentClaim | None
    payment_response_headers(claim: PaymentClaim, settled_at: datetime) -> HttpHeaders
"""

import json
import base64
import binascii
from datetime import datetime, UTC
from typing import Any

from paidshortener.constants import Headers
from paidshortener.exceptions import MalformedClaimError
from paidshortener.models import PaymentClaim
from paidshortener.types import LambdaEvent, HttpHeaders
from paidshortener.utils.helpers import get_header


def _optional_str(payload: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise MalformedClaimError(f"Payment field '{key}' must be a string.")
        return value
    return None


def _optional_amount(payload: dict[str, Any]) -> int | None:
    value = payload.get('amount')
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise MalformedClaimError("Payment field 'amount' must be an integer amount of atomic units.")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise MalformedClaimError("Payment field 'amount' must be an integer amount of atomic units.")


def decode_payment_header(header: str | None) -> PaymentClaim | None:
    """Decode an X-PAYMENT header value into a PaymentClaim

    Args:
        header (str | None):
            Raw header value (base64-encoded JSON object).

    Returns:
        PaymentClaim | None:
            The decoded claim stamped with the observation time,
            or None if no header value was provided.

    Raises:
        MalformedClaimError:
            If the header isn't valid base64, valid JSON, a JSON object,
            or if a field has the wrong type.

    Example:
        >>> header = base64.b64encode(b'{"txHash": "0xab", "amount": "5000"}').decode()
        >>> decode_payment_header(header).amount
        5000
    """
    if header is None or not header.strip():
        return None

    try:
        raw = base64.b64decode(header.strip(), validate=True)
        payload = json.loads(raw.decode('utf-8'))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedClaimError('Invalid payment data (X-PAYMENT must be base64-encoded JSON).') from e

    if not isinstance(payload, dict):
        raise MalformedClaimError('Invalid payment data (X-PAYMENT must encode a JSON object).')

    return PaymentClaim(
        tx_hash=_optional_str(payload, 'txHash'),
        payer_address=_optional_str(payload, 'creatorAddress', 'payerAddress'),
        amount=_optional_amount(payload),
        asset=_optional_str(payload, 'asset'),
        network=_optional_str(payload, 'network'),
        observed_at=datetime.now(UTC),
    )


def extract_payment_claim(event: LambdaEvent) -> PaymentClaim | None:
    """Extract the payment claim from an API Gateway event's X-PAYMENT header

    Returns None if the request carries no payment header.

    Raises:
        MalformedClaimError: see decode_payment_header().
    """
    return decode_payment_header(get_header(event, Headers.PAYMENT))


def payment_response_headers(claim: PaymentClaim, settled_at: datetime) -> HttpHeaders:
    """Build the payment confirmation headers for a successful paid request

    Args:
        claim (PaymentClaim):
            The claim which paid for the request.
        settled_at (datetime):
            When the paid-for work was committed (reported as epoch milliseconds).

    Example:
        >>> headers = payment_response_headers(claim, short_url.created_at)
        >>> sorted(headers)
        ['X-PAYMENT-NETWORK', 'X-PAYMENT-RESPONSE', 'X-PAYMENT-TX-HASH']
    """
    # fmt: off
    response = {
        'txHash': claim.tx_hash,
        'network': claim.network,
        'amount': str(claim.amount),
        'asset': claim.asset,
        'timestamp': int(settled_at.timestamp() * 1000),
    }
    # fmt: on
    return {
        Headers.PAYMENT_RESPONSE: base64.b64encode(json.dumps(response).encode('utf-8')).decode('ascii'),
        Headers.PAYMENT_TX_HASH: claim.tx_hash,
        Headers.PAYMENT_NETWORK: claim.network,
    }
