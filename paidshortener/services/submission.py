"""URL submission gate: validate, verify payment, pick a free shortcode, persist once

The SubmissionCoordinator runs one submission through these steps:

    1. Validate    - URL policy check; failure raises URLValidationError. No data store access.
    2. Verify      - payment policy check; a missing claim raises PaymentRequiredError before
                     verification, a rejected claim raises PaymentVerificationError.
    3. Generate    - draw a random shortcode and ask the DAO whether it's taken.
    4. Persist     - atomically insert the record under the free shortcode.

Steps 3 and 4 share one attempt budget (10 by default). A taken shortcode in step 3
and a uniqueness violation in step 4 (another submission won the race for the same
shortcode between EXISTS and INSERT) both cost one attempt and are retried with a
fresh shortcode. Once the budget is spent, CodeGenerationExhaustedError is raised.

The coordinator holds no mutable state, takes no locks and never retries
DataStoreError: uniqueness is the data store's job, retry policy on outages the
caller's. A caller-imposed deadline is honoured before every data store call.

Example:
    >>> coordinator = SubmissionCoordinator(
    ...     short_url_dao=ShortURLRedisDAO(prefix='paidshortener:dev'),
    ...     url_policy=UrlPolicy(),
    ...     payment_policy=PaymentPolicy(),
    ... )
    >>> short_url = coordinator.submit('https://example.com/page', claim)
    >>> short_url.target
    'https://example.com/page'
"""

import time
import logging
from datetime import datetime, timedelta, UTC
from collections.abc import Callable

from paidshortener.constants import ShortCode, PaymentReason
from paidshortener.dao.base import ShortURLBaseDAO
from paidshortener.dao.exceptions import ShortURLAlreadyExistsError
from paidshortener.exceptions import (
    URLValidationError,
    PaymentRequiredError,
    PaymentVerificationError,
    CodeGenerationExhaustedError,
    SubmissionTimeoutError,
)
from paidshortener.models import ShortURLModel, PaymentClaim, VerifiedClaim
from paidshortener.policies import UrlPolicy, PaymentPolicy
from paidshortener.services.url_validator import UrlValidator
from paidshortener.services.payment_verifier import PaymentVerifier
from paidshortener.utils.shortener import generate_shortcode


logger = logging.getLogger(__name__)


class SubmissionCoordinator:
    """Orchestrate a single URL submission from raw input to persisted record

    Attributes:
        short_url_dao (ShortURLBaseDAO):
            Data store enforcing shortcode uniqueness on insert.
        url_validator (UrlValidator):
            URL policy check of step 1.
        payment_verifier (PaymentVerifier):
            Payment policy check of step 2.
        max_attempts (int):
            Shortcode candidates tried before giving up. Defaults to 10.
        ttl (timedelta | None):
            If set, new records expire this long after creation.
    """

    def __init__(
        self,
        short_url_dao: ShortURLBaseDAO,
        url_policy: UrlPolicy,
        payment_policy: PaymentPolicy,
        max_attempts: int = ShortCode.MAX_GENERATION_ATTEMPTS,
        ttl: timedelta | None = None,
        generate: Callable[[], str] = generate_shortcode,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts <= 0:
            raise ValueError(f'max_attempts must be a positive integer (given value: {max_attempts}).')

        self.short_url_dao = short_url_dao
        self.url_validator = UrlValidator(url_policy)
        self.payment_verifier = PaymentVerifier(payment_policy)
        self.max_attempts = max_attempts
        self.ttl = ttl
        self._generate = generate
        self._clock = clock

    def submit(self, raw_url: str, claim: PaymentClaim | None, deadline: float | None = None) -> ShortURLModel:
        """Run one submission through validation, payment verification and persistence

        Args:
            raw_url (str):
                URL as submitted by the client.
            claim (PaymentClaim | None):
                Payment claim attached to the request, None if there was none.
            deadline (float | None):
                Optional deadline on the coordinator's clock (time.monotonic() by
                default). Checked before every data store call.

        Returns:
            ShortURLModel: the persisted record (shortcode, canonical URL, payment metadata).

        Raises:
            URLValidationError:
                If the URL violates the URL policy.
            PaymentRequiredError:
                If no payment claim was attached.
            PaymentVerificationError:
                If the payment claim violates the payment policy.
            CodeGenerationExhaustedError:
                If every shortcode candidate collided.
            SubmissionTimeoutError:
                If the deadline passed before a record was persisted.
            DataStoreError:
                If the data store is unavailable (propagated as-is).
        """
        # 1- Validate URL
        validation = self.url_validator.validate(raw_url)
        if not validation.is_valid:
            logger.info('URL rejected by URL policy.', extra={'event': validation.code})
            raise URLValidationError(validation.message, reason=validation.code)
        target = validation.normalized_url

        # 2- Verify payment claim
        if claim is None:
            logger.info('Submission carries no payment claim.', extra={'event': PaymentReason.PAYMENT_REQUIRED})
            raise PaymentRequiredError('Payment required')

        verification = self.payment_verifier.verify(claim)
        if not verification.is_valid:
            logger.info('Payment claim rejected by payment policy.', extra={'event': verification.code})
            raise PaymentVerificationError(verification.message, reason=verification.code)
        verified = verification.verified

        # 3 & 4- Pick a free shortcode and persist the record under it
        for attempt in range(1, self.max_attempts + 1):
            shortcode = self._generate()

            self._check_deadline(deadline)
            if self.short_url_dao.exists(shortcode):
                logger.info('Shortcode collision on existence check.', extra={'shortcode': shortcode, 'attempt': attempt})
                continue

            self._check_deadline(deadline)
            try:
                short_url = self.short_url_dao.insert(self._new_record(shortcode, target, verified))
            except ShortURLAlreadyExistsError:
                logger.info('Shortcode collision on insert (concurrent submission).', extra={'shortcode': shortcode, 'attempt': attempt})
                continue

            logger.info(
                'Short URL created.',
                extra={'shortcode': shortcode, 'attempt': attempt, 'paymentTxHash': verified.claim.tx_hash},
            )
            return short_url

        logger.warning(
            'Failed to generate a unique shortcode.',
            extra={'event': CodeGenerationExhaustedError.reason, 'attempts': self.max_attempts},
        )
        raise CodeGenerationExhaustedError(f'Failed to generate unique short code after {self.max_attempts} attempts')

    def _new_record(self, shortcode: str, target: str, verified: VerifiedClaim) -> ShortURLModel:
        created_at = datetime.now(UTC)
        return ShortURLModel(
            target=target,
            shortcode=shortcode,
            created_at=created_at,
            expires_at=created_at + self.ttl if self.ttl is not None else None,
            payment_tx_hash=verified.claim.tx_hash,
            payer_address=verified.claim.payer_address,
        )

    def _check_deadline(self, deadline: float | None) -> None:
        if deadline is not None and self._clock() >= deadline:
            logger.warning('Submission deadline passed before persisting.', extra={'event': SubmissionTimeoutError.reason})
            raise SubmissionTimeoutError('Submission deadline exceeded')
