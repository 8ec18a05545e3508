from paidshortener.services.url_validator import UrlValidator, validate_url, normalize_url, is_safe_for_redirect
from paidshortener.services.payment_verifier import PaymentVerifier, verify_payment
from paidshortener.services.submission import SubmissionCoordinator


__all__ = [
    'UrlValidator',
    'validate_url',
    'normalize_url',
    'is_safe_for_redirect',
    'PaymentVerifier',
    'verify_payment',
    'SubmissionCoordinator',
]
