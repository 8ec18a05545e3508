from paidshortener.constants import (
    ValidationReason,
    PaymentReason,
    CODE_GENERATION_EXHAUSTED,
    SUBMISSION_TIMEOUT,
)


class PaidShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:paidshortener_error'


class ConfigurationError(PaidShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class SubmissionError(PaidShortenerError):
    """Base exception for request-scoped URL submission failures.

    Every submission error carries a machine-readable `reason` (what the HTTP layer
    returns as `errorCode`) and a human-readable message.
    """

    error_code = 'submission:submission_error'
    reason: str = 'SUBMISSION_ERROR'

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason

    @property
    def message(self) -> str:
        return str(self)


class URLValidationError(SubmissionError):
    """Raised when the submitted URL is rejected by the URL policy."""

    error_code = 'submission:url_validation_error'
    reason = ValidationReason.INVALID_FORMAT


class PaymentError(SubmissionError):
    """Base exception for payment claim failures."""

    error_code = 'submission:payment_error'
    reason = PaymentReason.PAYMENT_REQUIRED


class PaymentRequiredError(PaymentError):
    """Raised when a submission carries no payment claim at all."""

    error_code = 'submission:payment_required_error'


class MalformedClaimError(PaymentError):
    """Raised when a payment header can't be decoded into a PaymentClaim."""

    error_code = 'submission:malformed_claim_error'
    reason = PaymentReason.MALFORMED_CLAIM


class PaymentVerificationError(PaymentError):
    """Raised when a payment claim violates the payment policy."""

    error_code = 'submission:payment_verification_error'


class CodeGenerationExhaustedError(SubmissionError):
    """Raised when every short code candidate collided with an existing record."""

    error_code = 'submission:code_generation_exhausted_error'
    reason = CODE_GENERATION_EXHAUSTED


class SubmissionTimeoutError(SubmissionError):
    """Raised when the caller's deadline passes before a record is persisted."""

    error_code = 'submission:submission_timeout_error'
    reason = SUBMISSION_TIMEOUT
