from enum import StrEnum


class ShortCode:
    """Short code format."""

    ALPHABET = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
    LENGTH = 8
    MAX_GENERATION_ATTEMPTS = 10


class UrlLimits:
    """Default URL policy limits (characters)."""

    MAX_URL_LENGTH = 2048
    MAX_PATH_LENGTH = 1000
    MAX_QUERY_LENGTH = 1000


class PaymentDefaults:
    """Default payment policy (Base Sepolia USDC, 6 decimals)."""

    NETWORK = 'base-sepolia'
    ASSET = '0x036CbD53842c5426634e7929541eC2318f3dCF7e'  # USDC contract address
    MIN_AMOUNT = 1_000  # 0.001 USDC in atomic units
    MAX_AMOUNT = 10_000  # 0.01 USDC in atomic units
    MAX_TIMEOUT_SECONDS = 300
    SCHEME = 'exact'
    FACILITATOR_URL = 'https://x402.org/facilitator'


class Headers(StrEnum):
    """Payment protocol HTTP headers."""

    PAYMENT = 'X-PAYMENT'
    PAYMENT_RESPONSE = 'X-PAYMENT-RESPONSE'
    PAYMENT_TX_HASH = 'X-PAYMENT-TX-HASH'
    PAYMENT_NETWORK = 'X-PAYMENT-NETWORK'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        BASE_URL = 'BASE_URL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


class ValidationReason(StrEnum):
    """Reason codes emitted by the URL policy validator."""

    URL_TOO_LONG = 'URL_TOO_LONG'
    URL_EMPTY = 'URL_EMPTY'
    INVALID_FORMAT = 'INVALID_FORMAT'
    INVALID_PROTOCOL = 'INVALID_PROTOCOL'
    UNSAFE_PROTOCOL = 'UNSAFE_PROTOCOL'
    BLOCKED_HOSTNAME = 'BLOCKED_HOSTNAME'
    PRIVATE_IP = 'PRIVATE_IP'
    SHORTENER_CHAIN = 'SHORTENER_CHAIN'
    PATH_TOO_LONG = 'PATH_TOO_LONG'
    QUERY_TOO_LONG = 'QUERY_TOO_LONG'


class PaymentReason(StrEnum):
    """Reason codes emitted by the payment claim verifier."""

    PAYMENT_REQUIRED = 'PAYMENT_REQUIRED'
    MALFORMED_CLAIM = 'MALFORMED_CLAIM'
    MISSING_FIELDS = 'MISSING_FIELDS'
    INVALID_NETWORK = 'INVALID_NETWORK'
    INVALID_ASSET = 'INVALID_ASSET'
    AMOUNT_TOO_LOW = 'AMOUNT_TOO_LOW'
    AMOUNT_TOO_HIGH = 'AMOUNT_TOO_HIGH'
    INVALID_TX_HASH = 'INVALID_TX_HASH'
    INVALID_PAYER_ADDRESS = 'INVALID_PAYER_ADDRESS'


# Error codes
CODE_GENERATION_EXHAUSTED = 'CODE_GENERATION_EXHAUSTED'
SUBMISSION_TIMEOUT = 'SUBMISSION_TIMEOUT'
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'

# TODO: restrict to the frontend's origin once it has a stable domain
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': f'Content-Type,{Headers.PAYMENT}',
    'Access-Control-Allow-Methods': 'OPTIONS,POST,GET',
    'Access-Control-Expose-Headers': f'{Headers.PAYMENT_RESPONSE},{Headers.PAYMENT_TX_HASH},{Headers.PAYMENT_NETWORK}',
}
