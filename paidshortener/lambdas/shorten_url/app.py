import json
import logging
from datetime import timedelta
from typing import Any

from paidshortener.constants import CORS_HEADERS
from paidshortener.types import LambdaEvent, LambdaContext, LambdaResponse, LambdaConfiguration, HttpHeaders
from paidshortener.policies import UrlPolicy, PaymentPolicy
from paidshortener.dao.redis import ShortURLRedisDAO
from paidshortener.dao.exceptions import DataStoreError
from paidshortener.exceptions import (
    ConfigurationError,
    BadConfigurationError,
    URLValidationError,
    PaymentError,
    PaymentRequiredError,
    MalformedClaimError,
    CodeGenerationExhaustedError,
    SubmissionTimeoutError,
)
from paidshortener.services import SubmissionCoordinator
from paidshortener.utils import load_config, get_short_url, app_prefix, guarantee_500_response, bind_invocation
from paidshortener.utils.claims import extract_payment_claim, payment_response_headers
from paidshortener.utils.helpers import invocation_deadline
from paidshortener.lambdas.shorten_url.constants import (
    INVALID_JSON,
    MISSING_URL,
    BAD_CONFIGURATION,
    DATA_STORE_UNAVAILABLE,
    SHORT_URL_CREATED,
    X402_VERSION,
)


logger = logging.getLogger(__name__)


def _response(status_code: int, body: dict[str, Any], headers: HttpHeaders | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body),
    }


def _error_body(base: str, message: str | None, error_code: str | None) -> dict[str, Any]:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return body


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(500, _error_body('Internal Server Error', message, error_code))


def response_504(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(504, _error_body('Gateway Timeout', message, error_code))


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(400, _error_body('Bad Request', message, error_code))


def response_409(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _response(409, _error_body('Conflict', message, error_code))


def response_402(*, requirements: dict[str, Any], message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = _error_body('Payment Required', message, error_code)
    body['x402Version'] = X402_VERSION
    body['accepts'] = [requirements]
    return _response(402, body)


def response_200(*, body: dict[str, Any], headers: HttpHeaders) -> LambdaResponse:
    return _response(200, body, headers)


def _link_ttl(app_config: LambdaConfiguration) -> timedelta | None:
    ttl_seconds = (app_config.get('links') or {}).get('ttl_seconds')
    if ttl_seconds is None:
        return None
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds <= 0:
        raise BadConfigurationError(f"'ttl_seconds' must be a positive integer (given value: {ttl_seconds!r}).")
    return timedelta(seconds=ttl_seconds)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs for a payment

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load the application's config and policies
    - Step 2: Extract the target URL from the request body
    - Step 3: Decode the payment claim from the X-PAYMENT header
    - Step 4: Validate URL, verify payment, pick a shortcode and persist (SubmissionCoordinator)
    - Step 5: Respond to user with 200 success and the payment confirmation headers

    HTTP responses:
        200: Successful URL shortening
            shortCode: newly generated shortcode
            shortUrl: newly generated short url
            originalUrl: canonical form of the submitted url
            paymentTxHash: transaction hash of the payment
        400: Bad client request
            message/errorCode: invalid JSON, missing url or a URL policy violation
        402: Payment required
            message/errorCode: missing, malformed or rejected payment claim
            accepts: payment requirements the client has to meet
        409: Conflict
            message/errorCode: no free shortcode found
        500: Internal server error
            message: bad configuration or data store unavailable
        504: Gateway timeout
            message/errorCode: the invocation ran out of time before persisting

    Args:
        event (LambdaEvent):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        LambdaResponse:
            JSON-serializable response following API Gateway Lambda Proxy
            output format. Includes status code, headers, and response body.

    Example:
        >>> event = {'body': '{"url": "https://example.com"}', 'headers': {'X-PAYMENT': '<base64 json>'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['originalUrl']
        'https://example.com/'
    """
    bind_invocation(context)

    # 1- Load application's config and policies
    try:
        app_config = load_config('shorten_url')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
        url_policy = UrlPolicy.from_config(app_config.get('url_policy'))
        payment_policy = PaymentPolicy.from_config(app_config.get('payment'))
        ttl = _link_ttl(app_config)
    except (ConfigurationError, KeyError):
        logger.exception(
            'Failed to load configuration for shorten URL function. Responding with 500.',
            extra={'event': BAD_CONFIGURATION},
        )
        return response_500()

    # 2- Extract target URL from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Request body is not valid JSON. Responding with 400.', extra={'event': INVALID_JSON})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON)

    raw_url = request_body.get('url') if isinstance(request_body, dict) else None
    if not isinstance(raw_url, str) or not raw_url:
        logger.info("Missing 'url' in request body. Responding with 400.", extra={'event': MISSING_URL})
        return response_400(message="missing 'url' in JSON body", error_code=MISSING_URL)

    # 3- Decode payment claim. A malformed header counts as no payment, but is
    #    only reported after the URL passed validation.
    malformed_claim = None
    try:
        claim = extract_payment_claim(event)
    except MalformedClaimError as e:
        claim, malformed_claim = None, e

    # 4- Run the submission
    coordinator = SubmissionCoordinator(
        short_url_dao=ShortURLRedisDAO(**redis_config, prefix=app_prefix()),
        url_policy=url_policy,
        payment_policy=payment_policy,
        ttl=ttl,
    )
    try:
        short_url = coordinator.submit(raw_url, claim, deadline=invocation_deadline(context))
    except URLValidationError as e:
        return response_400(message=e.message, error_code=e.reason)
    except PaymentError as e:
        if isinstance(e, PaymentRequiredError) and malformed_claim is not None:
            logger.info('Payment header is malformed. Responding with 402.', extra={'event': malformed_claim.reason})
            e = malformed_claim
        return response_402(
            requirements=payment_policy.requirements(resource=event.get('path')),
            message=e.message,
            error_code=e.reason,
        )
    except CodeGenerationExhaustedError as e:
        return response_409(message=e.message, error_code=e.reason)
    except SubmissionTimeoutError as e:
        return response_504(message=e.message, error_code=e.reason)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'event': DATA_STORE_UNAVAILABLE})
        return response_500(message='data store unavailable', error_code=DATA_STORE_UNAVAILABLE)

    # 5- Return successful response to user
    short_url_string = get_short_url(short_url.shortcode, event)
    logger.info(
        'Shortened URL. Responding with 200.',
        extra={'shortcode': short_url.shortcode, 'event': SHORT_URL_CREATED},
    )
    return response_200(
        body={
            'shortCode': short_url.shortcode,
            'shortUrl': short_url_string,
            'originalUrl': short_url.target,
            'paymentTxHash': short_url.payment_tx_hash,
        },
        headers=payment_response_headers(claim, short_url.created_at),
    )
