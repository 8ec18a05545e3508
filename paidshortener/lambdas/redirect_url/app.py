import json
import logging

from paidshortener.constants import CORS_HEADERS
from paidshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from paidshortener.policies import UrlPolicy
from paidshortener.dao.redis import ShortURLRedisDAO
from paidshortener.dao.exceptions import ShortURLNotFoundError
from paidshortener.exceptions import ConfigurationError
from paidshortener.services import is_safe_for_redirect
from paidshortener.utils import load_config, get_short_url, app_prefix, is_valid_shortcode, guarantee_500_response, bind_invocation
from paidshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    BAD_CONFIGURATION,
    UNSAFE_TARGET,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_500(message: str | None = None) -> LambdaResponse:
    base = 'Internal Server Error'
    body = {'message': base if not message else f'{base} ({message})'}
    return {
        'statusCode': 500,
        'headers': CORS_HEADERS,
        'body': json.dumps(body),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 400,
        'headers': CORS_HEADERS,
        'body': json.dumps(body),
    }


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Not Found'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 404,
        'headers': CORS_HEADERS,
        'body': json.dumps(body),
    }


def response_301(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 301,
        'headers': {'Location': location, **CORS_HEADERS},
        'body': json.dumps({}),  # no body needed for redirects
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Get short URL record from database and re-check its target URL
    - Step 3: Count the access
    - Step 4: Redirect client to target URL

    HTTP responses:
        301: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing shortcode in path parameters
        404: Not found
            message: unknown, retired or expired short URL, or a target the URL policy now rejects
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71WPTa'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        301
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    bind_invocation(context)

    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
        url_policy = UrlPolicy.from_config(app_config.get('url_policy'))
    except (ConfigurationError, KeyError):
        logger.exception(
            'Failed to load AppConfig for redirect URL function. Responding with 500.',
            extra={'event': BAD_CONFIGURATION},
        )
        return response_500()

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if shortcode is None:
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    not_found = response_404(message=f"short url {get_short_url(shortcode, event)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)
    if not is_valid_shortcode(shortcode):
        logger.info(
            'Malformed shortcode in path. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return not_found

    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())

    # 2- Get short URL record from database
    try:
        short_url = short_url_dao.get(shortcode)
    except ShortURLNotFoundError:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return not_found

    if not short_url.is_live():
        logger.info(
            'Short URL is retired or expired. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return not_found

    # Stored targets must still pass the current URL policy
    if not is_safe_for_redirect(short_url.target, url_policy):
        logger.warning(
            'Short URL target violates the current URL policy. Responding with 404.',
            extra={'shortcode': shortcode, 'event': UNSAFE_TARGET},
        )
        return not_found

    # 3- Count the access
    try:
        hits = short_url_dao.hit(shortcode)
    except ShortURLNotFoundError:  # pragma: no cover
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={
                'shortcode': shortcode,
                'event': SHORT_URL_NOT_FOUND,
                'reason': 'Possible race condition encountered (short URL just retired)',
            },
        )
        return not_found

    # 4- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 301.',
        extra={'shortcode': shortcode, 'hits': hits, 'event': REDIRECT_SUCCESS},
    )
    return response_301(location=short_url.target)
