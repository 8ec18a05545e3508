import json
import logging
from datetime import datetime
from typing import Any

from paidshortener.constants import CORS_HEADERS
from paidshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from paidshortener.models import ShortURLModel
from paidshortener.dao.redis import ShortURLRedisDAO
from paidshortener.dao.exceptions import ShortURLNotFoundError
from paidshortener.exceptions import ConfigurationError
from paidshortener.utils import load_config, get_short_url, app_prefix, is_valid_shortcode, guarantee_500_response, bind_invocation
from paidshortener.lambdas.url_stats.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    BAD_CONFIGURATION,
    STATS_SUCCESS,
)


logger = logging.getLogger(__name__)


def response(status_code: int, body: dict[str, Any]) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **CORS_HEADERS},
        'body': json.dumps(body),
    }


def response_error(status_code: int, base: str, message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return response(status_code, body)


def _isoformat(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def stats_body(short_url: ShortURLModel) -> dict[str, Any]:
    # fmt: off
    return {
        'shortCode':      short_url.shortcode,
        'originalUrl':    short_url.target,
        'createdAt':      _isoformat(short_url.created_at),
        'accessCount':    short_url.hits,
        'isActive':       short_url.is_active,
        'expiresAt':      _isoformat(short_url.expires_at),
        'paymentTxHash':  short_url.payment_tx_hash,
        'creatorAddress': short_url.payer_address,
    }
    # fmt: on


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Return metadata of a short URL (no access is counted)

    HTTP responses:
        200: short URL metadata (see stats_body())
        400: missing shortcode in path parameters
        404: unknown, retired or expired short URL
        500: internal server error
    """
    bind_invocation(context)

    try:
        app_config = load_config('url_stats')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    except (ConfigurationError, KeyError):
        logger.exception(
            'Failed to load AppConfig for URL stats function. Responding with 500.',
            extra={'event': BAD_CONFIGURATION},
        )
        return response_error(500, 'Internal Server Error')

    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if shortcode is None:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return response_error(400, 'Bad Request', "missing 'shortcode' in path", MISSING_SHORTCODE)

    not_found = response_error(404, 'Not Found', f"short url {get_short_url(shortcode, event)} doesn't exist", SHORT_URL_NOT_FOUND)
    if not is_valid_shortcode(shortcode):
        logger.info('Malformed shortcode in path. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return not_found

    try:
        short_url = ShortURLRedisDAO(**redis_config, prefix=app_prefix()).get(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return not_found

    if not short_url.is_live():
        logger.info('Short URL is retired or expired. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return not_found

    logger.info('Returning short URL stats. Responding with 200.', extra={'shortcode': shortcode, 'event': STATS_SUCCESS})
    return response(200, stats_body(short_url))
