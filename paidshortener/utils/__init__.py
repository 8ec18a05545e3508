from paidshortener.utils.config import app_env, app_name, app_prefix, load_config
from paidshortener.utils.helpers import base_url, get_short_url, get_header, require_environment, guarantee_500_response
from paidshortener.utils.shortener import generate_shortcode, is_valid_shortcode
from paidshortener.utils.logging import initialize_logging, bind_invocation


__all__ = [
    'generate_shortcode',
    'is_valid_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'base_url',
    'get_short_url',
    'get_header',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
    'bind_invocation',
]
