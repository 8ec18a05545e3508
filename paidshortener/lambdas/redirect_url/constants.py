# Event and error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
BAD_CONFIGURATION = 'BAD_CONFIGURATION'
UNSAFE_TARGET = 'UNSAFE_TARGET'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
