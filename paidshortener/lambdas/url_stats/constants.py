# Event and error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
BAD_CONFIGURATION = 'BAD_CONFIGURATION'
STATS_SUCCESS = 'STATS_SUCCESS'
