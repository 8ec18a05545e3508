# Event and error codes
INVALID_JSON = 'INVALID_JSON'
MISSING_URL = 'MISSING_URL'
BAD_CONFIGURATION = 'BAD_CONFIGURATION'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
SHORT_URL_CREATED = 'SHORT_URL_CREATED'

X402_VERSION = 1
