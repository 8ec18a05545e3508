"""JSON logging for the Lambda functions

IMPORTANT: Call `initialize_logging()` in the lambda package's `__init__.py` before
the handler module logs anything. Handlers call `bind_invocation(context)` first thing,
so every record of an invocation carries the Lambda request id.

One JSON object per line (CloudWatch Logs Insights can query the fields directly):
{
    "timestamp": "2026-10-18T12:00:00.000Z",
    "level": "INFO",
    "logger": "paidshortener.services.submission",
    "message": "Short URL created.",
    "requestId": "8f5e0c3a-5d1b-4b8e-9a57-0c1d2e3f4a5b",
    "shortcode": "Gh71WPTa"
}

Raw payment proofs never reach the logs: `extra` keys named like a payment
header are masked.
"""

import os
import json
import logging
import logging.config
import contextvars
from datetime import datetime, UTC

from paidshortener.constants import ENV, Headers


_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar('request_id', default=None)

# Attributes every LogRecord has. Anything else came in through `extra`.
RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))) | {'message', 'asctime'}

REDACTED_KEYS = frozenset({Headers.PAYMENT.lower(), 'paymentheader', 'authorization'})
REDACTED = '***'


def bind_invocation(context) -> None:
    """Attach the Lambda request id of `context` to all following log records

    Contexts without an `aws_request_id` (tests, local runs) unbind it.
    """
    _request_id.set(getattr(context, 'aws_request_id', None))


class RequestIdFilter(logging.Filter):
    """Stamp records with the request id bound by bind_invocation()"""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _request_id.get()
        if request_id is not None and not hasattr(record, 'requestId'):
            record.requestId = request_id
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes LogRecord extras"""

    def format(self, record: logging.LogRecord) -> str:
        # fmt: off
        timestamp = datetime.fromtimestamp(record.created, tz=UTC) \
                            .isoformat(timespec='milliseconds') \
                            .replace('+00:00', 'Z')
        # fmt: on

        log = {
            'timestamp': timestamp,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in RESERVED_ATTRS or key in log:
                continue
            log[key] = REDACTED if key.lower() in REDACTED_KEYS else value

        return json.dumps(log, default=str)


def initialize_logging() -> None:
    log_level = os.getenv(ENV.App.LOG_LEVEL, 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'filters': {
                'request_id': {
                    '()': RequestIdFilter,
                }
            },
            'formatters': {
                'json': {
                    '()': JsonFormatter,
                }
            },
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'filters': ['request_id'],
                    'stream': 'ext://sys.stdout',
                }
            },
            # boto3 logs every AppConfig round trip at DEBUG
            'loggers': {
                'botocore': {'level': 'WARNING'},
                'urllib3': {'level': 'WARNING'},
            },
            'root': {
                'level': log_level,
                'handlers': ['stdout'],
            },
        }
    )
