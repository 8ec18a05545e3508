"""Unit tests for JSON logging in logging.py."""

import sys
import json
import logging
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from paidshortener.constants import ENV
from paidshortener.utils.logging import JsonFormatter, RequestIdFilter, bind_invocation, initialize_logging


def make_record(msg: str = 'Short URL created.', exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name='paidshortener.services.submission',
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_extras() -> None:
    record = make_record(shortcode='abcD1234', event='SHORT_URL_CREATED')
    record.created = 1792022400.0  # 2026-10-15T00:00:00Z

    log = json.loads(JsonFormatter().format(record))

    assert log == {
        'timestamp': '2026-10-15T00:00:00.000Z',
        'level': 'INFO',
        'logger': 'paidshortener.services.submission',
        'message': 'Short URL created.',
        'shortcode': 'abcD1234',
        'event': 'SHORT_URL_CREATED',
    }


def test_json_formatter_serializes_unknown_types_as_strings() -> None:
    record = make_record(reason=ValueError('bad'))
    log = json.loads(JsonFormatter().format(record))
    assert log['reason'] == 'bad'


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError('boom')
    except RuntimeError:
        record = make_record(exc_info=sys.exc_info())

    log = json.loads(JsonFormatter().format(record))

    assert 'RuntimeError: boom' in log['exception']
    assert 'exc_info' not in log


@pytest.mark.parametrize('level, expected', [('debug', logging.DEBUG), ('WARNING', logging.WARNING)])
def test_initialize_logging_reads_level_from_environment(monkeypatch: MonkeyPatch, level: str, expected: int) -> None:
    monkeypatch.setenv(ENV.App.LOG_LEVEL, level)
    root = logging.getLogger()
    monkeypatch.setattr(root, 'handlers', list(root.handlers))
    monkeypatch.setattr(root, 'level', root.level)

    initialize_logging()

    assert root.level == expected
    assert any(isinstance(handler.formatter, JsonFormatter) for handler in root.handlers)


@pytest.mark.parametrize('key', ['X-PAYMENT', 'x-payment', 'paymentHeader', 'Authorization'])
def test_json_formatter_masks_payment_proofs(key: str) -> None:
    record = make_record(**{key: 'eyJ0eEhhc2giOiAiMHhhYiJ9', 'shortcode': 'abcD1234'})

    log = json.loads(JsonFormatter().format(record))

    assert log[key] == '***'
    assert log['shortcode'] == 'abcD1234'


class TestRequestIdFilter:
    @pytest.fixture(autouse=True)
    def setup(self):
        yield
        bind_invocation(None)

    def test_stamps_bound_request_id(self) -> None:
        bind_invocation(MagicMock(aws_request_id='8f5e0c3a-5d1b-4b8e-9a57-0c1d2e3f4a5b'))
        record = make_record()

        assert RequestIdFilter().filter(record) is True
        log = json.loads(JsonFormatter().format(record))
        assert log['requestId'] == '8f5e0c3a-5d1b-4b8e-9a57-0c1d2e3f4a5b'

    def test_leaves_records_alone_without_invocation(self) -> None:
        bind_invocation({'function_name': 'shorten_url'})
        record = make_record()

        RequestIdFilter().filter(record)

        assert 'requestId' not in json.loads(JsonFormatter().format(record))

    def test_keeps_explicit_request_id(self) -> None:
        bind_invocation(MagicMock(aws_request_id='from-context'))
        record = make_record(requestId='explicit')

        RequestIdFilter().filter(record)

        assert record.requestId == 'explicit'


def test_initialize_logging_quiets_aws_sdk(monkeypatch: MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, 'handlers', list(root.handlers))
    monkeypatch.setattr(root, 'level', root.level)
    botocore_logger = logging.getLogger('botocore')
    monkeypatch.setattr(botocore_logger, 'level', botocore_logger.level)

    initialize_logging()

    assert botocore_logger.level == logging.WARNING
    stdout_handler = next(handler for handler in root.handlers if isinstance(handler.formatter, JsonFormatter))
    assert any(isinstance(f, RequestIdFilter) for f in stdout_handler.filters)
