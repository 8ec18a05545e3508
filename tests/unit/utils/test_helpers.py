"""Unit tests for helper functions in helpers.py."""

import json
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from paidshortener.constants import ENV
from paidshortener.types import LambdaEvent
from paidshortener.exceptions import MissingEnvironmentVariableError
from paidshortener.utils import helpers
from paidshortener.utils.helpers import (
    base_url,
    get_short_url,
    get_header,
    invocation_deadline,
    require_environment,
    guarantee_500_response,
)


@pytest.fixture(autouse=True)
def no_base_url_override(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.delenv(ENV.App.BASE_URL, raising=False)


@pytest.mark.parametrize(
    'domain, stage, expected',
    [
        ('abc123.execute-api.us-east-1.amazonaws.com', 'Dev', 'https://abc123.execute-api.us-east-1.amazonaws.com/Dev'),
        ('abc123.execute-api.us-east-1.amazonaws.com', 'Prod', 'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'),
        ('sho.rt', 'Prod', 'https://sho.rt'),
        ('localhost:3000', 'local', 'https://localhost:3000'),
    ],
)
def test_base_url(domain: str, stage: str, expected: str) -> None:
    event = {
        'requestContext': {
            'domainName': domain,
            'stage': stage,
        }
    }
    assert base_url(event) == expected


@pytest.mark.parametrize(
    'event',
    [
        {},
        {'requestContext': {}},
        {'requestContext': {'domainName': ''}},
        {'requestContext': {'stage': 'Dev'}},
    ],
)
def test_base_url_fallbacks_to_localhost(event: LambdaEvent) -> None:
    assert base_url(event) == 'http://localhost:3000'


def test_base_url_environment_override(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv(ENV.App.BASE_URL, 'https://pay.sho.rt')
    event = {'requestContext': {'domainName': 'abc123.execute-api.us-east-1.amazonaws.com', 'stage': 'Prod'}}

    assert base_url(event) == 'https://pay.sho.rt'
    assert get_short_url('abcD1234', event) == 'https://pay.sho.rt/abcD1234'


@pytest.mark.parametrize(
    'shortcode, domain, stage, expected',
    [
        ('abcD1234', 'sho.rt', 'Prod', 'https://sho.rt/abcD1234'),
        ('Gh71WPTa', 'abc123.execute-api.us-east-1.amazonaws.com', 'Dev', 'https://abc123.execute-api.us-east-1.amazonaws.com/Dev/Gh71WPTa'),
    ],
)
def test_get_short_url(shortcode: str, domain: str, stage: str, expected: str) -> None:
    event = cast(LambdaEvent, {'requestContext': {'domainName': domain, 'stage': stage}})
    assert get_short_url(shortcode, event) == expected


@pytest.mark.parametrize('header_name', ['X-PAYMENT', 'x-payment', 'X-Payment'])
def test_get_header_is_case_insensitive(header_name: str) -> None:
    event = {'headers': {'User-Agent': 'pytest', header_name: 'claim'}}
    assert get_header(event, 'X-PAYMENT') == 'claim'


@pytest.mark.parametrize('event', [{}, {'headers': None}, {'headers': {'User-Agent': 'pytest'}}])
def test_get_header_missing(event: LambdaEvent) -> None:
    assert get_header(event, 'X-PAYMENT') is None


def test_invocation_deadline(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(helpers, 'time', MagicMock(monotonic=MagicMock(return_value=100.0)))
    context = MagicMock()
    context.get_remaining_time_in_millis.return_value = 3000

    assert invocation_deadline(context) == pytest.approx(102.5)
    assert invocation_deadline(context, margin_ms=0) == pytest.approx(103.0)


def test_invocation_deadline_never_lies_in_the_past(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(helpers, 'time', MagicMock(monotonic=MagicMock(return_value=100.0)))
    context = MagicMock()
    context.get_remaining_time_in_millis.return_value = 200

    assert invocation_deadline(context) == pytest.approx(100.0)


@pytest.mark.parametrize('context', [None, {'function_name': 'shorten_url'}])
def test_invocation_deadline_without_lambda_context(context) -> None:
    assert invocation_deadline(context) is None


def test_require_environment(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv('ENV1', 'value1')
    monkeypatch.setenv('ENV2', 'value2')

    @require_environment('ENV1', 'ENV2')
    def sample_function(x: int) -> int:
        return x + 1

    assert sample_function(1) == 2


@pytest.mark.parametrize(
    'env_setup, missing_names',
    [
        ({'ENV1': None, 'ENV2': 'value2'}, ["'ENV1'"]),
        ({'ENV1': '', 'ENV2': 'value2'}, ["'ENV1'"]),
        ({'ENV1': None, 'ENV2': None}, ["'ENV1'", "'ENV2'"]),
    ],
)
def test_require_environment_with_missing_or_empty_env_vars(
    monkeypatch: MonkeyPatch,
    env_setup: dict[str, str],
    missing_names: list[str],
) -> None:
    for name, value in env_setup.items():
        if value is None:
            monkeypatch.delenv(name, raising=False)
        else:
            monkeypatch.setenv(name, value)

    @require_environment('ENV1', 'ENV2')
    def sample_function() -> None:
        pass

    expected_message = f'Missing required environment variables: {", ".join(missing_names)}'
    with pytest.raises(MissingEnvironmentVariableError, match=expected_message):
        sample_function()


def test_guarantee_500_response(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr('paidshortener.utils.helpers.running_locally', lambda: False)

    @guarantee_500_response
    def faulty_lambda_handler(event, context):
        raise RuntimeError('boom')

    response = faulty_lambda_handler({}, None)
    body = json.loads(response['body'])

    assert response['statusCode'] == 500
    assert response['headers']['Access-Control-Allow-Origin'] == '*'
    assert body['message'] == 'Internal Server Error'
    assert body['error_code'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'


def test_guarantee_500_response_reraises_when_running_locally(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr('paidshortener.utils.helpers.running_locally', lambda: True)

    @guarantee_500_response
    def faulty_lambda_handler(event, context):
        raise RuntimeError('boom')

    with pytest.raises(RuntimeError, match='boom'):
        faulty_lambda_handler({}, None)
