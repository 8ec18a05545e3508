"""Application configuration: environment names and the AWS AppConfig document

Each environment (`APP_ENV`) is an AppConfig *Environment* of the AppConfig
*Application* `APP_NAME`. One JSON document (profile `backend-config`) configures
all Lambdas:

    {
        "build": 42,
        "active_backend": "redis",
        "policies": {
            "url_policy": { "max_url_length": 2048, ... },
            "payment": { "network": "base-sepolia", "min_amount": 1000, ... },
            "links": { "ttl_seconds": null }
        },
        "configs": {
            "shorten_url":  { "redis": { "url": "rediss://..." } },
            "redirect_url": { "redis": { "host": "...", "port": 6379 } },
            "url_stats":    { "redis": { ... } }
        }
    }

A Lambda sees its own data store section plus the shared policy sections
(see select_lambda_config()).

Warm containers keep their AppConfig Data session alive between invocations.
Every poll returns the token for the next poll and an empty payload while the
deployed document is unchanged, so only the first invocation downloads it.

Example:
    >>> from paidshortener.utils.config import load_config
    >>> config = load_config('shorten_url')
    >>> config['payment']['network']
    'base-sepolia'
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from collections.abc import Callable

import boto3
from botocore.exceptions import ClientError

from paidshortener.constants import ENV
from paidshortener.exceptions import BadConfigurationError
from paidshortener.types import AppConfig, AppConfigDataClient, LambdaConfiguration
from paidshortener.utils.helpers import require_environment
from paidshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)

SHARED_SECTIONS = ('url_policy', 'payment', 'links')

LOCAL_AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal'})
LOCAL_AGENT_PORT = 2772


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable (lowercase), `'local'` by default.

    Example:
        >>> os.environ['APP_ENV'] = 'dev'
        >>> app_env()
        'dev'
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the application name ('APP_NAME'), None if it isn't set"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return the key namespace for DAOs as <app name>:<app env>

    None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'paidshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'paidshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def select_lambda_config(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Pick a Lambda's section out of the full AppConfig document

    Returns:
        dict: {<active backend>: {...}, 'url_policy': {...}, 'payment': {...}, 'links': {...}}
              Policy sections missing from the document are returned empty
              (the policy defaults then apply).

    Raises:
        BadConfigurationError:
            If the document has no active backend or no section for the Lambda.
    """
    try:
        backend = document['active_backend']
        data = {backend: document['configs'][lambda_name][backend]}
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no '{lambda_name}' configuration for the active backend.") from e

    policies = document.get('policies') or {}
    for section in SHARED_SECTIONS:
        data[section] = policies.get(section) or {}
    return data


class AppConfigSession:
    """AppConfig Data session reused across the invocations of one Lambda container

    Attributes:
        client (AppConfigDataClient):
            boto3 'appconfigdata' client.
        document (AppConfig | None):
            Last document received, None before the first poll.
    """

    def __init__(self, client: AppConfigDataClient, application: str, environment: str, profile: str):
        self.client = client
        self.application = application
        self.environment = environment
        self.profile = profile
        self.document: AppConfig | None = None
        self._token: str | None = None

    def _start(self) -> str:
        response = self.client.start_configuration_session(
            ApplicationIdentifier=self.application,
            EnvironmentIdentifier=self.environment,
            ConfigurationProfileIdentifier=self.profile,
        )
        return response['InitialConfigurationToken']

    def _poll(self) -> dict:
        if self._token is None:
            self._token = self._start()
        try:
            return self.client.get_latest_configuration(ConfigurationToken=self._token)
        except ClientError as e:
            # Poll tokens expire after 24 hours: open a new session once
            if e.response.get('Error', {}).get('Code') != 'BadRequestException':
                raise
            logger.info('AppConfig poll token rejected. Starting a new session.')
            self._token = self._start()
            return self.client.get_latest_configuration(ConfigurationToken=self._token)

    def fetch(self) -> AppConfig:
        """Return the deployed document, downloading it only if it changed

        Raises:
            BadConfigurationError:
                If AppConfig has never delivered a (valid JSON) document.
            botocore.exceptions.ClientError:
                On AppConfig API errors.
        """
        response = self._poll()
        self._token = response.get('NextPollConfigurationToken', self._token)

        content = response['Configuration'].read()
        if content:
            try:
                self.document = json.loads(content.decode('utf-8'))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                raise BadConfigurationError('AppConfig document is not valid JSON.') from e
            logger.debug('Downloaded AppConfig document.', extra={'build': self.document.get('build')})

        if self.document is None:
            raise BadConfigurationError('AppConfig returned no configuration document.')
        return self.document


_session: AppConfigSession | None = None


def appconfig_session() -> AppConfigSession:
    """Return this container's AppConfigSession, creating it on first use"""
    global _session
    if _session is None:
        _session = AppConfigSession(
            client=boto3.client('appconfigdata'),
            application=os.environ[ENV.AppConfig.APP_ID],
            environment=os.environ[ENV.AppConfig.ENV_ID],
            profile=os.environ[ENV.AppConfig.PROFILE_ID],
        )
    return _session


def local_agent_url() -> str | None:
    """Return `APPCONFIG_AGENT_URL` if it names a local AppConfig agent, None if unset

    Raises:
        ValueError:
            If the URL points anywhere but a local agent.
    """
    url = os.getenv(ENV.AppConfig.AGENT_URL)
    if not url:
        return None

    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise ValueError(f'Bad scheme {url}')
    if components.hostname not in LOCAL_AGENT_HOSTS:
        raise ValueError(f'Bad host {url}')
    if components.port not in {LOCAL_AGENT_PORT, None}:
        raise ValueError(f'Bad port {url}')
    return url.rstrip('/')


def _sam_load_local_appconfig(func: Callable[[str], LambdaConfiguration]) -> Callable[[str], LambdaConfiguration]:
    """Decorator: under SAM, read the document from the local AppConfig agent

    Used when running locally with `APPCONFIG_AGENT_URL` set; otherwise the
    wrapped function pulls from AWS AppConfig. The profile name comes from
    `APPCONFIG_PROFILE_NAME` (default: "backend-config").
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str, *args, **kwargs) -> LambdaConfiguration:
        agent_url = local_agent_url() if running_locally() else None
        if agent_url is None:
            return func(lambda_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Loading AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)
        return select_lambda_config(document, lambda_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        lambda_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The Lambda's data store section and the shared policy sections.

    Raises:
        MissingEnvironmentVariableError:
            If any of the AppConfig environment variables is missing.
        BadConfigurationError:
            If there's no document or it lacks the Lambda's section.
    """
    document = appconfig_session().fetch()
    data = select_lambda_config(document, lambda_name)
    logger.debug('Loaded AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return data
