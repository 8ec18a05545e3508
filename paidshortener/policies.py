"""Immutable policy objects consumed by the URL submission gate.

Policies are built once per invocation (usually from an AppConfig section via
`from_config()`) and passed explicitly into the validator, verifier and coordinator.
Nothing in this package reads process-wide state to decide what is acceptable.

Classes:
    UrlPolicy:
        Bounds on acceptable URLs (lengths, schemes, blocked hosts and ranges,
        known URL shortener domains).

    PaymentPolicy:
        Bounds on acceptable payment claims (network, asset, amount range) plus the
        payment requirements advertised to clients in 402 responses.

Example:
    >>> policy = PaymentPolicy.from_config({'min_amount': 1000, 'max_amount': 10000})
    >>> policy.min_amount, policy.max_amount
    (1000, 10000)
"""

import re
import ipaddress
from dataclasses import dataclass, field
from typing import Any

from paidshortener.constants import UrlLimits, PaymentDefaults
from paidshortener.exceptions import BadConfigurationError


HEX_ADDRESS_PATTERN = re.compile(r'0x[a-fA-F0-9]{40}')
HEX_TX_HASH_PATTERN = re.compile(r'0x[a-fA-F0-9]{64}')

DEFAULT_BLOCKED_NETWORKS = (
    # IPv4
    '0.0.0.0/8',  # "this" network
    '10.0.0.0/8',  # private
    '127.0.0.0/8',  # loopback
    '169.254.0.0/16',  # link-local
    '172.16.0.0/12',  # private
    '192.168.0.0/16',  # private
    '224.0.0.0/4',  # multicast
    '240.0.0.0/4',  # reserved (includes broadcast)
    # IPv6
    '::/128',  # unspecified
    '::1/128',  # loopback
    'fe80::/10',  # link-local
    'fc00::/7',  # unique local
    'ff00::/8',  # multicast
)

DEFAULT_BLOCKED_HOSTNAMES = ('localhost', '0.0.0.0', '::1', '::')

DEFAULT_SHORTENER_DOMAINS = (
    'bit.ly',
    'tinyurl.com',
    'short.link',
    'ow.ly',
    't.co',
    'goo.gl',
    'is.gd',
    'buff.ly',
    'adf.ly',
)


def _positive_int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise BadConfigurationError(f"'{key}' must be a positive integer (given value: {value!r}).")
    return value


@dataclass(frozen=True)
class UrlPolicy:
    """Configuration bounding acceptable URLs.

    Attributes:
        max_url_length (int):
            Maximum length of the raw URL string.
        max_path_length (int):
            Maximum length of the (percent-encoded) URL path.
        max_query_length (int):
            Maximum length of the (percent-encoded) query string, '?' included.
        allowed_schemes (frozenset[str]):
            Schemes which may be shortened.
        unsafe_schemes (frozenset[str]):
            Schemes rejected as unsafe rather than merely unsupported.
        blocked_hostnames (frozenset[str]):
            Literal host names which are never accepted.
        blocked_networks (tuple):
            IP ranges (ipaddress networks) which host literals must not fall into.
        shortener_domains (frozenset[str]):
            URL shortening services; the domain and its subdomains are rejected.
    """

    max_url_length: int = UrlLimits.MAX_URL_LENGTH
    max_path_length: int = UrlLimits.MAX_PATH_LENGTH
    max_query_length: int = UrlLimits.MAX_QUERY_LENGTH
    allowed_schemes: frozenset[str] = frozenset({'http', 'https'})
    unsafe_schemes: frozenset[str] = frozenset({'data', 'javascript', 'vbscript'})
    blocked_hostnames: frozenset[str] = frozenset(DEFAULT_BLOCKED_HOSTNAMES)
    blocked_networks: tuple = field(default_factory=lambda: tuple(ipaddress.ip_network(n) for n in DEFAULT_BLOCKED_NETWORKS))
    shortener_domains: frozenset[str] = frozenset(DEFAULT_SHORTENER_DOMAINS)

    @classmethod
    def from_config(cls, section: dict[str, Any] | None = None) -> 'UrlPolicy':
        """Build a UrlPolicy from an AppConfig 'url_policy' section

        Recognized keys (all optional):
            max_url_length, max_path_length, max_query_length (int),
            shortener_domains (list[str]), extra_shortener_domains (list[str])

        Raises:
            BadConfigurationError:
                If a value has the wrong type or is out of range.
        """
        section = section or {}
        domains = section.get('shortener_domains', DEFAULT_SHORTENER_DOMAINS)
        extra = section.get('extra_shortener_domains', ())
        if not isinstance(domains, (list, tuple)) or not isinstance(extra, (list, tuple)):
            raise BadConfigurationError('Shortener domains must be given as a list of domain names.')

        return cls(
            max_url_length=_positive_int(section, 'max_url_length', UrlLimits.MAX_URL_LENGTH),
            max_path_length=_positive_int(section, 'max_path_length', UrlLimits.MAX_PATH_LENGTH),
            max_query_length=_positive_int(section, 'max_query_length', UrlLimits.MAX_QUERY_LENGTH),
            shortener_domains=frozenset(str(d).lower().strip('.') for d in (*domains, *extra)),
        )


@dataclass(frozen=True)
class PaymentPolicy:
    """Configuration bounding acceptable payment claims.

    Amounts are integers in the asset's atomic units; the range is inclusive.

    Raises:
        BadConfigurationError:
            On construction, if the policy is internally inconsistent.
    """

    network: str = PaymentDefaults.NETWORK
    asset: str = PaymentDefaults.ASSET
    min_amount: int = PaymentDefaults.MIN_AMOUNT
    max_amount: int = PaymentDefaults.MAX_AMOUNT
    max_timeout_seconds: int = PaymentDefaults.MAX_TIMEOUT_SECONDS
    pay_to: str | None = None
    facilitator_url: str = PaymentDefaults.FACILITATOR_URL
    scheme: str = PaymentDefaults.SCHEME

    def __post_init__(self):
        errors = []
        if not self.network:
            errors.append('network must be a non-empty string')
        if not HEX_ADDRESS_PATTERN.fullmatch(self.asset or ''):
            errors.append(f'asset must be a 0x-prefixed 20-byte hex address (given value: {self.asset!r})')
        for name in ('min_amount', 'max_amount', 'max_timeout_seconds'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                errors.append(f'{name} must be a non-negative integer (given value: {value!r})')
        if not errors and self.min_amount > self.max_amount:
            errors.append(f'min_amount ({self.min_amount}) must not exceed max_amount ({self.max_amount})')
        if self.pay_to is not None and not HEX_ADDRESS_PATTERN.fullmatch(self.pay_to):
            errors.append(f'pay_to must be a 0x-prefixed 20-byte hex address (given value: {self.pay_to!r})')

        if errors:
            raise BadConfigurationError(f'Invalid payment policy: {"; ".join(errors)}.')

    @classmethod
    def from_config(cls, section: dict[str, Any] | None = None) -> 'PaymentPolicy':
        """Build a PaymentPolicy from an AppConfig 'payment' section

        Recognized keys (all optional):
            network, asset, min_amount, max_amount, max_timeout_seconds,
            pay_to, facilitator_url

        Amounts may be given as integers or digit strings (atomic units).
        """
        section = section or {}

        def amount(key: str, default: int) -> int:
            value = section.get(key, default)
            if isinstance(value, str) and value.isascii() and value.isdigit():
                return int(value)
            return value

        return cls(
            network=section.get('network', PaymentDefaults.NETWORK),
            asset=section.get('asset', PaymentDefaults.ASSET),
            min_amount=amount('min_amount', PaymentDefaults.MIN_AMOUNT),
            max_amount=amount('max_amount', PaymentDefaults.MAX_AMOUNT),
            max_timeout_seconds=amount('max_timeout_seconds', PaymentDefaults.MAX_TIMEOUT_SECONDS),
            pay_to=section.get('pay_to'),
            facilitator_url=section.get('facilitator_url', PaymentDefaults.FACILITATOR_URL),
        )

    def requirements(self, resource: str | None = None) -> dict[str, Any]:
        """Payment requirements advertised to clients in 402 responses

        Example:
            >>> PaymentPolicy().requirements('/v1/shorten')['maxAmountRequired']
            '10000'
        """
        # fmt: off
        requirements = {
            'scheme': self.scheme,
            'network': self.network,
            'asset': self.asset,
            'minAmountRequired': str(self.min_amount),
            'maxAmountRequired': str(self.max_amount),
            'maxTimeoutSeconds': self.max_timeout_seconds,
            'extra': {'name': 'USDC', 'version': '2'},
        }
        # fmt: on
        if self.pay_to is not None:
            requirements['payTo'] = self.pay_to
        if resource is not None:
            requirements['resource'] = resource
        return requirements
