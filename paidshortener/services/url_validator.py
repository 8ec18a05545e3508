"""URL policy validation and canonicalization

Untrusted URLs are checked against a UrlPolicy before they can be shortened.
The checks are purely lexical: the hostname string is inspected, never resolved.
A hostname which *resolves* to a private address is therefore accepted. This is
a known limitation (DNS rebinding, internal DNS names) and is left unmitigated on
purpose: resolving at submission time changes latency and availability.

Check order:
    1. length (URL_TOO_LONG), emptiness (URL_EMPTY)
    2. absolute URL syntax (INVALID_FORMAT)
    3. canonical host: blocked hostnames (BLOCKED_HOSTNAME), blocked IP ranges (PRIVATE_IP)
    4. scheme: data/javascript/vbscript (UNSAFE_PROTOCOL), anything but http(s) (INVALID_PROTOCOL)
    5. host presence and port syntax (INVALID_FORMAT)
    6. known URL shorteners (SHORTENER_CHAIN)
    7. path and query length (PATH_TOO_LONG, QUERY_TOO_LONG)

Host checks run before scheme checks so that e.g. 'ftp://127.0.0.1' reports PRIVATE_IP.

Functions:
    validate_url(raw: str, policy: UrlPolicy) -> ValidationResult
    normalize_url(raw: str, policy: UrlPolicy) -> str | None
    is_safe_for_redirect(url: str, policy: UrlPolicy) -> bool

Example:
    >>> validate_url('HTTPS://Example.COM:443/a/../page')
    ValidationResult(is_valid=True, normalized_url='https://example.com/page', code=None, message=None)
    >>> validate_url('http://192.168.0.5/admin').code
    'PRIVATE_IP'
"""

import re
import ipaddress
from urllib.parse import urlsplit, urlunsplit, quote

from paidshortener.constants import ValidationReason
from paidshortener.models import ValidationResult
from paidshortener.policies import UrlPolicy


DEFAULT_URL_POLICY = UrlPolicy()

DEFAULT_PORTS = {'http': 80, 'https': 443}

HOSTNAME_PATTERN = re.compile(r'^[a-z0-9_-]+(\.[a-z0-9_-]+)*$')
NUMERIC_HOST_PATTERN = re.compile(r'^[0-9a-fx.]+$')

# Label separators IDNA maps to '.' (RFC 3490, section 3.1)
IDNA_DOTS = '.\u3002\uff0e\uff61'

# Characters left as-is when percent-encoding each URL component ('%' keeps existing escapes intact)
PATH_SAFE = "/%:@!$&'()*+,;=~"
QUERY_SAFE = "/?%:@!$&'()*+,;=~[]"
USERINFO_SAFE = "%:!$&'()*+,;=~"


class _InvalidHost(ValueError):
    pass


def _parse_ipv4_number(part: str) -> int | None:
    if part[:2] in ('0x', '0X'):
        digits, base = part[2:], 16
    elif len(part) > 1 and part.startswith('0'):
        digits, base = part[1:], 8
    else:
        digits, base = part, 10

    if digits == '':
        return 0
    try:
        return int(digits, base)
    except ValueError:
        return None


def _parse_lenient_ipv4(host: str) -> ipaddress.IPv4Address | None:
    """Parse the numeric IPv4 host spellings browsers accept

    '2130706433', '0x7f.1' and '0177.0.0.1' all denote 127.0.0.1. Returns None when
    the host is a domain name rather than an IPv4 literal.

    Raises:
        _InvalidHost: if the host is numeric but out of range.
    """
    if not NUMERIC_HOST_PATTERN.match(host):
        return None
    parts = host.split('.')
    if len(parts) > 4 or '' in parts:
        return None

    numbers = [_parse_ipv4_number(part) for part in parts]
    if any(number is None for number in numbers):
        return None

    *leading, last = numbers
    if any(number > 255 for number in leading) or last >= 256 ** (5 - len(numbers)):
        raise _InvalidHost(f'IPv4 address {host!r} is out of range')

    value = last
    for i, number in enumerate(leading):
        value += number * 256 ** (3 - i)
    return ipaddress.IPv4Address(value)


def _canonical_host(hostname: str | None) -> tuple[str, ipaddress.IPv4Address | ipaddress.IPv6Address | None]:
    """Return the canonical (lowercase, IDNA, dotted-quad) host and its IP literal if any"""
    if not hostname:
        return '', None

    if ':' in hostname:
        try:
            ip = ipaddress.IPv6Address(hostname)
        except ValueError as e:
            raise _InvalidHost(f'invalid IPv6 literal {hostname!r}') from e
        return ip.compressed, ip

    host = hostname.rstrip(IDNA_DOTS)
    if not host.isascii():
        try:
            host = host.encode('idna').decode('ascii')
        except UnicodeError as e:
            raise _InvalidHost(f'invalid internationalized host {hostname!r}') from e
    host = host.lower()

    ip = _parse_lenient_ipv4(host)
    if ip is not None:
        return str(ip), ip
    if not HOSTNAME_PATTERN.match(host):
        raise _InvalidHost(f'invalid host {hostname!r}')
    return host, None


def _is_blocked_ip(ip: ipaddress.IPv4Address | ipaddress.IPv6Address, policy: UrlPolicy) -> bool:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip in network for network in policy.blocked_networks if network.version == ip.version)


def _is_shortener_domain(host: str, policy: UrlPolicy) -> bool:
    return any(host == domain or host.endswith(f'.{domain}') for domain in policy.shortener_domains)


def _remove_dot_segments(path: str) -> str:
    # RFC 3986, section 5.2.4
    output: list[str] = []
    for segment in path.split('/')[1:]:
        if segment == '..':
            if output:
                output.pop()
        elif segment != '.':
            output.append(segment)
    if path.split('/')[-1] in ('.', '..'):
        output.append('')
    return '/' + '/'.join(output)


def validate_url(raw: str, policy: UrlPolicy = DEFAULT_URL_POLICY) -> ValidationResult:
    """Validate an untrusted URL and compute its canonical form

    Args:
        raw (str):
            URL string as submitted by the client.
        policy (UrlPolicy):
            Bounds on acceptable URLs. Defaults to the built-in policy.

    Returns:
        ValidationResult:
            Valid with the canonical URL, or invalid with one of the
            ValidationReason codes and a human-readable message.
    """
    if not isinstance(raw, str):
        return ValidationResult.fail(ValidationReason.INVALID_FORMAT, 'URL must be a string')
    if len(raw) > policy.max_url_length:
        return ValidationResult.fail(
            ValidationReason.URL_TOO_LONG,
            f'URL exceeds maximum length of {policy.max_url_length} characters',
        )
    candidate = raw.strip()
    if not candidate:
        return ValidationResult.fail(ValidationReason.URL_EMPTY, 'URL cannot be empty')

    try:
        parts = urlsplit(candidate)
        host, ip = _canonical_host(parts.hostname)
    except ValueError:
        return ValidationResult.fail(ValidationReason.INVALID_FORMAT, 'Invalid URL format')

    scheme = parts.scheme.lower()
    if not scheme:
        return ValidationResult.fail(ValidationReason.INVALID_FORMAT, 'Invalid URL format (URL must be absolute)')

    if host in policy.blocked_hostnames:
        return ValidationResult.fail(ValidationReason.BLOCKED_HOSTNAME, 'Cannot shorten localhost or invalid addresses')
    if ip is not None and _is_blocked_ip(ip, policy):
        return ValidationResult.fail(ValidationReason.PRIVATE_IP, 'Cannot shorten private or local IP addresses')

    if scheme in policy.unsafe_schemes:
        return ValidationResult.fail(ValidationReason.UNSAFE_PROTOCOL, 'Data and JavaScript URLs are not allowed')
    if scheme not in policy.allowed_schemes:
        return ValidationResult.fail(
            ValidationReason.INVALID_PROTOCOL,
            f'Protocol {scheme}: not allowed. Only HTTP and HTTPS are supported',
        )

    if not host:
        return ValidationResult.fail(ValidationReason.INVALID_FORMAT, 'Invalid URL format (missing host)')
    try:
        port = parts.port
    except ValueError:
        return ValidationResult.fail(ValidationReason.INVALID_FORMAT, 'Invalid URL format (bad port)')

    if _is_shortener_domain(host, policy):
        return ValidationResult.fail(
            ValidationReason.SHORTENER_CHAIN,
            'Cannot shorten URLs from other URL shortening services',
        )

    path = quote(_remove_dot_segments(parts.path or '/'), safe=PATH_SAFE)
    query = quote(parts.query, safe=QUERY_SAFE)
    fragment = quote(parts.fragment, safe=QUERY_SAFE)

    if len(path) > policy.max_path_length:
        return ValidationResult.fail(ValidationReason.PATH_TOO_LONG, 'URL path is too long')
    if query and len(query) + 1 > policy.max_query_length:
        return ValidationResult.fail(ValidationReason.QUERY_TOO_LONG, 'URL query parameters are too long')

    netloc = f'[{host}]' if isinstance(ip, ipaddress.IPv6Address) else host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f'{netloc}:{port}'
    if '@' in parts.netloc:
        userinfo = parts.netloc.rpartition('@')[0]
        netloc = f'{quote(userinfo, safe=USERINFO_SAFE)}@{netloc}'

    return ValidationResult.ok(urlunsplit((scheme, netloc, path, query, fragment)))


def normalize_url(raw: str, policy: UrlPolicy = DEFAULT_URL_POLICY) -> str | None:
    """Return the canonical form of a URL, or None if it fails validation"""
    return validate_url(raw, policy).normalized_url


def is_safe_for_redirect(url: str, policy: UrlPolicy = DEFAULT_URL_POLICY) -> bool:
    """Check whether a stored URL still passes the URL policy"""
    return validate_url(url, policy).is_valid


class UrlValidator:
    """URL policy validator bound to a single UrlPolicy.

    Example:
        >>> validator = UrlValidator(UrlPolicy(max_url_length=100))
        >>> validator.validate('https://example.com/page').normalized_url
        'https://example.com/page'
    """

    def __init__(self, policy: UrlPolicy = DEFAULT_URL_POLICY):
        self.policy = policy

    def validate(self, raw: str) -> ValidationResult:
        return validate_url(raw, self.policy)

    def normalize(self, raw: str) -> str | None:
        return normalize_url(raw, self.policy)

    def is_safe_for_redirect(self, url: str) -> bool:
        return is_safe_for_redirect(url, self.policy)
