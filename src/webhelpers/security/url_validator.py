"""URL parsing boundary and host classification."""
import re
import ipaddress
from urllib.parse import urlsplit, SplitResult, ParseResult
from typing import Optional, Union

UrlLike = Union[str, SplitResult, ParseResult]

# One DNS label: letters/digits (any script), hyphen and underscore, no edge hyphen
DNS_LABEL_RE = re.compile(r"(?!-)[\w-]{1,63}(?<!-)", re.UNICODE)


class UrlError(ValueError):
    """Base class for URL errors."""
    code = "INVALID_URL"


class InvalidUrlFormat(UrlError):
    """Input cannot be parsed as an absolute URL."""
    code = "INVALID_URL_FORMAT"


class InvalidUrlCombination(UrlError):
    """Base and relative URL cannot be resolved to an absolute URL."""
    code = "INVALID_URL_COMBINATION"


def parse_url(url: UrlLike) -> Union[SplitResult, ParseResult]:
    """
    Parse an absolute URL.
    
    Already parsed values are returned as-is after the same checks.
    
    Raises:
        InvalidUrlFormat: If the URL is missing, has no scheme or no host
    """
    if isinstance(url, (SplitResult, ParseResult)):
        parsed = url
    elif isinstance(url, str) and url.strip():
        try:
            parsed = urlsplit(url.strip())
        except ValueError as e:
            raise InvalidUrlFormat(f"Malformed URL {url!r}: {e}") from e
    else:
        raise InvalidUrlFormat("URL must be a non-empty string")
    
    if not parsed.scheme:
        raise InvalidUrlFormat(f"URL must be absolute (missing scheme): {url!r}")
    
    try:
        hostname = parsed.hostname
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidUrlFormat(f"Malformed URL {url!r}: {e}") from e
    
    if not hostname:
        raise InvalidUrlFormat(f"URL must have a host: {url!r}")
    
    return parsed


def trimmed_host(url: UrlLike) -> str:
    """Return the lower-cased host of url without a trailing dot."""
    host = parse_url(url).hostname
    return host[:-1] if host.endswith('.') else host


def is_ip_address(hostname: str) -> bool:
    """Check if hostname is an IPv4 or IPv6 literal."""
    try:
        ipaddress.ip_address(hostname)
        return True
    except ValueError:
        return False


def is_dns_host(hostname: Optional[str]) -> bool:
    """Check if hostname is a DNS-style name rather than an IP literal."""
    if not hostname or is_ip_address(hostname):
        return False
    
    host = hostname[:-1] if hostname.endswith('.') else hostname
    return all(DNS_LABEL_RE.fullmatch(label) for label in host.split('.'))
