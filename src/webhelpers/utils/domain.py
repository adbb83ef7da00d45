"""Domain extraction using eTLD+1 (main domain) and related URL helpers."""
import logging
import re
from typing import List, NamedTuple, Optional
from urllib.parse import urlsplit

from rfc3986 import uri_reference, validators
from rfc3986.exceptions import RFC3986Exception

from webhelpers.config import settings
from webhelpers.security.url_validator import (
    InvalidUrlCombination,
    InvalidUrlFormat,
    UrlLike,
    is_dns_host,
    parse_url,
    trimmed_host,
)
from webhelpers.utils.suffix_list import LazySuffixList, SuffixList, suffix_list

logger = logging.getLogger(__name__)


class DomainMatchResult(NamedTuple):
    """Registrable domain of a host and whether a suffix-list entry produced it."""
    domain: str
    matched_suffix: bool


def split_host_labels(host: str) -> List[str]:
    """Split a host into labels, ignoring one trailing dot."""
    if host.endswith('.'):
        host = host[:-1]
    return host.split('.')


class DomainMatcher:
    """
    Classify URLs by registrable domain using a public suffix list.

    Matching is label-aligned by default: suffix "co.uk" matches
    "shop.example.co.uk" but not "www.evilnotco.uk". With
    ``label_aligned=False`` any case-insensitive string suffix counts, so
    the second host above is matched by "co.uk" and its domain becomes
    "www.evilnotco.uk".
    """

    def __init__(
        self,
        suffixes: Optional[LazySuffixList] = None,
        label_aligned: bool = True,
        strict_extension: bool = False
    ):
        self._suffixes = suffixes or suffix_list
        self.label_aligned = label_aligned
        self.strict_extension = strict_extension

    @property
    def suffixes(self) -> SuffixList:
        return self._suffixes.get()

    def domain_of(self, url: Optional[UrlLike]) -> DomainMatchResult:
        """
        Extract main domain (eTLD+1) from URL.

        Examples:
            - https://localhost/ -> ("localhost", False)
            - https://example.com/ -> ("example.com", False)
            - https://a.example.com/path -> ("example.com", True)
            - https://www.example.co.uk/path -> ("example.co.uk", True)

        An absent URL gives ("", False).

        Raises:
            InvalidUrlFormat: If url is present but not an absolute URL
        """
        if url is None or (isinstance(url, str) and not url.strip()):
            return DomainMatchResult("", False)

        host = trimmed_host(url)
        labels = host.split('.')

        # localhost, example.com
        if len(labels) <= 2:
            return DomainMatchResult(host, False)

        best_match = self._best_match(labels)
        if not best_match:
            logger.debug(f"No public suffix matched {host}, using full hostname")
            return DomainMatchResult(host, False)

        # A host that is itself a suffix entry, or too short for entry + 1
        # labels, is returned whole
        keep = best_match.count('.') + 2
        return DomainMatchResult('.'.join(labels[-keep:]), True)

    def _best_match(self, labels: List[str]) -> str:
        suffixes = self.suffixes

        if self.label_aligned:
            # Longest label-aligned candidate first
            for i in range(len(labels)):
                candidate = '.'.join(labels[i:]).lower()
                if candidate in suffixes:
                    return candidate
            return ""

        host = '.'.join(labels).lower()
        best_match = ""
        for suffix in suffixes:
            if len(suffix) > len(best_match) and host.endswith(suffix):
                best_match = suffix
        return best_match

    def subdomain_of(self, url: UrlLike) -> Optional[str]:
        """
        Return everything before the second-to-last dot of the host.

        The suffix list is not consulted, so for multi-label suffixes the
        result keeps one label too many ("a.example.co.uk" -> "a.example").
        """
        host = trimmed_host(url)
        if not is_dns_host(host):
            return None

        if len(host.split('.')) <= 2:
            return None

        last_dot = host.rindex('.')
        second_last_dot = host.rindex('.', 0, last_dot)
        return host[:second_last_dot]

    def host_without_subdomain(self, url: UrlLike) -> str:
        """Return the host with its subdomain removed."""
        host = trimmed_host(url)
        subdomain = self.subdomain_of(url)
        if subdomain is None:
            return host

        return re.sub(re.escape(f"{subdomain}."), "", host, count=1, flags=re.IGNORECASE)

    def same_domain(self, url_a: UrlLike, url_b: UrlLike) -> bool:
        """Check if both URLs share a registrable domain."""
        return self.domain_of(url_a).domain.lower() == self.domain_of(url_b).domain.lower()

    def is_local_referrer(self, referrer: UrlLike, url: UrlLike) -> bool:
        """Check if referrer has the same host or the same domain as url."""
        if trimmed_host(referrer).lower() == trimmed_host(url).lower():
            return True
        return self.same_domain(referrer, url)

    def is_referrer_to_this_site(self, url: Optional[UrlLike], site_root_url: Optional[str]) -> bool:
        """Check if url belongs to the same domain as the site root."""
        if _is_blank(url) or _is_blank(site_root_url):
            return False

        site_domain = self.domain_of(site_root_url).domain
        return self.domain_of(url).domain.lower() == site_domain.lower()

    def get_url_extension(self, url: Optional[UrlLike], strict: Optional[bool] = None) -> str:
        """
        Return the file extension of the URL's path and query.

        The extension starts at the last "." after the last "/", so it
        keeps any query that follows it ("/app.js?v=2" -> ".js?v=2").
        A trailing "." has no extension.

        Args:
            url: URL to inspect
            strict: Raise instead of returning "" on failure. Defaults to
                the matcher's strict_extension setting.

        Raises:
            InvalidUrlFormat: Only in strict mode
        """
        if strict is None:
            strict = self.strict_extension

        try:
            if url is None:
                raise InvalidUrlFormat("URL must not be None")

            # Round-trip so ParseResult params stay in the path
            parsed = urlsplit(parse_url(url).geturl())
            path_and_query = parsed.path or '/'
            if parsed.query:
                path_and_query += f"?{parsed.query}"

            dot = path_and_query.rfind('.')
            if dot <= path_and_query.rfind('/') or dot == len(path_and_query) - 1:
                return ""
            return path_and_query[dot:]

        except InvalidUrlFormat as e:
            if strict:
                raise
            logger.debug(f"Could not extract extension from {url!r}: {e}")
            return ""

    def is_application_page(self, url: UrlLike) -> bool:
        """Check if the URL has no file extension (a routed page, not a static file)."""
        return not self.get_url_extension(url).strip()

    @staticmethod
    def combine_url(base_url: str, relative_url: str) -> str:
        """
        Resolve relative_url against base_url (RFC 3986 section 5).

        Any scheme resolves, so "file:///srv/a/" + "b.html" and
        "custom://host/a/" + "b.html" work, and an absolute reference
        such as "mailto:a@b.com" replaces the base.

        Raises:
            InvalidUrlCombination: If base_url has no scheme or the result
                is not a valid absolute URI
        """
        try:
            base = _checked_uri(uri_reference(base_url or "")).copy_with(fragment=None)
            combined = uri_reference(relative_url or "").resolve_with(base)
            return _checked_uri(combined).unsplit()
        except RFC3986Exception as e:
            raise InvalidUrlCombination(
                f"Unable to combine {base_url} with {relative_url}: {e}"
            ) from e


def _checked_uri(uri):
    validator = validators.Validator().require_presence_of("scheme").check_validity_of(
        "scheme", "path", "query", "fragment"
    )
    if uri.authority:
        validator = validator.check_validity_of("host", "port")
    validator.validate(uri)
    return uri


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# Global matcher configured from settings
default_matcher = DomainMatcher(
    label_aligned=settings.label_aligned_matching,
    strict_extension=settings.strict_extension
)


def domain_of(url: Optional[UrlLike]) -> DomainMatchResult:
    return default_matcher.domain_of(url)


def subdomain_of(url: UrlLike) -> Optional[str]:
    return default_matcher.subdomain_of(url)


def host_without_subdomain(url: UrlLike) -> str:
    return default_matcher.host_without_subdomain(url)


def same_domain(url_a: UrlLike, url_b: UrlLike) -> bool:
    return default_matcher.same_domain(url_a, url_b)


def is_local_referrer(referrer: UrlLike, url: UrlLike) -> bool:
    return default_matcher.is_local_referrer(referrer, url)


def is_referrer_to_this_site(url: Optional[UrlLike], site_root_url: Optional[str]) -> bool:
    return default_matcher.is_referrer_to_this_site(url, site_root_url)


def get_url_extension(url: Optional[UrlLike], strict: Optional[bool] = None) -> str:
    return default_matcher.get_url_extension(url, strict)


def is_application_page(url: UrlLike) -> bool:
    return default_matcher.is_application_page(url)


def combine_url(base_url: str, relative_url: str) -> str:
    return DomainMatcher.combine_url(base_url, relative_url)
