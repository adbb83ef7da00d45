"""FastAPI dependency providers for the domain and serialization helpers."""
import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from webhelpers.config import Settings, settings
from webhelpers.security.url_validator import InvalidUrlFormat
from webhelpers.serialization.provider import JsonSerializationProvider, SerializationProvider
from webhelpers.utils.domain import DomainMatcher, default_matcher

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """Application settings."""
    return settings


def get_domain_matcher() -> DomainMatcher:
    """Shared domain matcher, backed by the process-wide suffix list."""
    return default_matcher


@lru_cache(maxsize=1)
def get_serializer() -> SerializationProvider:
    """Singleton JSON serialization provider."""
    return JsonSerializationProvider()


async def require_local_referrer(
    request: Request,
    matcher: DomainMatcher = Depends(get_domain_matcher)
) -> None:
    """
    Reject requests whose Referer points at another site.

    Requests without a Referer header pass. A malformed Referer is
    treated as foreign.

    Raises:
        HTTPException: 403 if the referrer is not local
    """
    referrer = request.headers.get("referer")
    if not referrer:
        return

    try:
        is_local = matcher.is_local_referrer(referrer, str(request.url))
    except InvalidUrlFormat as e:
        logger.warning(f"Malformed referrer {referrer!r}: {e}")
        is_local = False

    if not is_local:
        logger.warning(f"Blocked foreign referrer {referrer!r} for {request.url.path}")
        raise HTTPException(status_code=403, detail="Foreign referrer")
