"""DNS SRV based peer discovery for Kubernetes services."""

import logging
from typing import Any, Callable, Dict, List, Optional

from podfinder.config import FinderSettings, build_srv_query
from podfinder.exceptions import DnsResolutionError
from podfinder.srv_resolver import SrvResolver
from podfinder.types import Endpoint

logger = logging.getLogger(__name__)

__all__ = [
    "build_srv_query",
    "resolve_endpoints",
    "validate_srv_resolution",
    "get_endpoint_count",
    "log_lookup_event",
]

LookupObserver = Callable[[str, Dict[str, Any]], None]

LOOKUP_STARTED = "srv_lookup_started"
LOOKUP_FINISHED = "srv_lookup_finished"


def log_lookup_event(event: str, fields: Dict[str, Any]) -> None:
    """Default observer: one debug line per lookup event."""
    if event == LOOKUP_STARTED:
        logger.debug(f"Looking up SRV records with FQDN [{fields['query']}]")
    elif event == LOOKUP_FINISHED:
        logger.debug(f"Found {fields['count']} node(s) for [{fields['query']}]")


def _notify(observer: Optional[LookupObserver], event: str, fields: Dict[str, Any]) -> None:
    if observer is None:
        return
    try:
        observer(event, fields)
    except Exception as e:
        logger.warning(f"Lookup observer failed on {event}: {e}", exc_info=True)


def resolve_endpoints(
    settings: FinderSettings,
    resolver: SrvResolver,
    observer: Optional[LookupObserver] = log_lookup_event
) -> List[Endpoint]:
    """
    Resolve the configured service to its peer endpoints.

    Issues a single SRV lookup and maps every record to an Endpoint. Hosts
    are kept as DNS names; duplicates are passed through and no ordering
    is imposed.

    Args:
        settings: Immutable finder configuration
        resolver: DNS layer to query
        observer: Optional hook receiving lookup events (default: debug logging)

    Returns:
        List of endpoints; empty when the name has no SRV records

    Raises:
        DnsResolutionError: If the lookup fails and no retained data exists
    """
    query = settings.srv_query

    _notify(observer, LOOKUP_STARTED, {"query": query})
    result = resolver.lookup(query)
    endpoints = [record.to_endpoint() for record in result.records]
    _notify(observer, LOOKUP_FINISHED, {
        "query": query,
        "count": len(endpoints),
        "stale": result.stale
    })

    if result.stale:
        logger.warning(
            f"Serving {len(endpoints)} retained endpoint(s) for [{query}] after DNS failure"
        )

    return endpoints


def validate_srv_resolution(settings: FinderSettings, resolver: SrvResolver) -> bool:
    """
    Validate that the configured service resolves to at least one endpoint.

    Non-throwing wrapper for startup validation.

    Returns:
        True if at least one endpoint is found, False otherwise
    """
    try:
        return len(resolve_endpoints(settings, resolver, observer=None)) > 0
    except DnsResolutionError:
        return False


def get_endpoint_count(settings: FinderSettings, resolver: SrvResolver) -> int:
    """
    Count endpoints discovered via DNS.

    Non-throwing wrapper useful for diagnostics.

    Returns:
        Number of endpoints resolved (0 if resolution fails)
    """
    try:
        return len(resolve_endpoints(settings, resolver, observer=None))
    except DnsResolutionError:
        return 0
