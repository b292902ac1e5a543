"""DNS SRV based IP finder for clustered services on Kubernetes."""

from podfinder.config import FinderSettings, build_srv_query, load_settings
from podfinder.dns_discovery import (
    resolve_endpoints,
    validate_srv_resolution,
    get_endpoint_count,
)
from podfinder.exceptions import (
    FinderError,
    FinderConfigurationError,
    DnsResolutionError,
)
from podfinder.ip_finder import IpFinder, KubernetesPodIpFinder
from podfinder.logging_config import get_logger, setup_logging
from podfinder.srv_resolver import SrvResolver
from podfinder.types import Endpoint, SrvRecord, SrvLookupResult

__all__ = [
    "FinderSettings",
    "build_srv_query",
    "load_settings",
    "resolve_endpoints",
    "validate_srv_resolution",
    "get_endpoint_count",
    "FinderError",
    "FinderConfigurationError",
    "DnsResolutionError",
    "IpFinder",
    "KubernetesPodIpFinder",
    "get_logger",
    "setup_logging",
    "SrvResolver",
    "Endpoint",
    "SrvRecord",
    "SrvLookupResult",
]
