"""
Kubernetes pod IP finder.

Pods of a clustered service need each other's direct addresses; proxies do
not work for peer discovery. Rather than querying the Kubernetes API for
service endpoints, the finder relies on the cluster DNS and looks the peers
up with SRV queries.
"""

import threading
from typing import List, Mapping, Optional, Protocol, runtime_checkable

from podfinder.config import FinderSettings, build_settings, build_srv_query, load_settings
from podfinder.dns_discovery import LookupObserver, log_lookup_event, resolve_endpoints
from podfinder.exceptions import FinderConfigurationError
from podfinder.logging_config import get_logger
from podfinder.srv_resolver import SrvResolver
from podfinder.types import Endpoint

logger = get_logger(__name__)


@runtime_checkable
class IpFinder(Protocol):
    """Contract the host discovery protocol depends on."""

    def get_registered_addresses(self) -> List[Endpoint]:
        ...

    def is_shared(self) -> bool:
        ...


class KubernetesPodIpFinder:
    """
    IP finder that seeds cluster membership from DNS SRV records.

    Configuration is write-once: each setter may be called at most once and
    only before the first lookup. On first lookup the configuration is frozen
    into an immutable FinderSettings and a single SrvResolver is created, so
    retained and cached DNS data survive across calls.

    Thread-safe: one lock covers the setters and the lookup.
    """

    def __init__(
        self,
        shared: bool = True,
        settings: Optional[FinderSettings] = None,
        srv_resolver: Optional[SrvResolver] = None,
        observer: Optional[LookupObserver] = log_lookup_event
    ):
        """
        Initialize the finder.

        Args:
            shared: Whether the host treats the address list as shared
            settings: Complete configuration; when given, setters are rejected
            srv_resolver: DNS layer to use (default: built from settings on first lookup)
            observer: Hook receiving lookup events (default: debug logging)
        """
        self._shared = shared
        self._lock = threading.RLock()
        self._observer = observer
        self._srv_resolver = srv_resolver

        self._service_name: Optional[str] = None
        self._container_port_name: Optional[str] = None
        self._settings: Optional[FinderSettings] = settings

        if settings is not None:
            self._service_name = settings.service_name
            self._container_port_name = settings.container_port_name

    @classmethod
    def from_settings(cls, settings: FinderSettings, **kwargs) -> "KubernetesPodIpFinder":
        """Create a finder with its configuration already frozen."""
        return cls(settings=settings, **kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "KubernetesPodIpFinder":
        """
        Create a finder configured from PODFINDER_* environment variables.

        Raises:
            FinderConfigurationError: If the environment holds no usable configuration
        """
        return cls(settings=load_settings(environ), **kwargs)

    def set_service_name(self, service_name: str) -> None:
        """
        Set the service name used in lookup queries.

        Args:
            service_name: Base DNS name of the service

        Raises:
            FinderConfigurationError: If empty, already set, or the finder is in use
        """
        with self._lock:
            self._check_configurable("service name", self._service_name)
            if not service_name or not service_name.strip():
                raise FinderConfigurationError("service name cannot be empty")
            self._service_name = service_name.strip()

    def set_container_port_name(self, container_port_name: str) -> None:
        """
        Set the container port name used in lookup queries.

        Optional; without it the service name is queried verbatim.

        Raises:
            FinderConfigurationError: If empty, already set, or the finder is in use
        """
        with self._lock:
            self._check_configurable("container port name", self._container_port_name)
            if not container_port_name or not container_port_name.strip():
                raise FinderConfigurationError("container port name cannot be empty")
            self._container_port_name = container_port_name.strip()

    def _check_configurable(self, what: str, current: Optional[str]) -> None:
        if self._settings is not None:
            raise FinderConfigurationError(
                f"cannot set {what}: finder configuration is frozen"
            )
        if current is not None:
            raise FinderConfigurationError(f"{what} already set to '{current}'")

    @property
    def service_name(self) -> Optional[str]:
        return self._service_name

    @property
    def container_port_name(self) -> Optional[str]:
        return self._container_port_name

    def is_shared(self) -> bool:
        return self._shared

    def get_registered_addresses(self) -> List[Endpoint]:
        """
        Resolve the current membership seed list.

        Returns:
            Endpoints from the SRV answer; empty list when no records resolve

        Raises:
            FinderConfigurationError: If the service name was never set
            DnsResolutionError: If DNS fails and no retained data exists, or the
                system resolver configuration cannot be read
        """
        with self._lock:
            settings = self._freeze()
            if self._srv_resolver is None:
                self._srv_resolver = SrvResolver(
                    timeout_ms=settings.dns_timeout_ms,
                    retain_data_on_failures=settings.retain_data_on_failures,
                    cache_lookups=settings.cache_lookups
                )
            return resolve_endpoints(settings, self._srv_resolver, self._observer)

    def resolve_endpoints(self) -> List[Endpoint]:
        """Alias of get_registered_addresses()."""
        return self.get_registered_addresses()

    def _freeze(self) -> FinderSettings:
        if self._settings is None:
            build_srv_query(self._service_name, self._container_port_name)
            self._settings = build_settings(
                service_name=self._service_name,
                container_port_name=self._container_port_name
            )
            logger.info(f"Pod IP finder configured: {self}")
        return self._settings

    def __repr__(self) -> str:
        return (
            f"KubernetesPodIpFinder [service_name={self._service_name}, "
            f"container_port_name={self._container_port_name}, "
            f"shared={self._shared}, "
            f"srv_resolver={self._srv_resolver!r}]"
        )

    __str__ = __repr__
