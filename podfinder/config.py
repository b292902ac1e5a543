"""Configuration settings for the pod IP finder."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from podfinder.constants import (
    DNS_LOOKUP_TIMEOUT_MILLIS,
    SRV_PROTOCOL_LABEL,
    DEFAULT_RETAIN_DATA_ON_FAILURES,
    DEFAULT_CACHE_LOOKUPS,
    ENV_SERVICE_NAME,
    ENV_CONTAINER_PORT_NAME,
    ENV_DNS_TIMEOUT_MS,
    ENV_RETAIN_DATA_ON_FAILURES,
    ENV_CACHE_LOOKUPS,
)
from podfinder.exceptions import FinderConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class FinderSettings(BaseModel):
    """
    Immutable finder configuration.

    Built once, before the first lookup, and handed to the stateless
    resolution function.
    """
    model_config = ConfigDict(frozen=True)

    service_name: str
    container_port_name: Optional[str] = None
    dns_timeout_ms: int = DNS_LOOKUP_TIMEOUT_MILLIS
    retain_data_on_failures: bool = DEFAULT_RETAIN_DATA_ON_FAILURES
    cache_lookups: bool = DEFAULT_CACHE_LOOKUPS

    @field_validator("service_name")
    @classmethod
    def _check_service_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("service_name cannot be empty")
        return value.strip()

    @field_validator("container_port_name")
    @classmethod
    def _check_container_port_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        if not value.strip():
            raise ValueError("container_port_name cannot be empty")
        return value.strip()

    @field_validator("dns_timeout_ms")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"dns_timeout_ms must be positive, got {value}")
        return value

    @property
    def srv_query(self) -> str:
        """FQDN used for the SRV lookup."""
        return build_srv_query(self.service_name, self.container_port_name)


def build_srv_query(service_name: Optional[str], container_port_name: Optional[str] = None) -> str:
    """
    Build the SRV query FQDN.

    Args:
        service_name: Base DNS name (e.g., 'my-service.default.svc.cluster.local')
        container_port_name: Named container port (e.g., 'discovery')

    Returns:
        '_<port>._tcp.<service>' when a port name is given, else service_name verbatim

    Raises:
        FinderConfigurationError: If service_name is missing
    """
    if not service_name:
        if container_port_name:
            raise FinderConfigurationError(
                f"container port name '{container_port_name}' set without a service name"
            )
        raise FinderConfigurationError("service name must be set before lookup")

    if container_port_name:
        return f"_{container_port_name}.{SRV_PROTOCOL_LABEL}.{service_name}"
    return service_name


def build_settings(**values) -> FinderSettings:
    """
    Build validated settings, reporting problems as configuration errors.

    Raises:
        FinderConfigurationError: If any value is missing or invalid
    """
    try:
        return FinderSettings(**values)
    except ValidationError as e:
        raise FinderConfigurationError(f"Invalid finder configuration: {e}") from e


def _parse_bool(name: str, raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise FinderConfigurationError(f"{name} must be a boolean, got '{raw}'")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> FinderSettings:
    """
    Load finder settings from environment variables.

    Args:
        environ: Mapping to read from (default: os.environ)

    Returns:
        Validated FinderSettings

    Raises:
        FinderConfigurationError: If PODFINDER_SERVICE_NAME is missing or a value is malformed
    """
    if environ is None:
        environ = os.environ

    raw_timeout = environ.get(ENV_DNS_TIMEOUT_MS, str(DNS_LOOKUP_TIMEOUT_MILLIS))
    try:
        timeout_ms = int(raw_timeout)
    except ValueError as e:
        raise FinderConfigurationError(
            f"{ENV_DNS_TIMEOUT_MS} must be an integer, got '{raw_timeout}'"
        ) from e

    return build_settings(
        service_name=environ.get(ENV_SERVICE_NAME, ""),
        container_port_name=environ.get(ENV_CONTAINER_PORT_NAME) or None,
        dns_timeout_ms=timeout_ms,
        retain_data_on_failures=_parse_bool(
            ENV_RETAIN_DATA_ON_FAILURES,
            environ.get(ENV_RETAIN_DATA_ON_FAILURES),
            DEFAULT_RETAIN_DATA_ON_FAILURES,
        ),
        cache_lookups=_parse_bool(
            ENV_CACHE_LOOKUPS,
            environ.get(ENV_CACHE_LOOKUPS),
            DEFAULT_CACHE_LOOKUPS,
        ),
    )
