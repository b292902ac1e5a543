"""Project-wide constants (DNS timeouts, SRV query parts, env var names)."""

DNS_LOOKUP_TIMEOUT_MILLIS: int = 1000
SRV_PROTOCOL_LABEL: str = "_tcp"

MAX_PORT: int = 65535

ENV_SERVICE_NAME = "PODFINDER_SERVICE_NAME"
ENV_CONTAINER_PORT_NAME = "PODFINDER_CONTAINER_PORT_NAME"
ENV_DNS_TIMEOUT_MS = "PODFINDER_DNS_TIMEOUT_MS"
ENV_RETAIN_DATA_ON_FAILURES = "PODFINDER_RETAIN_DATA_ON_FAILURES"
ENV_CACHE_LOOKUPS = "PODFINDER_CACHE_LOOKUPS"

DEFAULT_RETAIN_DATA_ON_FAILURES: bool = True
DEFAULT_CACHE_LOOKUPS: bool = False
