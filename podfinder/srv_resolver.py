"""SRV lookups on top of dnspython, with optional caching and stale fallback."""

import logging
from typing import List, Optional

import dns.exception
import dns.resolver

from podfinder.constants import DNS_LOOKUP_TIMEOUT_MILLIS
from podfinder.exceptions import DnsResolutionError
from podfinder.retained_lookups import RetainedLookups
from podfinder.types import SrvRecord, SrvLookupResult

logger = logging.getLogger(__name__)


class SrvResolver:
    """
    Synchronous SRV resolver.

    Exposes two independent knobs:
        retain_data_on_failures: serve the last successful answer for a query
            when a later lookup for it fails
        cache_lookups: let dnspython cache successful answers for their TTL

    No retries are done here beyond what dnspython does across the configured
    nameservers within the lookup lifetime.
    """

    def __init__(
        self,
        timeout_ms: int = DNS_LOOKUP_TIMEOUT_MILLIS,
        retain_data_on_failures: bool = True,
        cache_lookups: bool = False,
        resolver: Optional[dns.resolver.Resolver] = None
    ):
        """
        Initialize the SRV resolver.

        The timeout is always applied to the dnspython resolver, including one
        passed in by the caller. A dnspython cache is only installed when
        cache_lookups is set; otherwise the resolver's own cache setting is
        left untouched.

        Args:
            timeout_ms: Lookup timeout in milliseconds, applied to the whole query
            retain_data_on_failures: Serve last-known-good data on lookup failure
            cache_lookups: Cache successful answers in the dnspython resolver
            resolver: dnspython resolver to use (default: system configuration)

        Raises:
            ValueError: If timeout_ms is not positive
            DnsResolutionError: If the system resolver configuration cannot be read
        """
        if timeout_ms <= 0:
            raise ValueError(f"Invalid timeout: {timeout_ms}ms")

        self.timeout_ms = timeout_ms
        self.retain_data_on_failures = retain_data_on_failures
        self.cache_lookups = cache_lookups

        if resolver is None:
            try:
                resolver = dns.resolver.Resolver()
            except dns.exception.DNSException as e:
                logger.error(f"DNS resolver configuration unavailable: {e}")
                raise DnsResolutionError(None, str(e)) from e

        self._resolver = resolver
        self._resolver.timeout = timeout_ms / 1000.0
        self._resolver.lifetime = timeout_ms / 1000.0
        if cache_lookups:
            self._resolver.cache = dns.resolver.Cache()

        self._retained = RetainedLookups() if retain_data_on_failures else None

    def lookup(self, query: str) -> SrvLookupResult:
        """
        Look up SRV records for a FQDN.

        Args:
            query: Fully-qualified SRV name (e.g., '_discovery._tcp.my-service')

        Returns:
            SrvLookupResult; records is empty when the name has no SRV records

        Raises:
            DnsResolutionError: On NXDOMAIN, timeout or transport failure with no retained data
        """
        try:
            answer = self._resolver.resolve(query, "SRV")
            records = [self._to_record(rdata) for rdata in answer]
        except dns.resolver.NoAnswer:
            records = []
        except dns.exception.DNSException as e:
            return self._fallback(query, e)

        if self._retained is not None:
            self._retained.update(query, records)

        return SrvLookupResult(query=query, records=records, stale=False)

    def resolve(self, query: str) -> List[SrvRecord]:
        """
        Look up SRV records for a FQDN, returning only the records.

        Raises:
            DnsResolutionError: If the lookup fails with no retained data
        """
        return self.lookup(query).records

    def _fallback(self, query: str, error: dns.exception.DNSException) -> SrvLookupResult:
        if self._retained is not None:
            entry = self._retained.get(query)
            if entry is not None:
                logger.debug(
                    f"SRV lookup for '{query}' failed ({error}); "
                    f"serving {len(entry.records)} retained record(s) from {entry.last_refresh}"
                )
                return SrvLookupResult(query=query, records=list(entry.records), stale=True)

        logger.error(f"SRV lookup for '{query}' failed: {error}")
        raise DnsResolutionError(query, str(error)) from error

    @staticmethod
    def _to_record(rdata) -> SrvRecord:
        return SrvRecord(
            host=rdata.target.to_text(omit_final_dot=True),
            port=int(rdata.port),
            priority=int(rdata.priority),
            weight=int(rdata.weight)
        )

    def __repr__(self) -> str:
        return (
            f"SrvResolver(timeout_ms={self.timeout_ms}, "
            f"retain_data_on_failures={self.retain_data_on_failures}, "
            f"cache_lookups={self.cache_lookups})"
        )
