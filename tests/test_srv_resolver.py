"""Unit tests for the dnspython-backed SRV resolver."""

from unittest.mock import patch

import dns.exception
import dns.resolver
import pytest

from podfinder.exceptions import DnsResolutionError
from podfinder.srv_resolver import SrvResolver
from podfinder.types import SrvRecord

QUERY = '_discovery._tcp.my-service.default.svc.cluster.local'


class TestSrvResolverSetup:
    """Tests for resolver construction and knobs."""

    def test_timeout_applied_to_dns_resolver(self, mock_dns_resolver):
        """Test that the timeout is converted to seconds for dnspython."""
        SrvResolver(timeout_ms=1000, resolver=mock_dns_resolver)

        assert mock_dns_resolver.timeout == 1.0
        assert mock_dns_resolver.lifetime == 1.0

    def test_cache_lookups_attaches_dns_cache(self, mock_dns_resolver):
        """Test that cache_lookups installs a dnspython cache."""
        SrvResolver(cache_lookups=True, resolver=mock_dns_resolver)

        assert isinstance(mock_dns_resolver.cache, dns.resolver.Cache)

    def test_defaults(self, mock_dns_resolver):
        resolver = SrvResolver(resolver=mock_dns_resolver)

        assert resolver.cache_lookups is False
        assert resolver.retain_data_on_failures is True

    def test_caller_cache_kept_when_caching_disabled(self, mock_dns_resolver):
        """Test that a cache configured on a supplied resolver is not discarded."""
        own_cache = dns.resolver.LRUCache()
        mock_dns_resolver.cache = own_cache

        SrvResolver(cache_lookups=False, resolver=mock_dns_resolver)

        assert mock_dns_resolver.cache is own_cache

    def test_dns_cache_reused_across_lookups(self, mock_dns_resolver, two_pod_answer):
        """Test that one dnspython cache serves every lookup of the resolver."""
        mock_dns_resolver.resolve.return_value = two_pod_answer
        resolver = SrvResolver(cache_lookups=True, resolver=mock_dns_resolver)
        cache = mock_dns_resolver.cache

        resolver.lookup('_discovery._tcp.my-service')
        resolver.lookup('_discovery._tcp.my-service')

        assert mock_dns_resolver.cache is cache
        assert mock_dns_resolver.resolve.call_count == 2

    @patch('podfinder.srv_resolver.dns.resolver.Resolver')
    def test_unreadable_system_configuration(self, mock_resolver_cls):
        """Test that a missing resolv.conf surfaces as DnsResolutionError."""
        error = dns.resolver.NoResolverConfiguration("cannot open /etc/resolv.conf")
        mock_resolver_cls.side_effect = error

        with pytest.raises(DnsResolutionError, match="DNS resolver unavailable") as exc_info:
            SrvResolver()

        assert exc_info.value.query is None
        assert exc_info.value.__cause__ is error

    def test_invalid_timeout(self, mock_dns_resolver):
        """Test that a non-positive timeout raises ValueError."""
        with pytest.raises(ValueError, match="Invalid timeout"):
            SrvResolver(timeout_ms=0, resolver=mock_dns_resolver)

    @patch('podfinder.srv_resolver.dns.resolver.Resolver')
    def test_default_dns_resolver_created(self, mock_resolver_cls):
        """Test that the system resolver is used when none is given."""
        SrvResolver()

        mock_resolver_cls.assert_called_once_with()

    def test_repr_shows_knobs(self, mock_dns_resolver):
        resolver = SrvResolver(timeout_ms=500, cache_lookups=True, resolver=mock_dns_resolver)

        assert repr(resolver) == (
            "SrvResolver(timeout_ms=500, retain_data_on_failures=True, cache_lookups=True)"
        )


class TestSrvResolverLookup:
    """Tests for successful lookups."""

    def test_lookup_maps_records(self, srv_resolver, mock_dns_resolver, srv_rdata):
        """Test that SRV rdata is mapped to SrvRecord with the root dot dropped."""
        mock_dns_resolver.resolve.return_value = [
            srv_rdata('pod-a.svc', 47500, priority=1, weight=5),
        ]

        result = srv_resolver.lookup(QUERY)

        assert result.query == QUERY
        assert result.records == [SrvRecord(host='pod-a.svc', port=47500, priority=1, weight=5)]
        assert result.stale is False
        mock_dns_resolver.resolve.assert_called_once_with(QUERY, 'SRV')

    def test_lookup_no_answer_is_empty(self, srv_resolver, mock_dns_resolver):
        """Test that a name without SRV records yields an empty result."""
        mock_dns_resolver.resolve.side_effect = dns.resolver.NoAnswer()

        result = srv_resolver.lookup(QUERY)

        assert result.records == []
        assert result.stale is False

    def test_resolve_returns_records_only(self, srv_resolver, mock_dns_resolver, two_pod_answer):
        mock_dns_resolver.resolve.return_value = two_pod_answer

        records = srv_resolver.resolve(QUERY)

        assert [r.host for r in records] == ['pod-a.svc', 'pod-b.svc']

    def test_duplicate_records_pass_through(self, srv_resolver, mock_dns_resolver, srv_rdata):
        """Test that duplicate answers are not collapsed."""
        mock_dns_resolver.resolve.return_value = [
            srv_rdata('pod-a.svc', 47500),
            srv_rdata('pod-a.svc', 47500),
        ]

        assert len(srv_resolver.resolve(QUERY)) == 2


class TestSrvResolverFailures:
    """Tests for failure handling and retained data."""

    @pytest.mark.parametrize('error', [
        dns.resolver.NXDOMAIN(),
        dns.exception.Timeout(),
        dns.resolver.NoNameservers(),
    ])
    def test_failure_without_retained_data_raises(self, srv_resolver, mock_dns_resolver, error):
        """Test that DNS failures propagate when nothing was retained."""
        mock_dns_resolver.resolve.side_effect = error

        with pytest.raises(DnsResolutionError) as exc_info:
            srv_resolver.lookup(QUERY)

        assert exc_info.value.query == QUERY
        assert exc_info.value.__cause__ is error

    def test_failure_serves_retained_data(self, srv_resolver, mock_dns_resolver, two_pod_answer):
        """Test that a failure after a success returns the last good answer."""
        mock_dns_resolver.resolve.return_value = two_pod_answer
        fresh = srv_resolver.lookup(QUERY)

        mock_dns_resolver.resolve.side_effect = dns.exception.Timeout()
        stale = srv_resolver.lookup(QUERY)

        assert stale.records == fresh.records
        assert stale.stale is True

    def test_retained_data_is_per_query(self, srv_resolver, mock_dns_resolver, two_pod_answer):
        """Test that retained data for one query is not served for another."""
        mock_dns_resolver.resolve.return_value = two_pod_answer
        srv_resolver.lookup(QUERY)

        mock_dns_resolver.resolve.side_effect = dns.resolver.NXDOMAIN()
        with pytest.raises(DnsResolutionError):
            srv_resolver.lookup('_other._tcp.my-service')

    def test_retained_empty_answer_is_served(self, srv_resolver, mock_dns_resolver):
        """Test that a retained empty answer is served as empty, not as failure."""
        mock_dns_resolver.resolve.side_effect = dns.resolver.NoAnswer()
        srv_resolver.lookup(QUERY)

        mock_dns_resolver.resolve.side_effect = dns.exception.Timeout()
        result = srv_resolver.lookup(QUERY)

        assert result.records == []
        assert result.stale is True

    def test_retain_disabled_raises_after_success(self, mock_dns_resolver, two_pod_answer):
        """Test that failures propagate when retaining is switched off."""
        resolver = SrvResolver(retain_data_on_failures=False, resolver=mock_dns_resolver)
        mock_dns_resolver.resolve.return_value = two_pod_answer
        resolver.lookup(QUERY)

        mock_dns_resolver.resolve.side_effect = dns.exception.Timeout()

        with pytest.raises(DnsResolutionError):
            resolver.lookup(QUERY)

    def test_success_after_failure_refreshes(
        self, srv_resolver, mock_dns_resolver, two_pod_answer, srv_rdata
    ):
        """Test that a later success replaces the retained answer."""
        mock_dns_resolver.resolve.return_value = two_pod_answer
        srv_resolver.lookup(QUERY)

        mock_dns_resolver.resolve.return_value = [srv_rdata('pod-c.svc', 47500)]
        srv_resolver.lookup(QUERY)

        mock_dns_resolver.resolve.side_effect = dns.exception.Timeout()
        result = srv_resolver.lookup(QUERY)

        assert [r.host for r in result.records] == ['pod-c.svc']
