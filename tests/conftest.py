"""Shared pytest fixtures for all tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import dns.name
import dns.resolver
import pytest

from podfinder.config import FinderSettings
from podfinder.srv_resolver import SrvResolver


def make_srv_rdata(host, port, priority=10, weight=100):
    """
    Build an object shaped like a dnspython SRV rdata.

    Args:
        host: SRV target, absolute or relative
        port: SRV port

    Returns:
        Object exposing target, port, priority and weight
    """
    target = host if host.endswith('.') else host + '.'
    return SimpleNamespace(
        target=dns.name.from_text(target),
        port=port,
        priority=priority,
        weight=weight
    )


@pytest.fixture
def mock_dns_resolver():
    """
    dnspython resolver double with an empty default answer.

    Returns:
        MagicMock standing in for dns.resolver.Resolver
    """
    resolver = MagicMock(spec=dns.resolver.Resolver)
    resolver.resolve.return_value = []
    return resolver


@pytest.fixture
def srv_resolver(mock_dns_resolver):
    """SrvResolver with retained data enabled, backed by the mock resolver."""
    return SrvResolver(resolver=mock_dns_resolver)


@pytest.fixture
def discovery_settings():
    """Settings for the 'discovery' port of my-service."""
    return FinderSettings(
        service_name='my-service.default.svc.cluster.local',
        container_port_name='discovery'
    )


@pytest.fixture
def two_pod_answer():
    """SRV answer with two pods on the discovery port."""
    return [
        make_srv_rdata('pod-a.svc', 47500),
        make_srv_rdata('pod-b.svc', 47500),
    ]


@pytest.fixture
def srv_rdata():
    """Factory for dnspython-shaped SRV rdata."""
    return make_srv_rdata
