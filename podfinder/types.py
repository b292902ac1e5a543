"""Shared data type definitions (Endpoint, SrvRecord, SrvLookupResult)."""

from dataclasses import dataclass, field
from typing import List

from podfinder.constants import MAX_PORT


@dataclass(frozen=True)
class Endpoint:
    """
    A discovered peer address.

    Host is the SRV target name as returned by DNS; it is never resolved
    to an IP address here.
    """
    host: str
    port: int

    def __post_init__(self):
        if self.port < 0 or self.port > MAX_PORT:
            raise ValueError(f"Invalid port number: {self.port}")

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class SrvRecord:
    """
    A single SRV answer.
    """
    host: str
    port: int
    priority: int = 0
    weight: int = 0

    def to_endpoint(self) -> Endpoint:
        return Endpoint(host=self.host, port=self.port)


@dataclass(frozen=True)
class SrvLookupResult:
    """
    Outcome of one SRV query.

    Attributes:
        query: FQDN that was looked up
        records: SRV answers, in the order DNS returned them
        stale: True when records were served from retained data after a failure
    """
    query: str
    records: List[SrvRecord] = field(default_factory=list)
    stale: bool = False
