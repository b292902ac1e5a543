"""Custom exception classes for the pod IP finder."""

from typing import Optional


class FinderError(Exception):
    """
    Base exception class for all finder-related errors.
    """
    pass


class FinderConfigurationError(FinderError, ValueError):
    """
    Raised when the finder is misconfigured or reconfigured after use.
    """
    pass


class DnsResolutionError(FinderError):
    """
    Raised when a SRV lookup fails and no retained data is available.

    query is None when the failure happened before any query could be
    issued, e.g. the system resolver configuration is unreadable.
    """

    def __init__(self, query: Optional[str], message: str):
        if query is None:
            super().__init__(f"DNS resolver unavailable: {message}")
        else:
            super().__init__(f"SRV lookup failed for '{query}': {message}")
        self.query = query
