"""
Last-known-good store for SRV answers.

Lets the DNS layer fall back to the previous successful answer for a query
when a later lookup fails, so discovery does not regress to zero peers during
a transient DNS outage.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

from podfinder.types import SrvRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetainedEntry:
    """
    Retained answer for one query.

    Attributes:
        records: SRV records from the last successful lookup
        last_refresh: ISO8601 UTC timestamp of that lookup
    """
    records: List[SrvRecord]
    last_refresh: str


class RetainedLookups:
    """
    Thread-safe in-memory store of the last successful answer per query.

    Entries are replaced on every successful lookup and never expire.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[str, RetainedEntry] = {}

    def get(self, query: str) -> Optional[RetainedEntry]:
        """
        Retrieve the retained answer for a query.

        Args:
            query: SRV query FQDN

        Returns:
            RetainedEntry, or None if the query never succeeded
        """
        with self._lock:
            entry = self._entries.get(query)

        if entry is not None:
            logger.debug(
                f"Retained data hit for {query} -> {len(entry.records)} record(s) "
                f"from {entry.last_refresh}"
            )
        return entry

    def update(self, query: str, records: List[SrvRecord]) -> None:
        """
        Replace the retained answer with fresh DNS results.

        Args:
            query: SRV query FQDN
            records: Records from a successful lookup (may be empty)
        """
        entry = RetainedEntry(
            records=list(records),
            last_refresh=datetime.now(timezone.utc).isoformat()
        )
        with self._lock:
            self._entries[query] = entry

    def clear(self) -> None:
        """Drop every retained answer."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
