"""Time-bounded memoization of resolved software identities.

The cache maps a normalized domain to the identity it last reported and the
time that identity was last known to be fresh. Entries are never evicted.
A stale entry is hidden from ``get`` but stays in place until the next
successful resolution overwrites it, so a snapshot taken at shutdown still
contains it.

Lazy adoption
-------------
Entries bulk-loaded from a snapshot carry no observation time. The first
``get`` for such an entry treats it as fresh and stamps it with the current
time, so its TTL window starts at first use rather than at process start.
Restarting the service therefore does not throw away everything it learned
during the previous run. This is intentional cold-start behavior: do not
change it to treat timestamp-less entries as stale.
"""

from dataclasses import dataclass
import threading
import time
from typing import Callable, Dict, Mapping, Optional, Tuple

from social.graze.fedinfo.model.software import SoftwareIdentity

DEFAULT_TTL: float = 3600.0


@dataclass
class CacheEntry:
    value: SoftwareIdentity
    observed_at: Optional[float] = None


class SoftwareCache:
    """
    TTL cache of software identities keyed by domain.

    Every operation takes the same exclusive lock for its whole duration. The
    lock is never held across an await, so it is safe to use from coroutines.
    Concurrent misses for the same domain are not coalesced: each caller
    fetches independently and the last ``set`` wins.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, domain: str) -> Tuple[SoftwareIdentity, bool]:
        """
        Look up the identity stored for a domain.

        Returns:
            ``(identity, True)`` when a fresh entry exists, otherwise
            ``(SoftwareIdentity(), False)``. Stale entries are left in place.
        """
        with self._lock:
            entry = self._entries.get(domain)
            if entry is None:
                return SoftwareIdentity(), False

            now = self._clock()
            if entry.observed_at is None:
                entry.observed_at = now
                return entry.value, True

            if now - entry.observed_at > self.ttl:
                return SoftwareIdentity(), False
            return entry.value, True

    def set(self, domain: str, value: SoftwareIdentity) -> None:
        with self._lock:
            self._entries[domain] = CacheEntry(value=value, observed_at=self._clock())

    def load(self, entries: Mapping[str, SoftwareIdentity]) -> None:
        """Seed the cache from a snapshot. Loaded entries have no observation time."""
        with self._lock:
            for domain, value in entries.items():
                self._entries[domain] = CacheEntry(value=value)

    def dump(self) -> Dict[str, SoftwareIdentity]:
        """Copy out every stored identity, stale ones included, for persistence."""
        with self._lock:
            return {domain: entry.value for domain, entry in self._entries.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, domain: object) -> bool:
        with self._lock:
            return domain in self._entries
