"""
=============================================================================
IN-MEMORY URL STORE
=============================================================================

The one piece of shared mutable state in the service: a mapping from
short code to target URL.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          UrlStore                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   _entries: {"4xq9Tb2": "https://example.com", ...}                 │
    │   _lock:    threading.Lock                                          │
    │                                                                      │
    │   get(code)        ── lock ──► lookup                               │
    │   transaction()    ── lock ──► read / check / write as one unit      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The store is created once by the server and handed to the handlers. With a
single worker the lock is uncontended; with the thread pool it serializes
the whole collision loop so that two POSTs can never both pass the
existence check and claim the same code.

No persistence, no eviction, no TTL: the mapping lives as long as the
process.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional


class UrlStore:
    """Thread-safe mapping of short code → URL."""

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, code: str) -> Optional[str]:
        """Return the URL stored under `code`, or None."""
        with self._lock:
            return self._entries.get(code)

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, str]]:
        """
        Hold the store lock and expose the underlying dict.

        Everything done inside the `with` block is atomic with respect to
        other readers and writers:

            with store.transaction() as entries:
                if code not in entries:
                    entries[code] = url

        The dict must not escape the block.
        """
        with self._lock:
            yield self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, code: object) -> bool:
        with self._lock:
            return code in self._entries
