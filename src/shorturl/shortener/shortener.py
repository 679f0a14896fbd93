"""
=============================================================================
URL SHORTENER - COLLISION POLICY
=============================================================================

Assigns a short code to a URL and records it in the store.

=============================================================================
SALTED RETRY
=============================================================================

    attempt 0:   code = encode(url)
    attempt 1:   code = encode(url + ":1")
    attempt 2:   code = encode(url + ":2")
       ...
    attempt 10:  code = encode(url + ":10")      ← last try
                 still taken → CollisionError

    For each candidate:

        store[code] missing        → insert, done
        store[code] == url         → already shortened, done (no insert)
        store[code] == other URL   → collision, next attempt

At most 11 hashes are computed per request, so a pathological store can
never make a single POST spin.

The whole loop runs inside one store transaction: the lookup and the
insert are a single atomic step even when connections are handled by
several worker threads.
"""

import logging

from .encoder import encode
from .store import UrlStore


logger = logging.getLogger(__name__)


DEFAULT_MAX_ATTEMPTS = 10


class CollisionError(Exception):
    """
    Raised when every salted candidate is already taken by another URL.

    Surfaces to the client as 500 Internal Server Error.
    """

    def __init__(self, url: str, attempts: int):
        super().__init__(f"Could not find a free short code after {attempts} retries")
        self.url = url
        self.attempts = attempts


def candidate_code(url: str, attempt: int) -> str:
    """Short code tried for `url` on the given attempt (0 = unsalted)."""
    if attempt == 0:
        return encode(url)
    return encode(f"{url}:{attempt}")


def shorten_url(url: str, store: UrlStore, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> str:
    """
    Return the short code for `url`, inserting it into `store` if needed.

    Args:
        url: The target URL (already validated by the caller).
        store: The shared URL store.
        max_attempts: Number of salted retries after the first collision.

    Returns:
        The short code now mapped to `url`.

    Raises:
        CollisionError: If attempts 0..max_attempts all collide.
    """
    with store.transaction() as entries:
        for attempt in range(max_attempts + 1):
            code = candidate_code(url, attempt)
            existing = entries.get(code)

            if existing == url:
                # Same URL shortened before; idempotent create
                return code

            if existing is None:
                entries[code] = url
                if attempt:
                    logger.debug(f"Resolved collision for {code} after {attempt} retries")
                return code

            logger.debug(f"Code {code} taken (attempt {attempt}), salting")

    raise CollisionError(url, max_attempts)
