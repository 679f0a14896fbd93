"""
=============================================================================
SHORTENER DOMAIN
=============================================================================

Everything that is about short codes rather than about HTTP:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ encoder.py    string → 48-bit hash → Base62 code (≤ 7 chars)        │
    │ shortener.py  collision detection and salted retry                  │
    │ store.py      thread-safe in-memory code → URL mapping              │
    │ auth.py       Basic Authentication check for write requests         │
    └─────────────────────────────────────────────────────────────────────┘

None of these modules import anything from the HTTP layer.
"""

from .encoder import BASE62_ALPHABET, MAX_CODE_LENGTH, encode, is_short_code, to_base62
from .shortener import CollisionError, shorten_url
from .store import UrlStore
from .auth import check_basic_auth, decode_basic_credentials

__all__ = [
    # Encoding
    "BASE62_ALPHABET",
    "MAX_CODE_LENGTH",
    "encode",
    "to_base62",
    "is_short_code",

    # Collision policy
    "shorten_url",
    "CollisionError",

    # Storage
    "UrlStore",

    # Authentication
    "check_basic_auth",
    "decode_basic_credentials",
]
