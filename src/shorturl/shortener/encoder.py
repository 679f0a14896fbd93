"""
=============================================================================
HASH-TO-CODE ENCODER
=============================================================================

Turns an arbitrary string into a short Base62 code:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ENCODING PIPELINE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "https://example.com"                                             │
    │          │                                                           │
    │          ▼  UTF-8 bytes                                              │
    │   SHA-256 digest (32 bytes)                                         │
    │          │                                                           │
    │          ▼  first 6 bytes, big-endian                                │
    │   48-bit integer   (0 .. 2^48 - 1)                                  │
    │          │                                                           │
    │          ▼  Base62, most significant digit first                     │
    │   "4xq9Tb2M"                                                         │
    │          │                                                           │
    │          ▼  keep at most 7 characters (no padding)                   │
    │   "4xq9Tb2"                                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY 48 BITS?
=============================================================================

2^48 ≈ 2.8 * 10^14 values. Rendered in Base62 that is at most 9 digits,
and the first 7 digits still leave 62^7 ≈ 3.5 * 10^12 distinct codes -
plenty for an in-memory store. Collisions are possible and are handled
one level up (see shortener.py) by salting and retrying.

=============================================================================
INTERVIEW QUESTIONS ABOUT SHORT CODES
=============================================================================

Q: "Why hash instead of a counter?"
A: "A hash is deterministic: the same URL always maps to the same first
   candidate, so repeated POSTs are idempotent without a reverse index.
   A counter needs shared state and leaks how many links exist."

Q: "Why is 0 special?"
A: "The repeated-division loop produces no digits for 0, so it would
   render as an empty string. We return "0" explicitly."

=============================================================================
"""

import hashlib


# Digits, then lowercase, then uppercase. The order is part of the wire
# format: changing it changes every code ever issued.
BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

MAX_CODE_LENGTH = 7
HASH_BITS = 48
HASH_MASK = (1 << HASH_BITS) - 1


def hash48(text: str) -> int:
    """
    Deterministic 48-bit hash of a string.

    Takes the first 6 bytes of the SHA-256 digest of the UTF-8 encoding
    and reads them as a big-endian unsigned integer.
    """
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:6], "big") & HASH_MASK


def to_base62(value: int) -> str:
    """
    Render a non-negative integer in Base62.

    Most significant digit first; 0 renders as "0".

    Example:
        >>> to_base62(0)
        '0'
        >>> to_base62(61)
        'Z'
        >>> to_base62(62)
        '10'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")
    if value == 0:
        return BASE62_ALPHABET[0]

    digits = []
    while value > 0:
        value, remainder = divmod(value, 62)
        digits.append(BASE62_ALPHABET[remainder])

    digits.reverse()
    return "".join(digits)


def encode(text: str) -> str:
    """
    Compute the short code for a string.

    Returns at most 7 Base62 characters. Shorter renderings (small hash
    values) are returned as-is, never padded.
    """
    return to_base62(hash48(text))[:MAX_CODE_LENGTH]


def is_short_code(candidate: str) -> bool:
    """Check whether a string has the shape of a short code (1-7 Base62 chars)."""
    if not 0 < len(candidate) <= MAX_CODE_LENGTH:
        return False
    return all(ch in BASE62_ALPHABET for ch in candidate)
