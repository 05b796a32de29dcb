"""Content-derived identifier candidates.

Every URL maps to one fixed encoded digest: the SHA-256 of its UTF-8 bytes in
the URL-safe base64 alphabet (``A-Z a-z 0-9 - _``) with padding stripped.
Candidate identifiers are prefixes of that digest, shortest first::

    url ──sha256──► 32 bytes ──urlsafe b64──► "Vx3e...Q"  (43 chars)
                                               │
                     L0 ───────────────────────┤ "Vx3eYt"
                     L0 + 1 ───────────────────┤ "Vx3eYtK"
                     ...                       │
                     MAX_ID_LENGTH ────────────┘ full digest

A collision never triggers a new hash; the next candidate is always the next
longer prefix of the same digest.
"""

import base64
import hashlib
from collections.abc import Iterator

__all__ = [
    "ID_ALPHABET",
    "MAX_ID_LENGTH",
    "candidate_ids",
    "url_digest",
    "url_fingerprint",
]

ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

# 32 digest bytes encode to 43 base64 characters once padding is dropped
MAX_ID_LENGTH = 43


def url_digest(url: str) -> str:
    """Return the URL-safe, unpadded base64 SHA-256 digest of ``url``.

    Example:
        >>> len(url_digest("http://example.com"))
        43
    """
    digest = hashlib.sha256(url.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def url_fingerprint(url: str) -> str:
    """Hex SHA-256 of ``url``, used to reference a URL in logs and errors."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def candidate_ids(url: str, min_length: int) -> Iterator[str]:
    """Yield identifier candidates for ``url`` from ``min_length`` upward.

    Args:
        url: Scheme-normalized URL.
        min_length: Length of the first candidate (``HASH_LEN``).

    Yields:
        str: Prefixes of :func:`url_digest` of strictly increasing length,
        ending with the full digest.

    Raises:
        ValueError: If ``min_length`` is outside ``1..MAX_ID_LENGTH``.
    """
    if not 1 <= min_length <= MAX_ID_LENGTH:
        raise ValueError(f"Identifier length must be between 1 and {MAX_ID_LENGTH}, got {min_length}")

    encoded = url_digest(url)
    for length in range(min_length, MAX_ID_LENGTH + 1):
        yield encoded[:length]
