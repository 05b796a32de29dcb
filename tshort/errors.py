"""Error kinds raised by the link service and mapped to HTTP statuses.

Every failure a request can hit is one of these; ``tshort.main`` installs a
handler that turns any :class:`ShortenerError` into a JSON error response, so a
failing request never takes the process down with it.
"""

__all__ = [
    "CollisionExhausted",
    "EmptyURL",
    "InvalidURL",
    "LinkNotFound",
    "ShortenerError",
    "StoreUnavailable",
]


class ShortenerError(Exception):
    """Base class for all service errors."""

    http_status: int = 500
    detail: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.detail)


class StoreUnavailable(ShortenerError):
    """The link store could not be reached or the operation did not complete."""

    http_status = 503
    detail = "Link store unavailable"


class CollisionExhausted(ShortenerError):
    """Every prefix of a URL's digest is already held by another URL."""

    http_status = 500
    detail = "Could not allocate a unique identifier"

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"{self.detail} for URL sha256={fingerprint}")


class LinkNotFound(ShortenerError):
    http_status = 404
    detail = "Short URL not found"

    def __init__(self, link_id: str) -> None:
        self.link_id = link_id
        super().__init__(self.detail)


class EmptyURL(ShortenerError):
    http_status = 400
    detail = "A URL is required"


class InvalidURL(ShortenerError):
    """The URL holds characters no store can keep (NUL, unpaired surrogates)."""

    http_status = 400
    detail = "URL contains invalid characters"
