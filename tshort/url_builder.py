"""Helpers for submitted URLs and generated short links."""

from tshort.errors import EmptyURL, InvalidURL

__all__ = ["build_short_url", "normalize_url"]

HTTP_SCHEMES = ("http://", "https://")


def normalize_url(raw_url: str | None) -> str:
    """Strip whitespace and make sure the URL carries an HTTP scheme.

    URLs without ``http://`` or ``https://`` get ``http://`` prepended; guessing
    ``https://`` would break hosts without a valid certificate.

    Raises:
        EmptyURL: If nothing is left after stripping.
        InvalidURL: If the URL has a NUL character or is not valid UTF-8 text.
    """
    url = (raw_url or "").strip()
    if not url:
        raise EmptyURL()
    if "\x00" in url:
        raise InvalidURL()
    try:
        url.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidURL() from None
    if not url.lower().startswith(HTTP_SCHEMES):
        url = f"http://{url}"
    return url


def build_short_url(base_url: str, link_id: str) -> str:
    """Join the public base URL and an identifier.

    Example:
        >>> build_short_url("http://t.example/", "Vx3eYt")
        'http://t.example/Vx3eYt'
    """
    return f"{base_url.rstrip('/')}/{link_id}"
