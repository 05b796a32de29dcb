"""Tests for submitted-URL normalization."""

import pytest

from tshort.errors import EmptyURL, InvalidURL
from tshort.url_builder import build_short_url, normalize_url


def test_normalize_prefixes_missing_scheme() -> None:
    assert normalize_url("  example.com/path ") == "http://example.com/path"


def test_normalize_keeps_scheme_case_insensitively() -> None:
    assert normalize_url("HTTPS://Example.com") == "HTTPS://Example.com"


def test_normalize_does_not_treat_http_prefix_as_scheme() -> None:
    assert normalize_url("httpbin.org") == "http://httpbin.org"


@pytest.mark.parametrize("raw", [None, "", " \t\n"])
def test_normalize_rejects_empty(raw) -> None:
    with pytest.raises(EmptyURL):
        normalize_url(raw)


@pytest.mark.parametrize("raw", ["http://a\x00b", "\ud800x", "http://example.com/\udfff"])
def test_normalize_rejects_unstorable_text(raw: str) -> None:
    with pytest.raises(InvalidURL) as exc_info:
        normalize_url(raw)
    assert exc_info.value.http_status == 400


def test_build_short_url_joins_without_double_slash() -> None:
    assert build_short_url("http://t.example/", "Vx3eYt") == "http://t.example/Vx3eYt"
