"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from tshort.config import Settings
from tshort.identifier import MAX_ID_LENGTH


def test_defaults():
    settings = Settings()
    assert settings.HASH_LEN == 6
    assert settings.REDIRECT_STATUS_CODE == 307
    assert settings.STORE_RETRY_ATTEMPTS == 2


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HASH_LEN", "8")
    monkeypatch.setenv("REDIRECT_STATUS_CODE", "308")
    settings = Settings()
    assert settings.HASH_LEN == 8
    assert settings.REDIRECT_STATUS_CODE == 308


@pytest.mark.parametrize("hash_len", [0, MAX_ID_LENGTH + 1])
def test_hash_len_must_fit_digest(hash_len):
    with pytest.raises(ValidationError):
        Settings(HASH_LEN=hash_len)


@pytest.mark.parametrize("status", [301, 302])
def test_redirect_must_preserve_method(status):
    with pytest.raises(ValidationError):
        Settings(REDIRECT_STATUS_CODE=status)


def test_sqlite_detection():
    assert Settings(DATABASE_URL="sqlite+aiosqlite:///tshort.db").is_sqlite
    assert not Settings().is_sqlite
