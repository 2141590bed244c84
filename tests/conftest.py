import pytest

from esmapper.config import ENV_PREFIX, get_settings


@pytest.fixture(autouse=True)
def settings(monkeypatch, tmp_path):
    """Fresh settings for every test, not affected by a .env file or environment of the developer"""
    for var in ["ENV_FILE", "MAX_DEPTH", "REQUIRE_ID", "JSON_INDENT"]:
        monkeypatch.delenv(f"{ENV_PREFIX.upper()}{var}", raising=False)
    monkeypatch.setenv(f"{ENV_PREFIX.upper()}ENV_FILE", str(tmp_path / ".env"))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
