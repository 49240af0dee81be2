from __future__ import annotations

import pytest

from novira.external.config import DEFAULT_URL_TEMPLATE, DEFAULT_USER_AGENT, GutenbergSettings


def test_settings_defaults() -> None:
    settings = GutenbergSettings.from_env({})

    assert settings.mirrors == ()
    assert settings.url_template == DEFAULT_URL_TEMPLATE
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.request_interval_seconds == 1.0
    assert settings.retry_count == 3
    assert settings.request_timeout_seconds == 60.0


def test_settings_load_from_env() -> None:
    settings = GutenbergSettings.from_env(
        {
            "PG_MIRRORS": " https://mirror.example/ , ,https://gutenberg.pglaf.org",
            "PG_DEFAULT_URL_TEMPLATE": "https://cache.example/{id}.zip",
            "EXTERNAL_IMPORT_USER_AGENT": "Teszt/2.0",
            "PG_REQUEST_INTERVAL_SECONDS": "0.5",
            "PG_RETRY_COUNT": "5",
            "PG_REQUEST_TIMEOUT_SECONDS": "15",
        }
    )

    assert settings.mirrors == ("https://mirror.example/", "https://gutenberg.pglaf.org")
    assert settings.url_template == "https://cache.example/{id}.zip"
    assert settings.user_agent == "Teszt/2.0"
    assert settings.request_interval_seconds == 0.5
    assert settings.retry_count == 5
    assert settings.request_timeout_seconds == 15.0


@pytest.mark.parametrize(
    ("environ", "variable"),
    [
        ({"PG_MIRRORS": "ftp://mirror.example"}, "PG_MIRRORS"),
        ({"PG_DEFAULT_URL_TEMPLATE": "gutenberg.org/{id}"}, "PG_DEFAULT_URL_TEMPLATE"),
        ({"PG_REQUEST_INTERVAL_SECONDS": "-1"}, "PG_REQUEST_INTERVAL_SECONDS"),
        ({"PG_RETRY_COUNT": "0"}, "PG_RETRY_COUNT"),
        ({"PG_REQUEST_TIMEOUT_SECONDS": "0"}, "PG_REQUEST_TIMEOUT_SECONDS"),
        ({"PG_RETRY_COUNT": " "}, "PG_RETRY_COUNT"),
        ({"PG_RETRY_COUNT": "three"}, "PG_RETRY_COUNT"),
        ({"PG_REQUEST_INTERVAL_SECONDS": "fast"}, "PG_REQUEST_INTERVAL_SECONDS"),
        ({"PG_REQUEST_TIMEOUT_SECONDS": "1m"}, "PG_REQUEST_TIMEOUT_SECONDS"),
    ],
)
def test_invalid_settings_fail_fast(environ: dict[str, str], variable: str) -> None:
    with pytest.raises(ValueError, match=variable):
        GutenbergSettings.from_env(environ)
