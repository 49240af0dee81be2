"""Runtime configuration for external archive imports."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_URL_TEMPLATE = "https://www.gutenberg.org/cache/epub/{work_id}/pg{work_id}-h.zip"
DEFAULT_USER_AGENT = "NoviraExternalImporter/1.0 (+https://example.local/novira)"
DEFAULT_REQUEST_INTERVAL_SECONDS = 1.0
DEFAULT_RETRY_COUNT = 3
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer: {raw_value}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_non_negative_float(*, name: str, raw_value: str) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number: {raw_value}") from exc
    if value < 0:
        raise ValueError(f"{name} cannot be negative")
    return value


def _parse_mirrors(raw_value: str) -> tuple[str, ...]:
    mirrors = tuple(entry.strip() for entry in raw_value.split(",") if entry.strip())
    for mirror in mirrors:
        if not (mirror.startswith("http://") or mirror.startswith("https://")):
            raise ValueError(f"PG_MIRRORS entries must start with http:// or https://: {mirror}")
    return mirrors


@dataclass(frozen=True, slots=True)
class GutenbergSettings:
    """Validated Project Gutenberg importer settings."""

    mirrors: tuple[str, ...] = ()
    url_template: str = DEFAULT_URL_TEMPLATE
    user_agent: str = DEFAULT_USER_AGENT
    request_interval_seconds: float = DEFAULT_REQUEST_INTERVAL_SECONDS
    retry_count: int = DEFAULT_RETRY_COUNT
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GutenbergSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        mirrors = _parse_mirrors(source.get("PG_MIRRORS", ""))
        url_template = source.get("PG_DEFAULT_URL_TEMPLATE", "").strip() or DEFAULT_URL_TEMPLATE
        user_agent = source.get("EXTERNAL_IMPORT_USER_AGENT", "").strip() or DEFAULT_USER_AGENT

        interval_raw = source.get("PG_REQUEST_INTERVAL_SECONDS", str(DEFAULT_REQUEST_INTERVAL_SECONDS)).strip()
        retry_raw = source.get("PG_RETRY_COUNT", str(DEFAULT_RETRY_COUNT)).strip()
        timeout_raw = source.get("PG_REQUEST_TIMEOUT_SECONDS", str(DEFAULT_REQUEST_TIMEOUT_SECONDS)).strip()

        if not interval_raw:
            raise ValueError("PG_REQUEST_INTERVAL_SECONDS cannot be empty")
        if not retry_raw:
            raise ValueError("PG_RETRY_COUNT cannot be empty")
        if not timeout_raw:
            raise ValueError("PG_REQUEST_TIMEOUT_SECONDS cannot be empty")

        if not (url_template.startswith("http://") or url_template.startswith("https://")):
            raise ValueError("PG_DEFAULT_URL_TEMPLATE must start with http:// or https://")

        timeout = _parse_non_negative_float(name="PG_REQUEST_TIMEOUT_SECONDS", raw_value=timeout_raw)
        if timeout == 0:
            raise ValueError("PG_REQUEST_TIMEOUT_SECONDS must be positive")

        return cls(
            mirrors=mirrors,
            url_template=url_template,
            user_agent=user_agent,
            request_interval_seconds=_parse_non_negative_float(
                name="PG_REQUEST_INTERVAL_SECONDS",
                raw_value=interval_raw,
            ),
            retry_count=_parse_positive_int(name="PG_RETRY_COUNT", raw_value=retry_raw, minimum=1),
            request_timeout_seconds=timeout,
        )
