from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from novira.external.fetcher import ZIP_ACCEPT_HEADER, ArchiveFetcher, ArchiveFetchError, is_retriable_status
from novira.external.throttle import RequestThrottle


class _FakeSession:
    def __init__(self, responses: dict[str, list[object]]) -> None:
        self._responses = {url: list(items) for url, items in responses.items()}
        self.calls: list[tuple[str, dict[str, str], float]] = []

    def get(self, url: str, *, headers: dict[str, str], timeout: float) -> object:
        self.calls.append((url, headers, timeout))
        response = self._responses[url].pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _ok(content: bytes = b"PK\x03\x04") -> SimpleNamespace:
    return SimpleNamespace(status_code=200, content=content)


def _status(code: int) -> SimpleNamespace:
    return SimpleNamespace(status_code=code, content=b"")


def _fetcher(session: _FakeSession, delays: list[float], *, retries: int = 3) -> ArchiveFetcher:
    clock = _FakeClock()
    return ArchiveFetcher(
        user_agent="Teszt/1.0",
        retries_per_url=retries,
        min_interval_seconds=0.0,
        timeout_seconds=12.5,
        session=session,
        throttle=RequestThrottle(clock=clock, sleep=clock.sleep),
        sleep=delays.append,
    )


def test_first_successful_url_is_returned_with_headers_and_timeout() -> None:
    session = _FakeSession({"https://a.example/pg1.zip": [_ok(b"zip-bytes")]})

    fetched = _fetcher(session, []).fetch_first(["https://a.example/pg1.zip"], work_id="1")

    assert fetched.url == "https://a.example/pg1.zip"
    assert fetched.content == b"zip-bytes"
    url, headers, timeout = session.calls[0]
    assert headers == {"User-Agent": "Teszt/1.0", "Accept": ZIP_ACCEPT_HEADER}
    assert timeout == 12.5


def test_retriable_status_is_retried_with_exponential_backoff() -> None:
    delays: list[float] = []
    session = _FakeSession({"https://a.example/pg1.zip": [_status(503), _status(429), _ok()]})

    fetched = _fetcher(session, delays).fetch_first(["https://a.example/pg1.zip"], work_id="1")

    assert fetched.url == "https://a.example/pg1.zip"
    assert delays == pytest.approx([0.8, 1.6])
    assert len(session.calls) == 3


def test_non_retriable_status_moves_to_next_url() -> None:
    delays: list[float] = []
    session = _FakeSession(
        {
            "https://a.example/pg1.zip": [_status(404)],
            "https://b.example/pg1.zip": [_ok()],
        }
    )

    fetched = _fetcher(session, delays).fetch_first(
        ["https://a.example/pg1.zip", "https://b.example/pg1.zip"],
        work_id="1",
    )

    assert fetched.url == "https://b.example/pg1.zip"
    assert delays == []
    assert [call[0] for call in session.calls] == ["https://a.example/pg1.zip", "https://b.example/pg1.zip"]


def test_exhausted_urls_raise_aggregated_error() -> None:
    delays: list[float] = []
    session = _FakeSession(
        {
            "https://a.example/pg1.zip": [_status(503), _status(503)],
            "https://b.example/pg1.zip": [requests.ConnectionError("boom"), requests.ConnectionError("boom")],
        }
    )

    with pytest.raises(ArchiveFetchError, match="work 1") as exc_info:
        _fetcher(session, delays, retries=2).fetch_first(
            ["https://a.example/pg1.zip", "https://b.example/pg1.zip"],
            work_id="1",
        )

    assert exc_info.value.failures == [
        "https://a.example/pg1.zip -> HTTP 503",
        "https://b.example/pg1.zip -> boom",
    ]
    assert "https://a.example/pg1.zip -> HTTP 503; https://b.example/pg1.zip -> boom" in str(exc_info.value)
    assert delays == pytest.approx([0.8, 0.8])


def test_retriable_statuses() -> None:
    assert is_retriable_status(429)
    assert is_retriable_status(500)
    assert is_retriable_status(503)
    assert not is_retriable_status(404)
    assert not is_retriable_status(403)


def test_throttle_spaces_consecutive_requests() -> None:
    clock = _FakeClock()
    throttle = RequestThrottle(clock=clock, sleep=clock.sleep)

    throttle.wait(1.0)
    clock.now += 0.25
    throttle.wait(1.0)
    clock.now += 2.0
    throttle.wait(1.0)

    assert clock.sleeps == pytest.approx([0.75])


def test_fetcher_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError, match="retries_per_url"):
        ArchiveFetcher(user_agent="x", retries_per_url=0, session=_FakeSession({}))
