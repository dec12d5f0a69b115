import threading
import time
from typing import Any

import pytest
from requests import ConnectionError as RequestsConnectionError

from greenhouse.feed import FeedError, FirebaseFeed

SNAPSHOT = {"20250206_170002": {"humidity": 55, "light": 300, "temperature": 21.5}}


def _feed(**kwargs: Any) -> FirebaseFeed:
    return FirebaseFeed("https://greenhouse-demo.firebaseio.com/", **kwargs)


def test_endpoint_and_auth_param(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_get(url: str, params: dict[str, str], ua: str, timeout: float) -> tuple[int, Any]:
        captured.update(url=url, params=params, ua=ua, timeout=timeout)
        return 200, SNAPSHOT

    monkeypatch.setattr("greenhouse.feed._get_json", fake_get)

    feed = _feed(path="/sensorData/", auth="token", timeout_secs=3, user_agent="ua/1")
    assert feed.fetch_snapshot() == SNAPSHOT
    assert captured == {
        "url": "https://greenhouse-demo.firebaseio.com/sensorData.json",
        "params": {"auth": "token"},
        "ua": "ua/1",
        "timeout": 3.0,
    }


def test_null_snapshot_is_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, None))
    assert _feed().fetch_snapshot() is None


def test_http_error_raises_feed_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (401, None))
    with pytest.raises(FeedError, match="401"):
        _feed().fetch_snapshot()


def test_non_mapping_payload_raises_feed_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, [1, 2, 3]))
    with pytest.raises(FeedError, match="list"):
        _feed().fetch_snapshot()


def test_poll_once_delivers_snapshot(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, SNAPSHOT))
    received: list[Any] = []

    assert _feed().poll_once(received.append) is True
    assert received == [SNAPSHOT]


def test_poll_once_transport_error_skips_callback(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(*_a: Any) -> tuple[int, Any]:
        raise RequestsConnectionError("network down")

    monkeypatch.setattr("greenhouse.feed._get_json", fake_get)
    received: list[Any] = []

    assert _feed().poll_once(received.append) is False
    assert received == []


def test_poll_once_survives_callback_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, SNAPSHOT))

    def boom(_snapshot: Any) -> None:
        raise RuntimeError("callback failed")

    assert _feed().poll_once(boom) is True


def test_start_delivers_and_stop_silences(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, SNAPSHOT))
    feed = _feed(poll_interval_secs=0.1, timeout_secs=1)
    received: list[Any] = []
    first = threading.Event()

    def on_snapshot(snapshot: Any) -> None:
        received.append(snapshot)
        first.set()

    feed.start(on_snapshot)
    assert first.wait(2.0)
    assert feed.running
    with pytest.raises(RuntimeError):
        feed.start(on_snapshot)

    feed.stop()
    count = len(received)
    time.sleep(0.3)

    assert not feed.running
    assert len(received) == count
    assert received[0] == SNAPSHOT


def test_poll_after_stop_does_not_call_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("greenhouse.feed._get_json", lambda *_a: (200, SNAPSHOT))
    feed = _feed()
    feed.stop()
    received: list[Any] = []

    assert feed.poll_once(received.append) is False
    assert received == []
