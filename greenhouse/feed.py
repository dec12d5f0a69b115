import logging
import threading
from collections.abc import Callable
from typing import Any

from requests import RequestException, Response, get

Snapshot = dict[str, Any] | None


class FeedError(RuntimeError):
    pass


def _get_json(url: str, params: dict[str, str], user_agent: str, timeout: float) -> tuple[int, Any]:
    headers = {
        "Accept": "application/json",
        "User-Agent": user_agent,
    }
    resp: Response = get(url, params=params, headers=headers, timeout=timeout)
    if not (200 <= resp.status_code < 300):
        return int(resp.status_code), None
    return int(resp.status_code), resp.json()


class FirebaseFeed:
    """Polls a Realtime Database path over REST and hands full snapshots to a callback.

    - start(): spawns a daemon thread; the first poll runs immediately
    - stop(): joins the thread; no callback runs once it returns
    - transport errors are logged and retried on the next tick
    """

    def __init__(
        self,
        url: str,
        path: str = "sensorData",
        auth: str | None = None,
        poll_interval_secs: float = 30,
        timeout_secs: float = 10,
        user_agent: str = "greenhouse-dashboard/1.0",
    ) -> None:
        self.endpoint = f"{url.rstrip('/')}/{path.strip('/')}.json"
        self._auth = auth
        self._interval = max(0.1, float(poll_interval_secs))
        self._timeout = float(timeout_secs)
        self._user_agent = user_agent
        self._stop = threading.Event()
        # Held while a callback runs so stop() can wait it out
        self._callback_lock = threading.RLock()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def fetch_snapshot(self) -> Snapshot:
        params: dict[str, str] = {}
        if self._auth:
            params["auth"] = self._auth
        code, payload = _get_json(self.endpoint, params, self._user_agent, self._timeout)
        if payload is None and not (200 <= code < 300):
            raise FeedError(f"HTTP status {code} from {self.endpoint}")
        if payload is not None and not isinstance(payload, dict):
            raise FeedError(f"Unexpected snapshot type {type(payload).__name__} from {self.endpoint}")
        return payload

    def poll_once(self, callback: Callable[[Snapshot], None]) -> bool:
        """Fetch one snapshot and deliver it. Returns False when the fetch failed."""
        try:
            snapshot = self.fetch_snapshot()
        except (RequestException, FeedError, ValueError) as exc:
            logging.warning("Feed poll failed; retrying in %ss: %s", self._interval, exc)
            return False
        with self._callback_lock:
            if self._stop.is_set():
                return False
            try:
                callback(snapshot)
            except Exception:
                # Callback errors must not affect the loop
                logging.exception("Snapshot callback error")
        return True

    def start(self, callback: Callable[[Snapshot], None]) -> None:
        if self.running:
            raise RuntimeError("Feed already started")
        self._stop.clear()
        logging.info("Feed starting: endpoint=%s interval=%ss", self.endpoint, self._interval)

        def _loop() -> None:
            while not self._stop.is_set():
                self.poll_once(callback)
                self._stop.wait(self._interval)

        self._thread = threading.Thread(target=_loop, name="firebase-feed", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        # Wait for any in-flight callback; later ones see the stop flag
        with self._callback_lock:
            pass
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self._timeout + self._interval)
        logging.info("Feed stopped: endpoint=%s", self.endpoint)
