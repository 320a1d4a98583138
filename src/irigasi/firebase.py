"""Firebase Realtime Database streaming client.

The REST API streams changes as Server-Sent Events: an initial ``put``
carrying the whole tree under the listened path, then ``put``/``patch``
events carrying changes relative to it. :class:`FirebaseStreamClient`
folds those changes into a local copy of the tree and hands every
listener the full tree after each change.
"""

from __future__ import annotations

import asyncio
import codecs
import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from irigasi._redact import redact_for_log, redact_url
from irigasi.config import IrigasiConfig
from irigasi.exceptions import (
    IrigasiError,
    IrigasiPermissionError,
    IrigasiSubscriptionError,
    IrigasiTransportError,
)

_logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Any], None]
ErrorCallback = Callable[[IrigasiError], None]


class ListenerHandle(Protocol):
    def cancel(self) -> None: ...


class SnapshotSource(Protocol):
    """Structural interface of a remote hierarchical store.

    ``callback`` receives the full tree under ``path`` after every change;
    ``on_error`` receives a single error when the listener stops on its own.
    """

    def on_snapshot(
        self,
        path: str,
        callback: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> ListenerHandle: ...


# ---------------------------------------------------------------------------
# Tree maintenance
# ---------------------------------------------------------------------------


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _put(node: Any, segments: list[str], data: Any) -> Any:
    if not segments:
        return data
    base: dict[str, Any] = dict(node) if isinstance(node, dict) else {}
    head, rest = segments[0], segments[1:]
    value = _put(base.get(head), rest, data)
    if value is None or value == {}:
        base.pop(head, None)
    else:
        base[head] = value
    return base or None


def apply_put(tree: Any, path: str, data: Any) -> Any:
    """Return *tree* with the node at *path* replaced by *data*.

    ``None`` deletes the node, and parents left empty disappear with it,
    mirroring how the database never stores empty objects. *tree* itself
    is not modified.
    """
    return _put(tree, _segments(path), data)


def apply_patch(tree: Any, path: str, data: Any) -> Any:
    """Return *tree* with the children in *data* merged under *path*."""
    if not isinstance(data, dict):
        return apply_put(tree, path, data)
    base = _segments(path)
    for key, value in data.items():
        tree = _put(tree, base + _segments(key), value)
    return tree


# ---------------------------------------------------------------------------
# Server-Sent Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StreamEvent:
    """One decoded Server-Sent Event."""

    event: str
    data: Any


class SseDecoder:
    """Incremental Server-Sent Events line decoder.

    Feed raw network chunks to :meth:`feed_bytes`, or single lines to
    :meth:`feed`; a blank line completes the pending event.
    """

    def __init__(self) -> None:
        self._event = ""
        self._data: list[str] = []
        self._text = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed_bytes(self, chunk: bytes) -> list[StreamEvent]:
        """Decode a raw network chunk, which may end mid-line."""
        self._pending += self._text.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        events: list[StreamEvent] = []
        for line in lines:
            event = self.feed(line)
            if event is not None:
                events.append(event)
        return events

    def feed(self, line: str) -> StreamEvent | None:
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            self._event = value
        elif name == "data":
            self._data.append(value)
        return None

    def _dispatch(self) -> StreamEvent | None:
        if not self._event and not self._data:
            return None
        event = self._event or "message"
        text = "\n".join(self._data)
        self._event = ""
        self._data = []
        try:
            data = json.loads(text) if text else None
        except json.JSONDecodeError as exc:
            raise IrigasiTransportError(f"Invalid JSON in {event!r} stream event: {text[:200]}") from exc
        return StreamEvent(event=event, data=data)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class StreamListener:
    """Handle for one live listener started by :meth:`FirebaseStreamClient.on_snapshot`."""

    def __init__(self, path: str, callback: SnapshotCallback, on_error: ErrorCallback) -> None:
        self.path = path
        self._callback = callback
        self._on_error = on_error
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False
        self._tree: Any = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        """Stop listening. Calling it again is a no-op."""
        if self._cancelled:
            return
        self._cancelled = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
        _logger.debug("Listener on %s cancelled", self.path)

    def handle_event(self, event: StreamEvent) -> None:
        """Fold *event* into the local tree and notify the callback.

        Raises :class:`IrigasiSubscriptionError` for events that end the
        stream.
        """
        if event.event in ("put", "patch"):
            payload = event.data if isinstance(event.data, dict) else {}
            path = str(payload.get("path") or "/")
            if event.event == "put":
                self._tree = apply_put(self._tree, path, payload.get("data"))
            else:
                self._tree = apply_patch(self._tree, path, payload.get("data"))
            self._emit()
            return
        if event.event == "keep-alive":
            return
        if event.event == "cancel":
            raise IrigasiPermissionError(
                f"Listener on {self.path} cancelled by the server: {event.data}",
                reason="cancel",
            )
        if event.event == "auth_revoked":
            raise IrigasiSubscriptionError(
                f"Credentials for listener on {self.path} were revoked",
                reason="auth_revoked",
            )
        _logger.debug("Ignoring unknown stream event %r", event.event)

    def _emit(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback(copy.deepcopy(self._tree))
        except Exception:
            _logger.exception("Snapshot callback for %s raised", self.path)

    def _fail(self, error: IrigasiError) -> None:
        if self._cancelled:
            return
        _logger.warning("Listener on %s stopped: %s", self.path, error)
        try:
            self._on_error(error)
        except Exception:
            _logger.exception("Error callback for %s raised", self.path)


class FirebaseStreamClient:
    """Async client for the Realtime Database REST streaming API.

    Usage::

        async with FirebaseStreamClient(config) as client:
            handle = client.on_snapshot("/", on_tree, on_error)
            ...
            handle.cancel()
    """

    def __init__(
        self,
        config: IrigasiConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._listeners: list[StreamListener] = []

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FirebaseStreamClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        listeners = self._listeners
        self._listeners = []
        tasks = []
        for listener in listeners:
            listener.cancel()
            if listener._task is not None:  # noqa: SLF001
                tasks.append(listener._task)  # noqa: SLF001
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise IrigasiError("Client not initialized. Use 'async with FirebaseStreamClient(...) as client:'")
        return self._http_session

    def _url(self, path: str) -> str:
        return f"{self._config.database_url}/{'/'.join(_segments(path))}.json"

    def _params(self) -> dict[str, str]:
        if self._config.auth_token:
            return {"auth": self._config.auth_token}
        return {}

    def _display_url(self, url: str) -> str:
        params = self._params()
        if not params:
            return url
        return redact_url(f"{url}?{urlencode(params)}")

    @staticmethod
    def _status_error(status: int, path: str, text: str) -> IrigasiError:
        if status in (401, 403):
            return IrigasiPermissionError(
                f"HTTP {status} for {path}: permission denied",
                reason=f"http_{status}",
            )
        return IrigasiTransportError(f"HTTP {status} for {path}: {text[:200]}", status_code=status, path=path)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_snapshot(self, path: str = "/") -> Any:
        """Read the tree under *path* once."""
        http = self._require_session()
        url = self._url(path)
        _logger.debug("GET %s", self._display_url(url))
        try:
            async with http.get(url, params=self._params()) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise self._status_error(resp.status, path, text)
        except aiohttp.ClientError as exc:
            raise IrigasiTransportError(f"Request to {path} failed: {exc}", path=path) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise IrigasiTransportError(f"Invalid JSON from {path}: {text[:200]}", path=path) from exc

    def on_snapshot(
        self,
        path: str,
        callback: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> StreamListener:
        """Start a live listener on *path*.

        Must be called from a running event loop. Snapshots and errors are
        delivered on that loop, one at a time.
        """
        self._require_session()
        listener = StreamListener(path, callback, on_error)
        listener._task = asyncio.get_running_loop().create_task(self._listen(listener))  # noqa: SLF001
        self._listeners.append(listener)
        return listener

    async def _listen(self, listener: StreamListener) -> None:
        http = self._require_session()
        path = listener.path
        url = self._url(path)
        headers = {"Accept": "text/event-stream"}
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self._config.connect_timeout)
        _logger.debug("Opening stream %s", self._display_url(url))
        try:
            async with http.get(url, params=self._params(), headers=headers, timeout=timeout) as resp:
                if resp.status != 200:
                    raise self._status_error(resp.status, path, await resp.text())
                decoder = SseDecoder()
                async for chunk in resp.content.iter_any():
                    for event in decoder.feed_bytes(chunk):
                        if self._config.trace_enabled:
                            _logger.debug("Stream event %s %s", event.event, redact_for_log(event.data))
                        listener.handle_event(event)
            raise IrigasiTransportError(f"Stream for {path} closed by the server", path=path)
        except asyncio.CancelledError:
            raise
        except IrigasiError as exc:
            listener._fail(exc)  # noqa: SLF001
        except aiohttp.ClientError as exc:
            listener._fail(IrigasiTransportError(f"Stream for {path} failed: {exc}", path=path))  # noqa: SLF001
        finally:
            if listener in self._listeners:
                self._listeners.remove(listener)
