"""HTTP binding of the acquisition contract on top of QtNetwork.

Endpoints (relative to the instrument base URL):

    POST /capture   {"capture_duration_secs": <float>}   2xx = accepted
    GET  /trigger   JSON string, e.g. "Armed"
    GET  /traces    {"time": [...], "traces": [{"label": str, "data": [...]}]}

Requests complete on the Qt event loop; nothing here blocks.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Set

from PySide6 import QtCore, QtNetwork

from shared.models import Trace, TraceSet, TriggerStatus

from .base_client import AcquisitionClient, Reply, ReplyCallback

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------

def encode_start_request(duration_s: float) -> bytes:
    return json.dumps({"capture_duration_secs": float(duration_s)}).encode("utf-8")


def parse_trigger_payload(body: bytes) -> TriggerStatus:
    value = json.loads(body.decode("utf-8"))
    if not isinstance(value, str):
        raise ValueError(f"trigger status must be a JSON string, got {type(value).__name__}")
    status = TriggerStatus.from_wire(value)
    if status is TriggerStatus.OTHER:
        logger.debug("Unrecognised trigger status %r", value)
    return status


def parse_traces_payload(body: bytes) -> TraceSet:
    payload = json.loads(body.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("trace payload must be a JSON object")
    times = payload["time"]
    entries = payload.get("traces", [])
    if not isinstance(entries, list):
        raise ValueError("'traces' must be a list")
    traces = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("each trace must be a JSON object")
        label = entry.get("label") or ""
        if not isinstance(label, str):
            raise ValueError(f"trace label must be a string, got {type(label).__name__}")
        traces.append(Trace(label, entry["data"]))
    return TraceSet(times=times, traces=tuple(traces))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class HttpAcquisitionClient(AcquisitionClient):
    """Talks to the instrument's HTTP API through a QNetworkAccessManager."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        manager: Optional[QtNetwork.QNetworkAccessManager] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._manager = manager if manager is not None else QtNetwork.QNetworkAccessManager(parent)
        self._pending: Set[QtNetwork.QNetworkReply] = set()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(self, path: str) -> QtNetwork.QNetworkRequest:
        request = QtNetwork.QNetworkRequest(QtCore.QUrl(f"{self._base_url}{path}"))
        request.setHeader(QtNetwork.QNetworkRequest.KnownHeaders.ContentTypeHeader, "application/json")
        return request

    def start_capture(self, duration_s: float, callback: ReplyCallback) -> None:
        body = QtCore.QByteArray(encode_start_request(duration_s))
        reply = self._manager.post(self._request("/capture"), body)
        self._track(reply, callback, None)

    def query_trigger(self, callback: ReplyCallback) -> None:
        reply = self._manager.get(self._request("/trigger"))
        self._track(reply, callback, parse_trigger_payload)

    def fetch_traces(self, callback: ReplyCallback) -> None:
        reply = self._manager.get(self._request("/traces"))
        self._track(reply, callback, parse_traces_payload)

    def close(self) -> None:
        # Detach first: abort() emits finished synchronously.
        pending, self._pending = list(self._pending), set()
        for reply in pending:
            reply.abort()

    # ---- Reply handling ----------------------------------------------------

    def _track(
        self,
        reply: QtNetwork.QNetworkReply,
        callback: ReplyCallback,
        parse: Optional[Callable[[bytes], Any]],
    ) -> None:
        self._pending.add(reply)
        reply.finished.connect(lambda: self._finish(reply, callback, parse))

    def _finish(
        self,
        reply: QtNetwork.QNetworkReply,
        callback: ReplyCallback,
        parse: Optional[Callable[[bytes], Any]],
    ) -> None:
        if reply not in self._pending:
            # Aborted by close(); the caller no longer expects an answer.
            reply.deleteLater()
            return
        self._pending.discard(reply)
        url = reply.url().toString()
        status = reply.attribute(QtNetwork.QNetworkRequest.Attribute.HttpStatusCodeAttribute)
        body = bytes(reply.readAll().data())
        error = reply.error()
        error_text = reply.errorString()
        reply.deleteLater()

        if error != QtNetwork.QNetworkReply.NetworkError.NoError or status is None or not 200 <= int(status) < 300:
            diagnostic = body.decode("utf-8", errors="replace").strip() or error_text
            logger.debug("Request to %s failed (status %s): %s", url, status, diagnostic)
            callback(Reply.failure(diagnostic))
            return

        if parse is None:
            callback(Reply.success())
            return
        try:
            value = parse(body)
        except (ValueError, KeyError, TypeError) as exc:
            callback(Reply.failure(f"Malformed response from {url}: {exc}"))
            return
        callback(Reply.success(value))


__all__ = [
    "DEFAULT_BASE_URL",
    "HttpAcquisitionClient",
    "encode_start_request",
    "parse_trigger_payload",
    "parse_traces_payload",
]
