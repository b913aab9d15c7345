"""
Scripted acquisition client for deterministic controller tests.

Replays canned replies per operation and records every request. In the
default mode replies are delivered synchronously from inside the request
call; with ``deferred=True`` they are queued until the test delivers them,
which lets a test reorder or duplicate completions.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

from daq.base_client import AcquisitionClient, Reply, ReplyCallback
from shared.models import Trace, TraceSet, TriggerStatus

ScriptedReply = Union[Reply, TriggerStatus, TraceSet, None]


def default_trace_set() -> TraceSet:
    return TraceSet(times=[0.0, 1.0, 2.0], traces=(Trace("A", [0.0, 0.5, 1.0]),))


@dataclass
class PendingReply:
    operation: str
    callback: ReplyCallback
    reply: Reply

    def deliver(self) -> None:
        self.callback(self.reply)


def _as_reply(item: ScriptedReply) -> Reply:
    if isinstance(item, Reply):
        return item
    return Reply.success(item)


class ScriptedClient(AcquisitionClient):
    def __init__(
        self,
        *,
        start_replies: Optional[Iterable[ScriptedReply]] = None,
        trigger_replies: Optional[Iterable[ScriptedReply]] = None,
        trace_replies: Optional[Iterable[ScriptedReply]] = None,
        repeat_triggers: bool = False,
        deferred: bool = False,
    ) -> None:
        self._start_script: Iterator[ScriptedReply] = iter(start_replies or ())
        triggers = list(trigger_replies or (TriggerStatus.STOPPED,))
        self._trigger_script: Iterator[ScriptedReply] = itertools.cycle(triggers) if repeat_triggers else iter(triggers)
        self._trace_script: Iterator[ScriptedReply] = iter(trace_replies or ())
        self.deferred = deferred

        self.start_requests: List[float] = []
        self.trigger_queries = 0
        self.fetch_count = 0
        self.pending: List[PendingReply] = []
        self.delivered: List[PendingReply] = []
        self.closed = False

    # ---- AcquisitionClient ------------------------------------------------

    def start_capture(self, duration_s: float, callback: ReplyCallback) -> None:
        self.start_requests.append(duration_s)
        self._respond("start", callback, _as_reply(next(self._start_script, None)))

    def query_trigger(self, callback: ReplyCallback) -> None:
        self.trigger_queries += 1
        self._respond("trigger", callback, _as_reply(next(self._trigger_script, TriggerStatus.STOPPED)))

    def fetch_traces(self, callback: ReplyCallback) -> None:
        self.fetch_count += 1
        item = next(self._trace_script, None)
        self._respond("traces", callback, _as_reply(item if item is not None else default_trace_set()))

    def close(self) -> None:
        self.closed = True

    # ---- Delivery ----------------------------------------------------------

    def _respond(self, operation: str, callback: ReplyCallback, reply: Reply) -> None:
        pending = PendingReply(operation, callback, reply)
        if self.deferred:
            self.pending.append(pending)
            return
        self.delivered.append(pending)
        pending.deliver()

    def deliver_next(self) -> PendingReply:
        pending = self.pending.pop(0)
        self.delivered.append(pending)
        pending.deliver()
        return pending

    def deliver_all(self) -> None:
        while self.pending:
            self.deliver_next()


__all__ = ["PendingReply", "ScriptedClient", "default_trace_set"]
