"""CaptureController - drives one remote instrument through capture cycles.

A cycle is start -> poll trigger -> stop -> fetch traces. The controller is
headless: the instrument is an injected `AcquisitionClient` and the poll timer
comes from an injected `Scheduler`, so the same object runs on the Qt event
loop or on a virtual clock in tests.

Invariants:
- at most one polling timer is alive at any time;
- at most one trigger query is outstanding at any time;
- each Stopped observation cancels the timer once and issues one fetch;
- replies that belong to an earlier cycle are ignored.
"""
from __future__ import annotations

import functools
import logging
from typing import Callable, Dict, Optional, Sequence

import numpy as np

from daq.base_client import AcquisitionClient, Reply
from shared.errors import CaptureError, CaptureStartError, InvalidConfig, TraceFetchError, TriggerPollError
from shared.models import CaptureConfig, ControllerPhase, Trace, TraceSet, TriggerStatus

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DataCallback = Callable[[np.ndarray, Sequence[Trace]], None]

DEFAULT_POLL_INTERVAL_MS = 10


class _Listeners:
    """Token-keyed callback registry; each registration returns its unsubscribe."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._callbacks: Dict[int, Callable] = {}
        self._next_token = 0

    def add(self, callback: Callable) -> Callable[[], None]:
        token = self._next_token
        self._next_token += 1
        self._callbacks[token] = callback

        def unsubscribe() -> None:
            self._callbacks.pop(token, None)

        return unsubscribe

    def emit(self, *args) -> None:
        for callback in list(self._callbacks.values()):
            try:
                callback(*args)
            except Exception:
                logger.exception("%s listener failed", self._name)


class CaptureController:
    """State machine for start -> poll -> stop -> fetch capture cycles."""

    def __init__(
        self,
        client: AcquisitionClient,
        scheduler: Scheduler,
        *,
        on_data: Optional[DataCallback] = None,
        config: Optional[CaptureConfig] = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive")
        self._client = client
        self._scheduler = scheduler
        self._config = config if config is not None else CaptureConfig()
        self._poll_interval_ms = int(poll_interval_ms)

        self._phase = ControllerPhase.IDLE
        self._continuous = False
        self._poll_handle: Optional[TimerHandle] = None
        self._trigger = TriggerStatus.IDLE

        # Sequencing
        self._cycle = 0
        self._start_in_flight = False
        self._query_in_flight = False

        self._data_listeners = _Listeners("data")
        self._trigger_listeners = _Listeners("trigger")
        self._phase_listeners = _Listeners("phase")
        self._error_listeners = _Listeners("error")
        if on_data is not None:
            self._data_listeners.add(on_data)

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> ControllerPhase:
        return self._phase

    @property
    def continuous(self) -> bool:
        return self._continuous

    @property
    def trigger(self) -> TriggerStatus:
        """Last trigger status reported by the instrument."""
        return self._trigger

    @property
    def config(self) -> CaptureConfig:
        return self._config

    @property
    def polling(self) -> bool:
        return self._poll_handle is not None

    @property
    def cycle(self) -> int:
        """Sequence number of the current (or last) capture cycle."""
        return self._cycle

    def add_data_callback(self, callback: DataCallback) -> Callable[[], None]:
        return self._data_listeners.add(callback)

    def add_trigger_callback(self, callback: Callable[[TriggerStatus], None]) -> Callable[[], None]:
        return self._trigger_listeners.add(callback)

    def add_phase_callback(self, callback: Callable[[ControllerPhase], None]) -> Callable[[], None]:
        return self._phase_listeners.add(callback)

    def add_error_callback(self, callback: Callable[[Exception], None]) -> Callable[[], None]:
        return self._error_listeners.add(callback)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def configure(self, duration: object) -> CaptureConfig:
        """Set the capture duration in seconds. Raises InvalidConfig if not a positive number."""
        if isinstance(duration, str):
            duration = duration.strip()
        try:
            value = float(duration)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(f"duration must be a number, got {duration!r}") from exc
        self._config = CaptureConfig(duration=value)
        logger.debug("Capture duration set to %g s", self._config.duration)
        return self._config

    def start(self) -> bool:
        """Send a StartCapture request. Returns False if a cycle is already in progress."""
        if self._phase is not ControllerPhase.IDLE or self._start_in_flight:
            logger.warning("Ignoring start request while %s", self._phase.value)
            return False
        self._cycle += 1
        self._start_in_flight = True
        logger.info("Starting capture (cycle %d, %g s)", self._cycle, self._config.duration)
        self._client.start_capture(
            self._config.duration,
            functools.partial(self._on_start_reply, self._cycle),
        )
        return True

    def toggle_continuous(self) -> bool:
        """Flip continuous mode; turning it on while Idle starts a capture immediately."""
        self._continuous = not self._continuous
        logger.info("Continuous capture %s", "enabled" if self._continuous else "disabled")
        if self._continuous and self._phase is ControllerPhase.IDLE:
            self.start()
        return self._continuous

    def reset(self) -> None:
        """Return to Idle from any phase, discarding outstanding replies."""
        self._cancel_poll()
        self._cycle += 1
        self._start_in_flight = False
        self._query_in_flight = False
        if self._phase is not ControllerPhase.IDLE:
            logger.info("Controller reset from %s", self._phase.value)
        self._set_phase(ControllerPhase.IDLE)

    def shutdown(self) -> None:
        self._continuous = False
        self.reset()

    # -------------------------------------------------------------------------
    # Cycle steps
    # -------------------------------------------------------------------------

    def _on_start_reply(self, cycle: int, reply: Reply) -> None:
        if cycle != self._cycle or not self._start_in_flight:
            logger.debug("Dropping start reply from stale cycle %d", cycle)
            return
        self._start_in_flight = False
        if not reply.ok:
            self._report(CaptureStartError("Capture start rejected", reply.diagnostic))
            return
        self._set_phase(ControllerPhase.CAPTURING)
        self._poll_handle = self._scheduler.call_every(self._poll_interval_ms, self._poll_tick)

    def _poll_tick(self) -> None:
        if self._phase is not ControllerPhase.CAPTURING:
            return
        if self._query_in_flight:
            logger.debug("Trigger query still outstanding, skipping tick")
            return
        self._query_in_flight = True
        self._client.query_trigger(functools.partial(self._on_trigger_reply, self._cycle))

    def _on_trigger_reply(self, cycle: int, reply: Reply) -> None:
        if cycle != self._cycle or self._phase is not ControllerPhase.CAPTURING:
            logger.debug("Dropping trigger reply for cycle %d while %s", cycle, self._phase.value)
            return
        self._query_in_flight = False
        if not reply.ok:
            self._cancel_poll()
            self._report(TriggerPollError("Trigger request failed", reply.diagnostic))
            return

        status = reply.value if isinstance(reply.value, TriggerStatus) else TriggerStatus.from_wire(reply.value)
        logger.debug("Trigger state: %s", status.value)
        if status is not self._trigger:
            self._trigger = status
            self._trigger_listeners.emit(status)
        if status is not TriggerStatus.STOPPED:
            return

        logger.info("Capture stopped, pulling traces")
        self._cancel_poll()
        self._set_phase(ControllerPhase.STOPPED)
        self._client.fetch_traces(functools.partial(self._on_traces_reply, self._cycle))

    def _on_traces_reply(self, cycle: int, reply: Reply) -> None:
        if cycle != self._cycle or self._phase is not ControllerPhase.STOPPED:
            logger.debug("Dropping trace reply for cycle %d while %s", cycle, self._phase.value)
            return
        if not reply.ok:
            self._report(TraceFetchError("Data request failed", reply.diagnostic))
            return

        trace_set: TraceSet = reply.value
        logger.info("Redrawing %d traces", len(trace_set.traces))
        self._data_listeners.emit(trace_set.times, trace_set.traces)
        self._set_phase(ControllerPhase.IDLE)
        if self._continuous:
            logger.info("Recapturing")
            self.start()

    def _cancel_poll(self) -> bool:
        """Cancel the polling timer if one is alive. Safe to call repeatedly."""
        handle, self._poll_handle = self._poll_handle, None
        if handle is None:
            return False
        handle.cancel()
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _set_phase(self, phase: ControllerPhase) -> None:
        if phase is self._phase:
            return
        self._phase = phase
        self._phase_listeners.emit(phase)

    def _report(self, error: CaptureError) -> None:
        logger.error("%s (phase %s)", error, self._phase.value)
        self._error_listeners.emit(error)


__all__ = ["CaptureController", "DEFAULT_POLL_INTERVAL_MS"]
