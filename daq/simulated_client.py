"""
In-process stand-in for the remote capture instrument.

Follows the instrument's trigger sequence on the scheduler's clock:
Idle until a capture starts, Armed until the trigger delay passes, Triggered
while the capture window fills, then Stopped. Replies are delivered through
`Scheduler.call_later` so callers see the same asynchronous completion they get
from the HTTP client.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from core.scheduler import Scheduler
from shared.models import Trace, TraceSet, TriggerStatus

from .base_client import AcquisitionClient, Reply, ReplyCallback

logger = logging.getLogger(__name__)

CHANNEL_LABELS: Tuple[str, ...] = ("CH1 Sine", "CH2 Square", "CH3 Ringing", "CH4 Noise")


class SimulatedAcquisitionClient(AcquisitionClient):
    """Simulated one-shot capture instrument with four analog channels."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        latency_ms: int = 1,
        trigger_delay_s: float = 0.005,
        n_samples: int = 1000,
        max_duration_s: float = 10.0,
        seed: Optional[int] = None,
    ) -> None:
        if n_samples < 2:
            raise ValueError("n_samples must be at least 2")
        self._scheduler = scheduler
        self._latency_ms = max(0, int(latency_ms))
        self._trigger_delay_s = max(0.0, float(trigger_delay_s))
        self._n_samples = int(n_samples)
        self._max_duration_s = float(max_duration_s)
        self._rng = np.random.default_rng(seed)

        self._armed_at: Optional[float] = None
        self._duration_s = 0.0
        self._last_capture: Optional[TraceSet] = None
        self.start_count = 0

    # ---- AcquisitionClient -------------------------------------------------

    def start_capture(self, duration_s: float, callback: ReplyCallback) -> None:
        if not 0 < duration_s <= self._max_duration_s:
            self._deliver(callback, Reply.failure(
                f"capture_duration_secs must be in (0, {self._max_duration_s}], got {duration_s}"
            ))
            return
        self.start_count += 1
        self._armed_at = self._scheduler.now()
        self._duration_s = float(duration_s)
        self._last_capture = None
        logger.debug("Simulated capture armed for %g s", duration_s)
        self._deliver(callback, Reply.success())

    def query_trigger(self, callback: ReplyCallback) -> None:
        self._deliver(callback, Reply.success(self.status()))

    def fetch_traces(self, callback: ReplyCallback) -> None:
        if self._last_capture is None and self.status() is TriggerStatus.STOPPED:
            self._last_capture = self._synthesize(self._duration_s)
        if self._last_capture is None:
            self._deliver(callback, Reply.failure("No completed capture available"))
            return
        self._deliver(callback, Reply.success(self._last_capture))

    # ---- Simulation --------------------------------------------------------

    def status(self) -> TriggerStatus:
        if self._armed_at is None:
            return TriggerStatus.IDLE
        elapsed = self._scheduler.now() - self._armed_at
        if elapsed < self._trigger_delay_s:
            return TriggerStatus.ARMED
        if elapsed < self._trigger_delay_s + self._duration_s:
            return TriggerStatus.TRIGGERED
        return TriggerStatus.STOPPED

    def _synthesize(self, duration_s: float) -> TraceSet:
        t = np.linspace(0.0, duration_s, self._n_samples)
        phase = 2.0 * np.pi * 5.0 * t / duration_s  # five periods per capture
        sine = 6.0 * np.sin(phase)
        square = 4.0 * np.sign(np.sin(phase / 2.0))
        ringing = 8.0 * np.exp(-6.0 * t / duration_s) * np.sin(4.0 * phase)
        noise = self._rng.normal(0.0, 0.5, size=t.shape) - 6.0
        traces = tuple(
            Trace(label, samples)
            for label, samples in zip(CHANNEL_LABELS, (sine, square, ringing, noise))
        )
        return TraceSet(times=t, traces=traces)

    def _deliver(self, callback: ReplyCallback, reply: Reply) -> None:
        self._scheduler.call_later(self._latency_ms, lambda: callback(reply))


__all__ = ["CHANNEL_LABELS", "SimulatedAcquisitionClient"]
