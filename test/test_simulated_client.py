import numpy as np
import pytest

from core.capture_controller import CaptureController
from daq import create_client
from daq.simulated_client import CHANNEL_LABELS, SimulatedAcquisitionClient
from shared.models import ControllerPhase, TriggerStatus
from test.fixtures.manual_scheduler import ManualScheduler


def _collect(scheduler, client, operation, *args):
    replies = []
    getattr(client, operation)(*args, replies.append)
    scheduler.advance(1)
    assert len(replies) == 1
    return replies[0]


def test_status_follows_trigger_sequence():
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler, trigger_delay_s=0.005, seed=1)

    assert client.status() is TriggerStatus.IDLE
    assert _collect(scheduler, client, "start_capture", 0.01).ok

    assert client.status() is TriggerStatus.ARMED
    scheduler.advance(5)
    assert client.status() is TriggerStatus.TRIGGERED
    scheduler.advance(10)
    assert client.status() is TriggerStatus.STOPPED
    assert _collect(scheduler, client, "query_trigger").value is TriggerStatus.STOPPED


def test_replies_are_asynchronous():
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler, latency_ms=3)
    replies = []

    client.query_trigger(replies.append)
    assert replies == []
    scheduler.advance(2)
    assert replies == []
    scheduler.advance(1)
    assert len(replies) == 1


@pytest.mark.parametrize("duration", [0.0, -1.0, 11.0])
def test_out_of_range_duration_rejected(duration):
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler, max_duration_s=10.0)

    reply = _collect(scheduler, client, "start_capture", duration)

    assert not reply.ok
    assert "capture_duration_secs" in reply.diagnostic
    assert client.start_count == 0


def test_fetch_before_capture_completes_fails():
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler)

    assert not _collect(scheduler, client, "fetch_traces").ok

    _collect(scheduler, client, "start_capture", 1.0)
    reply = _collect(scheduler, client, "fetch_traces")
    assert not reply.ok
    assert reply.diagnostic == "No completed capture available"


def test_fetch_returns_four_labelled_channels():
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler, n_samples=256, seed=7)
    _collect(scheduler, client, "start_capture", 0.002)
    scheduler.advance(20)

    trace_set = _collect(scheduler, client, "fetch_traces").value

    assert [t.label for t in trace_set.traces] == list(CHANNEL_LABELS)
    assert trace_set.n_samples == 256
    assert trace_set.max_time == pytest.approx(0.002)
    for trace in trace_set.traces:
        assert np.all(np.abs(trace.samples) < 10.24)

    # The same capture is served until the next start.
    assert _collect(scheduler, client, "fetch_traces").value is trace_set


def test_controller_runs_cycles_against_simulator():
    scheduler = ManualScheduler()
    client = SimulatedAcquisitionClient(scheduler, seed=3)
    controller = CaptureController(client, scheduler)
    received = []
    controller.add_data_callback(lambda times, traces: received.append((times, traces)))

    controller.configure(0.001)
    controller.start()
    scheduler.advance(50)

    assert len(received) == 1
    times, traces = received[0]
    assert times[-1] == pytest.approx(0.001)
    assert len(traces) == 4
    assert controller.phase is ControllerPhase.IDLE
    assert client.start_count == 1

    controller.toggle_continuous()
    scheduler.advance(200)
    assert client.start_count >= 3
    assert len(received) == client.start_count - 1

    controller.shutdown()
    count = client.start_count
    scheduler.advance(200)
    assert client.start_count == count
    assert scheduler.repeating_timers == []


def test_create_client_selects_by_scheme():
    scheduler = ManualScheduler()

    assert isinstance(create_client("sim://", scheduler), SimulatedAcquisitionClient)
    with pytest.raises(ValueError):
        create_client("ftp://instrument", scheduler)
    with pytest.raises(ValueError):
        create_client("localhost:8080", scheduler)
