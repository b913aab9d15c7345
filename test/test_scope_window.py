import pytest

pytest.importorskip("PySide6")

from gui.scope_window import PLACEHOLDER_TIMES, ScopeWindow
from shared.app_settings import AppSettingsStore, InMemoryPersistence
from shared.models import ControllerPhase, TriggerStatus
from test.fixtures.manual_scheduler import ManualScheduler
from test.fixtures.scripted_client import ScriptedClient


@pytest.fixture
def window_parts(qapp):
    persistence = InMemoryPersistence({"display_height_px": 240})
    store = AppSettingsStore(persistence=persistence)
    client = ScriptedClient(trigger_replies=[TriggerStatus.ARMED, TriggerStatus.STOPPED], repeat_triggers=True)
    scheduler = ManualScheduler()
    window = ScopeWindow(store, client=client, scheduler=scheduler)
    window.show()
    qapp.processEvents()
    window._load_font()
    try:
        yield window, store, client, scheduler
    finally:
        window.close()


def test_placeholder_drawn_once_surface_and_font_ready(window_parts):
    window, _, _, _ = window_parts

    viewport = window.display.viewport
    assert viewport is not None
    assert viewport.height == 240
    scene = window.renderer.last_scene
    assert scene is not None
    assert scene.max_time == pytest.approx(max(PLACEHOLDER_TIMES))


def test_invalid_duration_is_rejected_before_sending(window_parts):
    window, store, client, _ = window_parts
    rejected = []
    window.controls.durationRejected.connect(rejected.append)

    window.controls.duration_edit.setText("-3")
    window.controls.capture_button.click()

    assert rejected
    assert client.start_requests == [0.001]
    assert store.get().capture_duration_s == 0.001


def test_capture_button_runs_one_cycle(window_parts):
    window, store, client, scheduler = window_parts

    window.controls.duration_edit.setText("0.01")
    window.controls.capture_button.click()

    assert client.start_requests == [0.01]
    assert store.get().capture_duration_s == 0.01
    assert window.controller.phase is ControllerPhase.CAPTURING

    scheduler.advance(20)

    assert window.controller.phase is ControllerPhase.IDLE
    assert window.controls.trigger_label.text() == "Stopped"
    assert window.renderer.last_scene.max_time == pytest.approx(2.0)
    assert len(client.start_requests) == 1


def test_run_button_toggles_continuous(window_parts):
    window, _, client, scheduler = window_parts

    window.controls.run_button.click()
    assert window.controls.run_button.text() == "Stop"
    scheduler.advance(40)
    assert len(client.start_requests) == 3

    window.controls.run_button.click()
    assert window.controls.run_button.text() == "Run"
    scheduler.advance(40)
    assert len(client.start_requests) == 3


def test_close_shuts_down_controller_and_client(window_parts):
    window, _, client, scheduler = window_parts
    window.controls.run_button.click()

    window.close()

    assert client.closed
    assert not window.controller.continuous
    assert scheduler.active_timers == []


def test_qsettings_persistence_round_trip(qapp, tmp_path):
    from PySide6.QtCore import QSettings

    from gui.qsettings_adapter import QSettingsPersistence

    path = str(tmp_path / "remotescope.ini")
    store = AppSettingsStore(persistence=QSettingsPersistence(QSettings(path, QSettings.Format.IniFormat)))
    store.update(capture_duration_s=0.02, continuous_on_launch=True, instrument_url="sim://bench")

    reloaded = AppSettingsStore(persistence=QSettingsPersistence(QSettings(path, QSettings.Format.IniFormat))).get()

    assert reloaded.capture_duration_s == 0.02
    assert reloaded.continuous_on_launch is True
    assert reloaded.instrument_url == "sim://bench"
    assert reloaded.poll_interval_ms == 10
