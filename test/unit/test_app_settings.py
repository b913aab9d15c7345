from __future__ import annotations

import pytest

from shared.app_settings import AppSettings, AppSettingsStore, InMemoryPersistence


def test_defaults_match_instrument_defaults():
    settings = AppSettingsStore().get()

    assert settings == AppSettings()
    assert settings.instrument_url == "http://localhost:8080"
    assert settings.capture_duration_s == 0.001
    assert settings.poll_interval_ms == 10
    assert settings.display_height_px == 500
    assert settings.continuous_on_launch is False


def test_stored_values_are_coerced_on_load():
    persistence = InMemoryPersistence(
        {
            "instrument_url": "sim://bench",
            "capture_duration_s": "0.25",
            "poll_interval_ms": "20",
            "continuous_on_launch": "true",
        }
    )
    settings = AppSettingsStore(persistence=persistence).get()

    assert settings.instrument_url == "sim://bench"
    assert settings.capture_duration_s == 0.25
    assert settings.poll_interval_ms == 20
    assert settings.continuous_on_launch is True


def test_invalid_stored_values_fall_back_to_defaults(caplog):
    persistence = InMemoryPersistence({"capture_duration_s": "-1", "poll_interval_ms": "fast"})

    with caplog.at_level("WARNING"):
        settings = AppSettingsStore(persistence=persistence).get()

    assert settings.capture_duration_s == 0.001
    assert settings.poll_interval_ms == 10
    assert "capture_duration_s" in caplog.text


def test_update_persists_and_notifies():
    persistence = InMemoryPersistence()
    store = AppSettingsStore(persistence=persistence)
    seen = []
    store.subscribe(seen.append, replay=False)

    updated = store.update(capture_duration_s=0.02, continuous_on_launch=1)

    assert updated.capture_duration_s == 0.02
    assert updated.continuous_on_launch is True
    assert seen == [updated]
    assert persistence.load()["capture_duration_s"] == 0.02

    reloaded = AppSettingsStore(persistence=persistence).get()
    assert reloaded == updated


def test_update_rejects_unknown_and_invalid_values():
    store = AppSettingsStore()

    with pytest.raises(TypeError):
        store.update(refresh_hz=60)
    with pytest.raises(ValueError):
        store.update(capture_duration_s=0)
    with pytest.raises(ValueError):
        store.update(poll_interval_ms=-5)

    assert store.get() == AppSettings()


def test_subscribe_replays_and_unsubscribes():
    store = AppSettingsStore()
    seen = []

    unsubscribe = store.subscribe(seen.append)
    assert seen == [AppSettings()]

    unsubscribe()
    store.update(display_height_px=400)
    assert len(seen) == 1


def test_failing_subscriber_does_not_block_others():
    store = AppSettingsStore()
    seen = []

    def broken(_settings):
        raise RuntimeError("boom")

    store.subscribe(broken, replay=False)
    store.subscribe(seen.append, replay=False)
    store.update(poll_interval_ms=5)

    assert [s.poll_interval_ms for s in seen] == [5]
