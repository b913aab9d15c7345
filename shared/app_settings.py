from __future__ import annotations

import logging
import math
import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppSettings:
    instrument_url: str = "http://localhost:8080"
    capture_duration_s: float = 0.001
    poll_interval_ms: int = 10
    display_height_px: int = 500
    continuous_on_launch: bool = False


class SettingsPersistence:
    """Backend that loads and stores raw settings values by field name."""

    def load(self) -> dict:
        raise NotImplementedError

    def save(self, data: dict) -> None:
        raise NotImplementedError


class InMemoryPersistence(SettingsPersistence):
    """Dictionary-backed persistence for headless use and tests."""

    def __init__(self, initial: Optional[dict] = None) -> None:
        self._data: dict = dict(initial or {})

    def load(self) -> dict:
        return dict(self._data)

    def save(self, data: dict) -> None:
        self._data.update(data)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "yes", "on"):
            return True
        if text in ("false", "no", "off", ""):
            return False
        return bool(int(text))
    return bool(value)


def _coerce_positive_float(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number) or number <= 0:
        raise ValueError(f"expected a positive number, got {value!r}")
    return number


def _coerce_positive_int(value: Any) -> int:
    number = int(float(value))
    if number <= 0:
        raise ValueError(f"expected a positive integer, got {value!r}")
    return number


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "instrument_url": str,
    "capture_duration_s": _coerce_positive_float,
    "poll_interval_ms": _coerce_positive_int,
    "display_height_px": _coerce_positive_int,
    "continuous_on_launch": _coerce_bool,
}


class AppSettingsStore:
    """Thread-safe settings store for application-wide preferences."""

    def __init__(self, *, persistence: Optional[SettingsPersistence] = None) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[AppSettings], None]] = {}
        self._next_token = 0
        self._persistence = persistence if persistence is not None else InMemoryPersistence()
        self._settings = self._load_settings()

    def _load_settings(self) -> AppSettings:
        raw = self._persistence.load()
        values: Dict[str, Any] = {}
        for f in fields(AppSettings):
            if f.name not in raw or raw[f.name] is None:
                continue
            try:
                values[f.name] = _COERCERS[f.name](raw[f.name])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid stored setting %s=%r", f.name, raw[f.name])
        return AppSettings(**values)

    def get(self) -> AppSettings:
        with self._lock:
            return self._settings

    def update(self, **kwargs) -> AppSettings:
        unknown = sorted(set(kwargs) - set(_COERCERS))
        if unknown:
            raise TypeError(f"unknown settings: {', '.join(unknown)}")
        coerced = {key: _COERCERS[key](value) for key, value in kwargs.items()}
        with self._lock:
            new_settings = replace(self._settings, **coerced)
            self._settings = new_settings
            callbacks = list(self._subscribers.values())
            self._persistence.save(asdict(new_settings))
        for callback in callbacks:
            try:
                callback(new_settings)
            except Exception as exc:
                logger.debug("App settings subscriber callback failed: %s", exc)
                continue
        return new_settings

    def subscribe(self, callback: Callable[[AppSettings], None], *, replay: bool = True) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
            snapshot = self._settings
        if replay:
            callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe


__all__ = ["AppSettings", "AppSettingsStore", "InMemoryPersistence", "SettingsPersistence"]
