"""Persist AppSettings through QSettings so they survive restarts.

Values are kept under one QSettings group. QSettings hands back strings on
most platforms; `AppSettingsStore` coerces them on load, so this backend only
moves raw values in and out.
"""
from __future__ import annotations

from dataclasses import fields
from typing import Optional

from PySide6.QtCore import QSettings

from shared.app_settings import AppSettings, AppSettingsStore, SettingsPersistence

ORGANIZATION = "RemoteScope"
APPLICATION = "RemoteScope"
GROUP = "capture"


class QSettingsPersistence(SettingsPersistence):
    def __init__(self, qsettings: Optional[QSettings] = None, *, group: str = GROUP) -> None:
        self._qsettings = qsettings if qsettings is not None else QSettings(ORGANIZATION, APPLICATION)
        self._group = group
        self._keys = tuple(f.name for f in fields(AppSettings))

    def load(self) -> dict:
        self._qsettings.beginGroup(self._group)
        try:
            stored = {key: self._qsettings.value(key) for key in self._keys if self._qsettings.contains(key)}
        finally:
            self._qsettings.endGroup()
        return {key: value for key, value in stored.items() if value is not None}

    def save(self, data: dict) -> None:
        self._qsettings.beginGroup(self._group)
        try:
            for key in self._keys:
                if key not in data:
                    continue
                value = data[key]
                # Stored as int so the value reads back the same on every backend.
                self._qsettings.setValue(key, int(value) if isinstance(value, bool) else value)
        finally:
            self._qsettings.endGroup()
        self._qsettings.sync()


def create_gui_settings_store() -> AppSettingsStore:
    return AppSettingsStore(persistence=QSettingsPersistence())


__all__ = ["QSettingsPersistence", "create_gui_settings_store"]
