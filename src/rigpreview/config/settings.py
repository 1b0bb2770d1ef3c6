"""Configuration settings using Pydantic Settings.

Settings come from environment variables (RIGPREVIEW_*) and a .env file, with
values the user persisted through the preferences store layered on top.

Usage:
    from rigpreview.config import PreviewSettings, load_settings, save_settings

    # Environment only
    settings = PreviewSettings()

    # Environment plus persisted preferences
    settings = load_settings()
    save_settings(settings.model_copy(update={"fast_preview": True}))
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class PreviewSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for preview sessions.

    Attributes:
        debug_mode: Verbose logging of the preview engine.
        fast_preview: Edit the original directly, without isolation or copy.
            Saving is unavailable in this mode.
        show_bones: Draw bone chains while previewing.
        drop_gizmo_key: Key that drops the grab gizmo.
        prevent_vrcfury_in_preview: Switch off VRCFury-style automation.
        prevent_modular_avatar_in_preview: Switch off Modular Avatar and
            NDMF-style automation.
        change_buffer_path: File holding pending changes; in memory if None.
        guard_ticks: Loop ticks the selection guard re-asserts the selection.

    Environment Variables:
        RIGPREVIEW_DEBUG_MODE
        RIGPREVIEW_FAST_PREVIEW
        RIGPREVIEW_SHOW_BONES
        RIGPREVIEW_DROP_GIZMO_KEY
        RIGPREVIEW_PREVENT_VRCFURY_IN_PREVIEW
        RIGPREVIEW_PREVENT_MODULAR_AVATAR_IN_PREVIEW
        RIGPREVIEW_CHANGE_BUFFER_PATH
        RIGPREVIEW_GUARD_TICKS
    """

    model_config = SettingsConfigDict(
        env_prefix="RIGPREVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug_mode: bool = False
    fast_preview: bool = False
    show_bones: bool = True
    drop_gizmo_key: str = "G"
    prevent_vrcfury_in_preview: bool = True
    prevent_modular_avatar_in_preview: bool = True
    change_buffer_path: Path | None = None
    guard_ticks: int = 5

    @field_validator("drop_gizmo_key")
    @classmethod
    def _normalize_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("drop_gizmo_key must not be empty")
        return value.upper()

    @field_validator("guard_ticks")
    @classmethod
    def _positive_ticks(cls, value: int) -> int:
        if value < 1:
            raise ValueError("guard_ticks must be at least 1")
        return value


# Settings field -> persisted preference key
PREFERENCE_KEYS: dict[str, str] = {
    "debug_mode": "RigPreview.DebugMode",
    "fast_preview": "RigPreview.FastPreview",
    "show_bones": "RigPreview.ShowBones",
    "drop_gizmo_key": "RigPreview.DropGizmoKey",
    "prevent_vrcfury_in_preview": "RigPreview.PreventVRCFuryInPreview",
    "prevent_modular_avatar_in_preview": "RigPreview.PreventModularAvatarInPreview",
}


class Preferences:
    """Key/value store for user preferences, optionally backed by a JSON file.

    Args:
        path: JSON file to load from and save to; purely in memory if None.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._values: dict[str, Any] = {}
        if self._path is not None and self._path.exists():
            self._values = self._read(self._path)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", path)
            return {}
        return data

    @property
    def path(self) -> Path | None:
        return self._path

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        if key not in self._values:
            return False
        del self._values[key]
        return True

    def keys(self) -> list[str]:
        return list(self._values)

    def save(self) -> None:
        """Write to the backing file. No-op for in-memory preferences."""
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")


# Module-level preferences instance
_preferences = Preferences()


def get_preferences() -> Preferences:
    """Access the process-wide preferences store.

    Returns:
        The process-local Preferences instance.
    """
    return _preferences


def load_settings(preferences: Preferences | None = None, **overrides: Any) -> PreviewSettings:
    """Build settings from the environment with persisted preferences on top.

    Args:
        preferences: Store to read; the process-wide store if None.
        **overrides: Explicit values taking precedence over both.

    Returns:
        Validated settings.
    """
    prefs = preferences if preferences is not None else get_preferences()
    values = {field: prefs.get(key) for field, key in PREFERENCE_KEYS.items() if key in prefs}
    values.update(overrides)
    return PreviewSettings(**values)


def save_settings(settings: PreviewSettings, preferences: Preferences | None = None) -> None:
    """Persist the user-facing settings into the preferences store."""
    prefs = preferences if preferences is not None else get_preferences()
    for field, key in PREFERENCE_KEYS.items():
        prefs.set(key, getattr(settings, field))
    prefs.save()
