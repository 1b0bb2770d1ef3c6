"""Tests for settings, preferences and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from rigpreview.config import (
    PREFERENCE_KEYS,
    Preferences,
    PreviewSettings,
    configure_logging,
    load_settings,
    save_settings,
)


def test_defaults():
    settings = PreviewSettings(_env_file=None)

    assert settings.debug_mode is False
    assert settings.fast_preview is False
    assert settings.show_bones is True
    assert settings.drop_gizmo_key == "G"
    assert settings.prevent_vrcfury_in_preview is True
    assert settings.prevent_modular_avatar_in_preview is True
    assert settings.change_buffer_path is None
    assert settings.guard_ticks == 5


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RIGPREVIEW_FAST_PREVIEW", "true")
    monkeypatch.setenv("RIGPREVIEW_GUARD_TICKS", "8")
    monkeypatch.setenv("RIGPREVIEW_CHANGE_BUFFER_PATH", str(tmp_path / "pending.json"))

    settings = PreviewSettings(_env_file=None)

    assert settings.fast_preview is True
    assert settings.guard_ticks == 8
    assert settings.change_buffer_path == tmp_path / "pending.json"


def test_gizmo_key_is_normalized():
    assert PreviewSettings(_env_file=None, drop_gizmo_key=" h ").drop_gizmo_key == "H"


@pytest.mark.parametrize(
    "overrides",
    [{"drop_gizmo_key": "  "}, {"guard_ticks": 0}],
    ids=["empty-key", "zero-ticks"],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        PreviewSettings(_env_file=None, **overrides)


def test_preferences_layer_over_environment(monkeypatch):
    monkeypatch.setenv("RIGPREVIEW_SHOW_BONES", "true")
    prefs = Preferences()
    prefs.set("RigPreview.ShowBones", False)
    prefs.set("RigPreview.FastPreview", True)

    settings = load_settings(prefs, _env_file=None)

    assert settings.show_bones is False
    assert settings.fast_preview is True


def test_overrides_beat_preferences():
    prefs = Preferences()
    prefs.set("RigPreview.DebugMode", True)

    assert load_settings(prefs, _env_file=None, debug_mode=False).debug_mode is False


def test_save_and_reload_preferences(tmp_path):
    path = tmp_path / "prefs" / "rigpreview.json"
    settings = PreviewSettings(_env_file=None, fast_preview=True, drop_gizmo_key="k")

    save_settings(settings, Preferences(path))
    reloaded = Preferences(path)

    assert set(reloaded.keys()) == set(PREFERENCE_KEYS.values())
    assert reloaded.get("RigPreview.DropGizmoKey") == "K"
    assert load_settings(reloaded, _env_file=None).fast_preview is True


def test_unreadable_preferences_file_is_ignored(tmp_path, caplog):
    path = tmp_path / "rigpreview.json"
    path.write_text("[not, json", encoding="utf-8")

    prefs = Preferences(path)

    assert prefs.keys() == []
    assert "Ignoring unreadable preferences file" in caplog.text


def test_preferences_delete():
    prefs = Preferences()
    prefs.set("RigPreview.ShowBones", True)

    assert prefs.delete("RigPreview.ShowBones") is True
    assert prefs.delete("RigPreview.ShowBones") is False
    assert "RigPreview.ShowBones" not in prefs


def test_configure_logging_levels():
    handler = logging.NullHandler()
    logger = configure_logging(PreviewSettings(_env_file=None, debug_mode=True), handler)

    try:
        assert logger.name == "rigpreview"
        assert logger.level == logging.DEBUG
        assert handler in logger.handlers

        configure_logging(PreviewSettings(_env_file=None), handler)
        assert logger.level == logging.INFO
        assert logger.handlers.count(handler) == 1
    finally:
        logger.removeHandler(handler)
