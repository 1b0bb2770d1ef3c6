"""Tests for switching off third-party avatar automation."""

import types

import pytest

from rigpreview.config import PreviewSettings
from rigpreview.session import (
    MODULAR_AVATAR,
    VRCFURY,
    AutomationSwitchboard,
    families_for,
)


def make_module(name, **classes):
    module = types.ModuleType(name)
    for cls_name, namespace in classes.items():
        cls = type(cls_name, (), dict(namespace))
        cls.__module__ = name
        setattr(module, cls_name, cls)
    return module


@pytest.fixture
def modules():
    return [
        make_module(
            "VF.Builder.VRCFuryBuilder",
            VRCFuryBuilder={"enabled": True},
            PlayModeTrigger={"disabled": False, "skip": False},
            Helper={"enabled": True},
        ),
        make_module("nadena.dev.ndmf.runtime", ApplyOnPlay={"skipProcessing": False}),
        make_module("unrelated.tools", VRCFuryBuilder={"enabled": True}),
    ]


def test_families_follow_settings():
    settings = PreviewSettings(_env_file=None, prevent_modular_avatar_in_preview=False)

    assert families_for(settings) == [VRCFURY]
    assert families_for(PreviewSettings(_env_file=None)) == [VRCFURY, MODULAR_AVATAR]


def test_module_fragments_are_case_insensitive():
    assert VRCFURY.matches_module("VF.VRCFury.Editor")
    assert MODULAR_AVATAR.matches_module("nadena.dev.modular_avatar.core")
    assert not VRCFURY.matches_module("unrelated.tools")


def test_start_flips_first_switch_of_matching_classes(modules):
    vf, ndmf, unrelated = modules
    switchboard = AutomationSwitchboard([VRCFURY, MODULAR_AVATAR], modules=lambda: modules)

    assert switchboard.start() == 3

    assert vf.VRCFuryBuilder.enabled is False
    assert vf.PlayModeTrigger.disabled is True
    assert vf.PlayModeTrigger.skip is False
    assert vf.Helper.enabled is True
    assert ndmf.ApplyOnPlay.skipProcessing is True
    assert unrelated.VRCFuryBuilder.enabled is True
    assert switchboard.is_active


def test_stop_restores_original_values(modules):
    """CRITICAL: Every flipped switch is put back when the preview ends.

    Why: Leaving third-party tooling disabled would break the user's next build.
    """
    vf, ndmf, _ = modules
    switchboard = AutomationSwitchboard([VRCFURY, MODULAR_AVATAR], modules=lambda: modules)
    switchboard.start()

    assert switchboard.stop() == 3

    assert vf.VRCFuryBuilder.enabled is True
    assert vf.PlayModeTrigger.disabled is False
    assert ndmf.ApplyOnPlay.skipProcessing is False
    assert not switchboard.is_active


def test_failing_family_does_not_stop_others(modules, caplog):
    class Broken:
        name = "Broken"

        def matches_module(self, module_name):
            raise RuntimeError("scan failed")

    switchboard = AutomationSwitchboard([Broken(), MODULAR_AVATAR], modules=lambda: modules)

    assert switchboard.start() == 1
    assert "Failed to switch off Broken" in caplog.text
    switchboard.stop()


def test_no_families_flip_nothing(modules):
    switchboard = AutomationSwitchboard([], modules=lambda: modules)

    assert switchboard.start() == 0
    assert switchboard.switched == []
