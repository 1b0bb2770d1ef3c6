"""Tests for the preview session state machine."""

import logging

import pytest

from rigpreview.changes import MemoryChangeBuffer
from rigpreview.config import PreviewSettings
from rigpreview.rig import AvatarDescriptor, PhysBone
from rigpreview.scene import BUILD_PREPROCESS, LocalHost, Node, Scene
from rigpreview.session import (
    PreviewCopy,
    PreviewSession,
    SessionExistsError,
    SessionMode,
    SessionState,
)
from rigpreview.session import machine

from conftest import BuildMarker, Unregistered, build_avatar, make_session, tail_of


def third_party_build(avatar):
    third_party_build.calls.append(avatar.name)


third_party_build.calls = []


@pytest.fixture(autouse=True)
def _reset_calls():
    third_party_build.calls.clear()


def preview_copies(host):
    return [top for scene in host.scenes() for top in scene.roots if top.has_component(PreviewCopy)]


# Construction


def test_only_one_session_per_process(host, settings, session):
    with pytest.raises(SessionExistsError):
        PreviewSession.create(host, settings)

    session.dispose()

    assert PreviewSession.current() is None
    make_session(host, settings)


def test_new_session_is_idle(session):
    assert session.state is SessionState.IDLE
    assert not session.is_active
    assert session.clone_root is None
    assert not session.control_surface_visible


# Start


def test_start_isolates_a_copy(host, scene, avatar, session, bone):
    """CRITICAL: Starting hides every rig and shows an active copy of the chosen one.

    Why: Tooling attached to the original rigs must not run during the preview.
    """
    result = session.request_start(component=bone)

    assert result.ok
    assert session.state is SessionState.ACTIVE
    assert session.control_surface_visible
    assert session.mode is SessionMode.SAFE
    assert session.original_root is avatar
    clone = session.clone_root
    assert clone is not None and clone is not avatar
    assert clone.name == "Avatar"
    assert clone.active_self
    assert clone.scene is scene
    assert not avatar.active_self
    assert not scene.roots[1].active_self
    assert scene.roots[2].active_self
    assert host.is_simulating


def test_copy_keeps_only_essential_components(session, bone):
    session.request_start(component=bone)
    clone = session.clone_root

    assert clone.get_component(BuildMarker) is None
    assert clone.get_component(AvatarDescriptor) is not None
    assert clone.get_component(PreviewCopy).source_path == "Main/Avatar"
    assert clone.find_child("Body").get_component(Unregistered) is None
    assert tail_of(clone).get_component(PhysBone) == bone


def test_start_selects_counterpart(host, session, bone):
    session.request_start(component=bone)
    counterpart = tail_of(session.clone_root)

    assert host.get_selection() is counterpart
    assert host.run_pending() == [True]


def test_disabled_trigger_is_enabled_on_copy_only(host, session, tail):
    tail_end = tail.find_child("TailEnd")
    disabled = tail_end.get_component(PhysBone)

    session.request_start(component=disabled)

    copy_end = tail_of(session.clone_root).find_child("TailEnd")
    assert copy_end.get_component(PhysBone).enabled
    assert not disabled.enabled
    host.run_pending()


def test_start_records_baseline_and_context(session, bone):
    session.request_start(component=bone)

    assert len(session.snapshots.baseline) == 3
    assert session.snapshots.root_path == "Main/Avatar"
    assert session.correspondence.baseline.get("gravity").value == "0.3"


def test_state_listener_sees_full_lifecycle(session, bone):
    states = []
    session.add_state_listener(states.append)

    session.request_start(component=bone)
    session.request_exit()

    assert states == [
        SessionState.AWAITING_ISOLATION,
        SessionState.ISOLATING,
        SessionState.ACTIVE,
        SessionState.AWAITING_RESTORE,
        SessionState.IDLE,
    ]


def test_start_while_active_is_ignored(session, bone, caplog):
    session.request_start(component=bone)
    clone = session.clone_root

    result = session.request_start(component=bone)

    assert not result
    assert session.clone_root is clone
    assert "start ignored" in caplog.text


def test_start_while_host_simulating_is_ignored(host, session):
    host.enter_simulation()

    assert not session.request_start()
    assert session.state is SessionState.IDLE


# Root selection


def test_root_from_selection(host, scene, session):
    other = scene.roots[1]
    host.set_selection(tail_of(other))

    result = session.request_start()

    assert result.root is other
    assert result.trigger_node is tail_of(other)


def test_selected_root_without_tracked_component_on_node(host, scene, session):
    other = scene.roots[1]
    host.set_selection(other.find_child("Body"))

    assert session.request_start().root is other


def test_root_falls_back_to_first_rig_with_bones(host, scene, avatar, session):
    host.set_selection(scene.roots[2])

    assert session.request_start().root is avatar


def test_node_outside_any_rig_uses_first_rig(scene, avatar, session):
    result = session.request_start(node=scene.roots[2])

    assert result.root is avatar
    assert result.trigger_node is None


@pytest.mark.parametrize(
    ("scene_factory", "title"),
    [
        (lambda: Scene("Main", Node("Prop")), "No rig found"),
        (lambda: Scene("Main", Node("Avatar", AvatarDescriptor())), "No physics components found"),
    ],
    ids=["no-rig", "no-physics"],
)
def test_validation_failures_are_shown(settings, scene_factory, title):
    host = LocalHost(scene_factory())
    session = make_session(host, settings)

    result = session.request_start()

    assert not result
    assert result.title == title
    assert host.messages[0][0] == title
    assert session.state is SessionState.IDLE
    assert not host.is_simulating


def test_component_not_in_scene(host, session):
    result = session.request_start(component=PhysBone())

    assert result.title == "Component not in scene"
    assert session.state is SessionState.IDLE


# Suppression


def test_untrusted_build_hooks_do_not_run(host, session, bone):
    host.hooks.register(BUILD_PREPROCESS, third_party_build)

    session.request_start(component=bone)

    assert third_party_build.calls == []
    assert third_party_build not in host.hooks.callbacks(BUILD_PREPROCESS)

    session.request_exit()

    assert host.hooks.callbacks(BUILD_PREPROCESS) == [third_party_build]


# Exit


def test_exit_restores_scene(host, scene, avatar, session, bone):
    """CRITICAL: Exiting puts every root back and leaves no copy behind.

    Why: The user's scene must be exactly as it was before the preview.
    """
    scene.roots[1].set_active(False)
    roots_before = list(scene.roots)

    session.request_start(component=bone)
    assert session.request_exit()

    assert session.state is SessionState.IDLE
    assert scene.roots == roots_before
    assert avatar.active_self
    assert not scene.roots[1].active_self
    assert preview_copies(host) == []
    assert not host.is_simulating
    assert session.clone_root is None
    assert session.snapshots.is_empty


def test_exit_from_host_side(host, avatar, session, bone):
    """Leaving simulated mode through the host ends the preview as well."""
    session.request_start(component=bone)

    host.exit_simulation()

    assert session.state is SessionState.IDLE
    assert avatar.active_self
    assert preview_copies(host) == []


def test_exit_when_idle_is_ignored(session):
    assert session.request_exit() is False


def test_toggle(session):
    assert session.toggle()
    assert session.is_active
    assert session.toggle()
    assert session.state is SessionState.IDLE


# Save


def test_save_without_changes(host, session, bone):
    session.request_start(component=bone)

    assert session.save() is False
    assert host.notifications == [machine.NO_CHANGES_MESSAGE]
    assert not session.has_pending_changes


def test_save_records_changes(host, session, bone):
    session.request_start(component=bone)
    tail_of(session.clone_root).get_component(PhysBone).gravity = 0.7

    assert session.save() is True

    change_set = session.pending_change_set()
    assert change_set.root == "Main/Avatar"
    assert [e.value for e in change_set.components[0].entries] == ["0.7"]
    assert host.notifications == [machine.SAVED_MESSAGE]
    assert bone.gravity == 0.3


def test_save_and_exit_applies_to_original(host, session, bone):
    session.request_start(component=bone)
    tail_of(session.clone_root).get_component(PhysBone).gravity = 0.7

    assert session.save_and_exit() is True

    assert bone.gravity == 0.7
    assert host.notifications[-1] == machine.APPLIED_MESSAGE
    assert not session.has_pending_changes


def test_exit_without_save_discards_edits(host, session, bone):
    session.request_start(component=bone)
    tail_of(session.clone_root).get_component(PhysBone).gravity = 0.7

    session.request_exit()

    assert bone.gravity == 0.3
    assert machine.APPLIED_MESSAGE not in host.notifications


def test_cleared_changes_are_not_applied(session, bone):
    session.request_start(component=bone)
    tail_of(session.clone_root).get_component(PhysBone).gravity = 0.7
    session.save()

    session.clear_pending_changes()
    session.request_exit()

    assert bone.gravity == 0.3


def test_save_when_idle_is_ignored(session, caplog):
    assert session.save() is False
    assert "Save ignored" in caplog.text


def test_stale_pending_changes_are_discarded_at_start(host, settings, bone, caplog):
    buffer = MemoryChangeBuffer()
    buffer.write('{"version":1,"root":"Main/Avatar","components":[]}')
    session = make_session(host, settings, buffer)

    session.request_start(component=bone)

    assert not session.has_pending_changes
    assert "Discarding pending changes" in caplog.text


# Fast mode


@pytest.fixture
def fast_session(host):
    return make_session(host, PreviewSettings(_env_file=None, fast_preview=True))


def test_fast_mode_edits_original(host, scene, avatar, fast_session, bone):
    fast_session.request_start(component=bone)

    assert fast_session.mode is SessionMode.FAST
    assert fast_session.clone_root is None
    assert fast_session.preview_root is avatar
    assert avatar.active_self
    assert preview_copies(host) == []
    assert host.get_selection() is tail_of(avatar)


def test_fast_mode_rejects_save(host, fast_session, bone):
    fast_session.request_start(component=bone)
    bone.gravity = 0.7

    assert fast_session.save() is False
    assert host.notifications == [machine.FAST_MODE_SAVE_MESSAGE]

    fast_session.request_exit()
    assert fast_session.state is SessionState.IDLE


# Rollback


def test_failed_isolation_rolls_back(host, scene, avatar, session, bone, monkeypatch, caplog):
    host.hooks.register(BUILD_PREPROCESS, third_party_build)
    names_before = [r.name for r in scene.roots]

    def broken_prepare(*_):
        raise RuntimeError("strip failed")

    monkeypatch.setattr(machine, "prepare_preview_copy", broken_prepare)

    with caplog.at_level(logging.ERROR, logger="rigpreview"):
        session.request_start(component=bone)

    assert session.state is SessionState.IDLE
    assert avatar.active_self
    assert scene.roots[1].active_self
    assert [r.name for r in scene.roots] == names_before
    assert host.hooks.callbacks(BUILD_PREPROCESS) == [third_party_build]
    assert "rolling back" in caplog.text


class FragileRoot(Node):
    """Rig root that refuses to be deactivated."""

    def set_active(self, active: bool) -> None:
        if not active:
            raise RuntimeError("deactivation refused")
        super().set_active(active)


def test_partial_deactivation_is_rolled_back(settings, avatar, bone):
    third = build_avatar("Third")
    host = LocalHost(Scene("Main", avatar, FragileRoot("Fragile", AvatarDescriptor()), third))
    session = make_session(host, settings)

    session.request_start(component=bone)

    assert session.state is SessionState.IDLE
    assert avatar.active_self
    assert third.active_self
    assert preview_copies(host) == []
