"""Tests for applying change sets onto live subtrees."""

import logging

import pytest

from rigpreview.changes import (
    ChangeEntry,
    ChangeSet,
    apply_change_set,
    diff,
    resolve_component_type,
)
from rigpreview.core.codec import PropertyKind
from rigpreview.core.component import type_name_of
from rigpreview.core.identity import ComponentKey
from rigpreview.core.values import ObjectRef
from rigpreview.rig import ContactSender, LimitType, PhysBone, PhysBoneCollider
from rigpreview.snapshot import capture

from conftest import BuildMarker, tail_of

BONE = type_name_of(PhysBone())
TAIL = ComponentKey("Armature/Hips/Tail", BONE)


def single_change(key, *entries):
    change_set = ChangeSet(root="Main/Avatar")
    change_set.add(key, list(entries))
    return change_set


def test_diff_then_apply_onto_original(avatar, bone):
    """CRITICAL: Changes recorded on a copy land on the original.

    Why: This is how preview edits are kept after the copy is gone.
    """
    baseline = capture(avatar)
    clone = avatar.clone()
    edited = tail_of(clone).get_component(PhysBone)
    edited.gravity = 0.7
    edited.limit_type = LimitType.HINGE

    report = apply_change_set(avatar, diff(clone, baseline))

    assert report.ok
    assert report.applied_components == 1
    assert report.applied_properties == 2
    assert bone.gravity == 0.7
    assert bone.limit_type is LimitType.HINGE


def test_applies_onto_rebuilt_nodes(reloading_host, avatar):
    """Only paths and type names are needed: a reloaded scene accepts the changes."""
    change_set = single_change(TAIL, ChangeEntry("gravity", PropertyKind.FLOAT, "0.7"))
    reloading_host.reload()
    fresh = reloading_host.scenes()[0].roots[0]

    apply_change_set(fresh, change_set)

    assert tail_of(fresh).get_component(PhysBone).gravity == 0.7
    assert tail_of(avatar).get_component(PhysBone).gravity == 0.3


def test_missing_node_is_skipped(avatar, caplog):
    change_set = single_change(
        ComponentKey("Armature/Legs", BONE), ChangeEntry("gravity", PropertyKind.FLOAT, "0.7")
    )

    report = apply_change_set(avatar, change_set)

    assert report.skipped == [f"Armature/Legs#{BONE}"]
    assert not report.ok
    assert "Could not find node" in caplog.text


def test_missing_component_is_skipped(avatar, caplog):
    change_set = single_change(
        ComponentKey("Armature", BONE), ChangeEntry("gravity", PropertyKind.FLOAT, "0.7")
    )

    report = apply_change_set(avatar, change_set)

    assert report.applied_components == 0
    assert "not found on node 'Armature'" in caplog.text


def test_failures_do_not_stop_remaining_components(avatar, bone):
    change_set = ChangeSet(root="Main/Avatar")
    change_set.add(
        ComponentKey("Nowhere", BONE), [ChangeEntry("gravity", PropertyKind.FLOAT, "0.1")]
    )
    change_set.add(
        ComponentKey("Armature/Hips/Tail", "no.such.Type"),
        [ChangeEntry("gravity", PropertyKind.FLOAT, "0.1")],
    )
    change_set.add(TAIL, [ChangeEntry("gravity", PropertyKind.FLOAT, "0.7")])

    report = apply_change_set(avatar, change_set)

    assert bone.gravity == 0.7
    assert len(report.skipped) == 2


def test_object_reference_is_reported_unrestorable(avatar, bone, caplog):
    change_set = single_change(
        TAIL,
        ChangeEntry("colliders[0]", PropertyKind.OBJECT_REFERENCE, "collider-2"),
        ChangeEntry("pull", PropertyKind.FLOAT, "0.4"),
    )

    with caplog.at_level(logging.WARNING, logger="rigpreview"):
        report = apply_change_set(avatar, change_set)

    assert report.unrestorable == [f"{TAIL}.colliders[0]"]
    assert bone.colliders == [ObjectRef("collider-1")]
    assert bone.pull == 0.4
    assert "Cannot restore object reference" in caplog.text


def test_unknown_property_is_skipped(avatar):
    report = apply_change_set(
        avatar, single_change(TAIL, ChangeEntry("wobble", PropertyKind.FLOAT, "1.0"))
    )

    assert report.skipped == [f"{TAIL}.wobble"]


def test_array_size_applies_before_elements(avatar, bone):
    change_set = single_change(
        TAIL,
        ChangeEntry("colliders[#]", PropertyKind.ARRAY_SIZE, "0"),
    )

    apply_change_set(avatar, change_set)

    assert bone.colliders == []


@pytest.mark.parametrize(
    ("type_name", "expected"),
    [
        (BONE, PhysBone),
        ("legacy.assembly.PhysBone", PhysBone),
        ("Vendor.Dynamics.VRCPhysBoneCollider", PhysBoneCollider),
        ("Vendor.Dynamics.VRCPhysBone", PhysBone),
        ("Vendor.Contacts.VRCContactSender", ContactSender),
        ("conftest.BuildMarker", BuildMarker),
    ],
    ids=["registered", "simple-name", "collider-fragment", "bone-fragment", "sender", "qualified"],
)
def test_resolve_component_type(type_name, expected):
    assert resolve_component_type(type_name) is expected


def test_resolve_unknown_component_type():
    assert resolve_component_type("Vendor.Unknown") is None
    assert resolve_component_type("NoSuchComponent") is None
