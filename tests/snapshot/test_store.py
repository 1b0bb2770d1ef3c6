"""Tests for baseline capture."""

from rigpreview.core.codec import PropertyKind
from rigpreview.core.component import type_name_of
from rigpreview.core.identity import ComponentKey
from rigpreview.rig import PhysBone, PhysBoneCollider
from rigpreview.scene import Node
from rigpreview.snapshot import DENY_LIST, SnapshotStore, capture, iter_tracked

from conftest import tail_of

BONE = type_name_of(PhysBone())
COLLIDER = type_name_of(PhysBoneCollider())


def test_capture_keys_every_tracked_component(avatar):
    """Inactive nodes and disabled components are captured too."""
    baseline = capture(avatar)

    assert list(baseline) == [
        ComponentKey("Armature/Hips/Tail", BONE),
        ComponentKey("Armature/Hips/Tail/TailEnd", BONE),
        ComponentKey("Armature/Hips", COLLIDER),
    ]


def test_capture_is_idempotent(avatar):
    """CRITICAL: Capturing an unmodified root twice yields equal baselines.

    Why: Any difference would show up as a phantom edit on save.
    """
    assert capture(avatar) == capture(avatar)


def test_capture_matches_clone(avatar):
    """A structural copy captures to the same baseline as its original."""
    assert capture(avatar.clone()) == capture(avatar)


def test_snapshot_values(avatar):
    snapshot = capture(avatar)[ComponentKey("Armature/Hips/Tail", BONE)]

    assert snapshot.get("gravity").value == "0.3"  # type: ignore[union-attr]
    assert snapshot.get("limit_type").kind is PropertyKind.ENUM  # type: ignore[union-attr]
    assert snapshot.get("colliders[#]").value == "1"  # type: ignore[union-attr]
    assert snapshot.get("colliders[0]").value == "collider-1"  # type: ignore[union-attr]
    assert snapshot.get("parameter").value == ""  # type: ignore[union-attr]


def test_deny_list_is_left_out(avatar):
    snapshot = capture(avatar)[ComponentKey("Armature/Hips/Tail", BONE)]

    assert "enabled" in DENY_LIST
    assert "enabled" not in snapshot
    assert all(path.split(".")[0] not in DENY_LIST for path in snapshot)


def test_iter_tracked_orders_by_type_then_preorder(avatar):
    names = [(node.name, type(c).__name__) for node, c in iter_tracked(avatar)]

    assert names == [
        ("Tail", "PhysBone"),
        ("TailEnd", "PhysBone"),
        ("Hips", "PhysBoneCollider"),
    ]


def test_duplicate_key_keeps_last(avatar, caplog):
    tail = tail_of(avatar)
    tail.add_component(PhysBone(gravity=0.9))

    baseline = capture(avatar)

    assert baseline[ComponentKey("Armature/Hips/Tail", BONE)].get("gravity").value == "0.9"  # type: ignore[union-attr]
    assert "Duplicate component key" in caplog.text


def test_store_records_root_path(scene, avatar):
    store = SnapshotStore()
    assert store.is_empty

    store.capture(avatar)

    assert store.root_path == "Main/Avatar"
    assert len(store.baseline) == 3
    assert store.get(ComponentKey("Armature/Hips", COLLIDER)) is not None

    store.clear()
    assert store.is_empty
    assert store.root_path is None


def test_root_without_tracked_components():
    assert capture(Node("Empty")) == {}
