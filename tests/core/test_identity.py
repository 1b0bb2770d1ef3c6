"""Tests for identity models and instance id allocation."""

import pytest

from rigpreview.core.identity import ComponentKey, InstanceId
from rigpreview.scene import InstanceAllocator


def test_component_key_string_form():
    key = ComponentKey("Armature/Hips/Tail", "rigpreview.rig.components.PhysBone")

    assert str(key) == "Armature/Hips/Tail#rigpreview.rig.components.PhysBone"


def test_component_key_dict_round_trip():
    key = ComponentKey("", "pkg.Root")

    assert key.to_dict() == {"path": "", "type": "pkg.Root"}
    assert ComponentKey.from_dict(key.to_dict()) == key


def test_component_keys_hash_by_value():
    """Keys built independently for the original and the copy must match."""
    a = ComponentKey("Hips", "pkg.Bone")
    b = ComponentKey("Hips", "pkg.Bone")

    assert {a: 1}[b] == 1


def test_allocator_recycles_with_new_generation():
    """CRITICAL: A recycled id never matches the id it replaced.

    Why: Node references held across a destroy or reload must read as stale.
    """
    allocator = InstanceAllocator()
    first = allocator.allocate()
    allocator.deallocate(first)
    second = allocator.allocate()

    assert second.index == first.index
    assert second.generation == first.generation + 1
    assert not allocator.is_alive(first)
    assert allocator.is_alive(second)


def test_allocator_rejects_double_release():
    allocator = InstanceAllocator()
    node_id = allocator.allocate()
    allocator.deallocate(node_id)

    with pytest.raises(ValueError, match="not alive"):
        allocator.deallocate(node_id)


def test_allocator_live_count():
    allocator = InstanceAllocator()
    ids = [allocator.allocate() for _ in range(3)]
    allocator.deallocate(ids[1])

    assert allocator.live_count == 2
    assert str(InstanceId(1000, 2)) == "1000:2"
