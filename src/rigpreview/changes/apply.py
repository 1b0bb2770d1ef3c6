"""Apply a persisted change set onto a live subtree.

Everything is located again by path and type name, since the nodes and
components the changes were recorded on no longer exist. A component type
that cannot be found by its persisted name is looked up through a chain of
fallbacks before the component change is given up.

Usage:
    avatar = find_by_scene_path(host.scenes(), change_set.root)
    report = apply_change_set(avatar, change_set)
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass, field

from rigpreview.changes.models import ChangeSet, ComponentChange
from rigpreview.core.codec import PropertyKind, deserialize, find_property
from rigpreview.core.component import get_registry
from rigpreview.core.path import resolve
from rigpreview.scene.node import Node

logger = logging.getLogger(__name__)

_RIG_MODULE = "rigpreview.rig.components"

# Checked in order: "PhysBoneCollider" must win over "PhysBone"
FALLBACK_TYPE_FRAGMENTS: tuple[tuple[str, str], ...] = (
    ("PhysBoneCollider", "PhysBoneCollider"),
    ("PhysBone", "PhysBone"),
    ("ContactSender", "ContactSender"),
    ("ContactReceiver", "ContactReceiver"),
)


@dataclass(slots=True)
class ApplyReport:
    """Outcome of applying a change set.

    Attributes:
        applied_components: Components that had at least one property written.
        applied_properties: Properties written.
        skipped: "<key>.<path>" or "<key>" of everything skipped.
        unrestorable: "<key>.<path>" of object references that were not restored.
    """

    applied_components: int = 0
    applied_properties: int = 0
    skipped: list[str] = field(default_factory=list)
    unrestorable: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.unrestorable


def _import_qualified(type_name: str) -> type | None:
    module_name, _, attr = type_name.rpartition(".")
    if not module_name:
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        logger.debug("Module %s for type %s is not importable", module_name, type_name)
        return None
    found = getattr(module, attr, None)
    return found if isinstance(found, type) else None


def _scan_loaded_modules(simple_name: str) -> type | None:
    for module in list(sys.modules.values()):
        namespace = getattr(module, "__dict__", None)
        if not namespace:
            continue
        found = namespace.get(simple_name)
        if isinstance(found, type) and get_registry().is_registered(found):
            return found
    return None


def _fallback_fragment(type_name: str) -> type | None:
    for fragment, rig_name in FALLBACK_TYPE_FRAGMENTS:
        if fragment in type_name:
            module = importlib.import_module(_RIG_MODULE)
            return getattr(module, rig_name)
    return None


def resolve_component_type(type_name: str) -> type | None:
    """Map a persisted type name to a component type.

    Tries in order:
    1. Registry lookup by full name
    2. Importing the qualified name
    3. Registry lookup by class name
    4. Registered classes of that name in loaded modules
    5. Known fragments of the built-in rig types

    Returns:
        The component type, or None if every step failed.
    """
    registry = get_registry()
    simple_name = type_name.rpartition(".")[2]
    steps = (
        lambda: registry.get_type_by_name(type_name),
        lambda: _import_qualified(type_name),
        lambda: registry.find_by_simple_name(simple_name),
        lambda: _scan_loaded_modules(simple_name),
        lambda: _fallback_fragment(type_name),
    )
    for step in steps:
        found = step()
        if found is not None:
            return found
    return None


def apply_component_change(root: Node, change: ComponentChange, report: ApplyReport) -> bool:
    """Write one component's changes onto its counterpart below root.

    Returns:
        True if at least one property was written.
    """
    key = change.key
    node = resolve(root, key.path)
    if node is None:
        logger.warning("Could not find node at path %r below %r", key.path, root.name)
        report.skipped.append(str(key))
        return False

    component_type = resolve_component_type(key.type_name)
    if component_type is None:
        logger.warning("Could not resolve component type %s", key.type_name)
        report.skipped.append(str(key))
        return False

    target = node.get_component(component_type)
    if target is None:
        logger.warning("Component %s not found on node %r", component_type.__name__, node.name)
        report.skipped.append(str(key))
        return False

    written = 0
    for entry in change.entries:
        address = f"{key}.{entry.path}"
        accessor = find_property(target, entry.path)
        if accessor is None:
            logger.warning("Property %s not found on %s", entry.path, key)
            report.skipped.append(address)
            continue
        if deserialize(entry.value, entry.kind, accessor):
            written += 1
        elif entry.kind is PropertyKind.OBJECT_REFERENCE:
            report.unrestorable.append(address)
        else:
            report.skipped.append(address)

    report.applied_properties += written
    if written:
        report.applied_components += 1
        logger.debug("Applied %d properties to %s", written, key)
    return written > 0


def apply_change_set(root: Node, change_set: ChangeSet) -> ApplyReport:
    """Apply every component change of a change set below root.

    Never raises for individual components: failures are logged, recorded in
    the report and the remaining changes are still applied.
    """
    report = ApplyReport()
    for change in change_set.components:
        try:
            apply_component_change(root, change, report)
        except Exception:
            logger.exception("Error applying changes to %s", change.key)
            report.skipped.append(str(change.key))
    logger.info(
        "Applied %d properties on %d components (%d skipped, %d unrestorable)",
        report.applied_properties,
        report.applied_components,
        len(report.skipped),
        len(report.unrestorable),
    )
    return report
