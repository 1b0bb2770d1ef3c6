"""Component models: role metadata attached to registered component types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ComponentRole(Enum):
    """What the preview engine does with instances of a component type."""

    TRACKED = auto()  # Snapshotted, diffed and re-applied
    ESSENTIAL = auto()  # Survives stripping of the preview copy
    ROOT = auto()  # Marks a node as an isolable root


@dataclass(frozen=True, slots=True)
class ComponentTypeMeta:
    """Metadata for a registered component type."""

    component_type_id: int
    type_name: str
    roles: frozenset[ComponentRole] = frozenset()

    @property
    def simple_name(self) -> str:
        """Class name without the module prefix."""
        return self.type_name.rsplit(".", 1)[-1]

    @property
    def tracked(self) -> bool:
        return ComponentRole.TRACKED in self.roles

    @property
    def essential(self) -> bool:
        return ComponentRole.ESSENTIAL in self.roles

    @property
    def root(self) -> bool:
        return ComponentRole.ROOT in self.roles
