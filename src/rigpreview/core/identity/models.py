"""Identity models for scene nodes and tracked components.

Usage:
    node_id = InstanceId(index=1001, generation=0)
    key = ComponentKey(path="Armature/Hips/Tail", type_name="rigpreview.rig.components.PhysBone")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class InstanceId:
    """In-memory node identifier with generation for safe handle reuse.

    Instance ids are only valid until the host rebuilds its in-memory state.
    Anything that must survive a reload is addressed by path instead.
    """

    index: int = 0
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.index}:{self.generation}"


@dataclass(frozen=True, slots=True)
class ComponentKey:
    """Structural address of a component below a root.

    Correlates components between two graphs that are structurally identical
    but not referentially identical, e.g. an original subtree and its copy.
    """

    path: str  # "" for the root itself
    type_name: str

    def __str__(self) -> str:
        return f"{self.path}#{self.type_name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain dict for serialization.

        Returns:
            Dict with path and type keys.
        """
        return {"path": self.path, "type": self.type_name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentKey:
        """Create ComponentKey from dict representation.

        Args:
            data: Dict with path and type keys.

        Returns:
            ComponentKey instance.
        """
        return cls(path=data.get("path", ""), type_name=data["type"])
