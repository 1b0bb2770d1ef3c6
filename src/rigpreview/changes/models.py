"""Change set models.

A ChangeSet holds plain data only: strings, kind names and paths. It never
holds live references, so it can cross a host reload through a text buffer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from rigpreview.core.codec import PropertyKind
from rigpreview.core.identity import ComponentKey

FORMAT_VERSION = 1


class ChangeSetFormatError(ValueError):
    """Raised when a persisted change set cannot be read."""


@dataclass(frozen=True, slots=True)
class ChangeEntry:
    """One changed property: path, kind and new serialized value."""

    path: str
    kind: PropertyKind
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "kind": self.kind.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeEntry:
        return cls(path=data["path"], kind=PropertyKind(data["kind"]), value=data["value"])


@dataclass(slots=True)
class ComponentChange:
    """Changed properties of one component, in enumeration order."""

    key: ComponentKey
    entries: list[ChangeEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.key.to_dict(),
            "properties": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComponentChange:
        return cls(
            key=ComponentKey.from_dict(data),
            entries=[ChangeEntry.from_dict(e) for e in data.get("properties", [])],
        )


@dataclass(slots=True)
class ChangeSet:
    """Ordered property changes of one preview session.

    Attributes:
        root: Scene path of the original root the changes belong to.
        components: Per-component changes, in capture order.

    Example:
        change_set = ChangeSet(root="Main/Avatar")
        change_set.add(
            ComponentKey("Hips/Tail", "rigpreview.rig.components.PhysBone"),
            [ChangeEntry("gravity", PropertyKind.FLOAT, "0.7")],
        )
        payload = change_set.to_json()
    """

    root: str = ""
    components: list[ComponentChange] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.components)

    def is_empty(self) -> bool:
        return not self.components

    @property
    def property_count(self) -> int:
        return sum(len(change.entries) for change in self.components)

    def add(self, key: ComponentKey, entries: list[ChangeEntry]) -> None:
        """Append changes for a component. Empty entry lists are ignored."""
        if entries:
            self.components.append(ComponentChange(key=key, entries=list(entries)))

    def get(self, key: ComponentKey) -> ComponentChange | None:
        return next((c for c in self.components if c.key == key), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "version": FORMAT_VERSION,
            "root": self.root,
            "components": [change.to_dict() for change in self.components],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangeSet:
        """Create from dictionary (for deserialization).

        Raises:
            ChangeSetFormatError: If the version is unknown or fields are missing.
        """
        version = data.get("version")
        if version != FORMAT_VERSION:
            raise ChangeSetFormatError(f"Unsupported change set version: {version!r}")
        try:
            return cls(
                root=data.get("root", ""),
                components=[ComponentChange.from_dict(c) for c in data.get("components", [])],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ChangeSetFormatError(f"Malformed change set: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, payload: str) -> ChangeSet:
        """Parse a persisted change set.

        Raises:
            ChangeSetFormatError: If the payload is not a valid change set.
        """
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ChangeSetFormatError(f"Change set is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ChangeSetFormatError("Change set must be a JSON object")
        return cls.from_dict(data)
