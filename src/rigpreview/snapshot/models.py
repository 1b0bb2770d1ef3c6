"""Snapshot models: serialized property values of one component."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TypeAlias

from rigpreview.core.codec import PropertyKind
from rigpreview.core.identity import ComponentKey


@dataclass(frozen=True, slots=True)
class SnapshotValue:
    kind: PropertyKind
    value: str


@dataclass(frozen=True, slots=True)
class PropertySnapshot:
    """Property path to serialized value for one tracked component.

    Paths keep the component's field enumeration order.
    """

    key: ComponentKey
    values: Mapping[str, SnapshotValue] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, path: object) -> bool:
        return path in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def get(self, path: str) -> SnapshotValue | None:
        return self.values.get(path)


Baseline: TypeAlias = dict[ComponentKey, PropertySnapshot]
