"""Generic property enumeration over dataclass and Pydantic components.

Properties are discovered by walking a component's fields; there is no
per-type schema. Each leaf becomes a PropertyAccessor addressed by a path:

    gravity                  top-level field
    limits.max_angle_x       nested record field
    colliders[#]             list length, listed before the elements
    colliders[0]             list element

Usage:
    for accessor in enumerate_properties(bone):
        print(accessor.path, accessor.kind, accessor.get())

    accessor = find_property(bone, "gravity")
    accessor.set(0.7)
"""

from __future__ import annotations

import copy
import dataclasses
from collections.abc import Callable, Collection, Iterator
from dataclasses import dataclass, is_dataclass
from typing import Any

from rigpreview.core.codec.kinds import PropertyKind, is_composite, kind_of

Getter = Callable[[], Any]
Setter = Callable[[Any], None]


@dataclass(slots=True)
class PropertyAccessor:
    """Live read/write handle on one codec-visible property."""

    path: str
    kind: PropertyKind
    getter: Getter
    setter: Setter

    def get(self) -> Any:
        return self.getter()

    def set(self, value: Any) -> None:
        self.setter(value)


def field_names(obj: Any) -> list[str]:
    """Declared field names of a dataclass instance or Pydantic model."""
    if is_dataclass(obj):
        return [f.name for f in dataclasses.fields(obj)]
    return list(type(obj).model_fields)


def _is_frozen(obj: Any) -> bool:
    if is_dataclass(obj):
        params = getattr(type(obj), "__dataclass_params__", None)
        return bool(params and params.frozen)
    return bool(type(obj).model_config.get("frozen", False))


def _replace(obj: Any, name: str, value: Any) -> Any:
    if is_dataclass(obj):
        return dataclasses.replace(obj, **{name: value})
    return obj.model_copy(update={name: value})


def _field_setter(owner_get: Getter, owner_set: Setter | None, name: str) -> Setter:
    """Setter for a field, rebuilding immutable owners through their own setter."""

    def setter(value: Any) -> None:
        owner = owner_get()
        if _is_frozen(owner):
            if owner_set is None:
                raise AttributeError(f"Cannot assign {name!r} on frozen {type(owner).__name__}")
            owner_set(_replace(owner, name, value))
        else:
            setattr(owner, name, value)

    return setter


def resize_list(items: list[Any], size: int) -> None:
    """Grow or shrink a list in place.

    Growing repeats the last element: values are shared, nested records are
    deep-copied. An empty list grows with None placeholders that element
    writes are expected to fill.

    Raises:
        ValueError: If size is negative.
    """
    if size < 0:
        raise ValueError(f"Invalid list size {size}")
    if size <= len(items):
        del items[size:]
        return
    template = items[-1] if items else None
    shared = kind_of(template) is not None
    items.extend(template if shared else copy.deepcopy(template) for _ in range(size - len(items)))


def _visit(path: str, get: Getter, set_: Setter) -> Iterator[PropertyAccessor]:
    value = get()
    kind = kind_of(value)
    if kind is not None:
        yield PropertyAccessor(path, kind, get, set_)
    elif isinstance(value, list):
        yield PropertyAccessor(
            f"{path}[#]",
            PropertyKind.ARRAY_SIZE,
            lambda: len(get()),
            lambda size: resize_list(get(), int(size)),
        )
        for index in range(len(value)):
            yield from _visit(f"{path}[{index}]", *_element_access(get, index))
    else:
        for name in field_names(value):
            yield from _visit(
                f"{path}.{name}",
                _field_getter(get, name),
                _field_setter(get, set_, name),
            )


def _field_getter(owner_get: Getter, name: str) -> Getter:
    return lambda: getattr(owner_get(), name)


def _element_access(list_get: Getter, index: int) -> tuple[Getter, Setter]:
    def setter(value: Any) -> None:
        list_get()[index] = value

    return (lambda: list_get()[index]), setter


def enumerate_properties(
    component: Any, skip: Collection[str] = ()
) -> Iterator[PropertyAccessor]:
    """Enumerate every codec-visible property of a component in field order.

    Args:
        component: Dataclass or Pydantic model instance.
        skip: Top-level field names to leave out.

    Yields:
        One accessor per leaf value and per list length.

    Raises:
        TypeError: If component is neither a dataclass nor a Pydantic model.
    """
    if not (is_dataclass(component) or is_composite(component)):
        raise TypeError(f"{type(component).__name__} has no enumerable fields")

    def root() -> Any:
        return component

    for name in field_names(component):
        if name in skip:
            continue
        yield from _visit(name, _field_getter(root, name), _field_setter(root, None, name))


def find_property(component: Any, path: str) -> PropertyAccessor | None:
    """Resolve a single property path on a live component.

    Args:
        component: Component to search.
        path: Property path as produced by ``enumerate_properties``.

    Returns:
        Accessor for the path, or None if the component has no such property.
    """
    for accessor in enumerate_properties(component):
        if accessor.path == path:
            return accessor
    return None
