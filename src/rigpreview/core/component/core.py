"""Component registry and decorator.

Component types are plain dataclasses or Pydantic models. Registering them
assigns a deterministic type id and a set of roles that tell the preview
engine what to do with their instances.

Usage:
    @component(tracked=True)
    @dataclass
    class Spring:
        stiffness: float = 0.2

    @component(root=True)
    @dataclass
    class RigRoot:
        label: str = ""

    @component  # registered, stripped from preview copies
    @dataclass
    class Decoration:
        color: Color = field(default_factory=Color)
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterator
from dataclasses import is_dataclass
from typing import Any, overload

from rigpreview.core.component.models import ComponentRole, ComponentTypeMeta


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _stable_component_type_id(cls: type) -> int:
    """Generate deterministic ID from fully qualified class name.

    Uses SHA256 hash of the fully qualified name so that a type gets the same
    ID in every process running the same code.

    Args:
        cls: Component class to generate ID for.

    Returns:
        Deterministic integer ID derived from class name hash.
    """
    return int(hashlib.sha256(_qualified_name(cls).encode()).hexdigest()[:16], 16)


class ComponentRegistry:
    """Process-local registry mapping component types to type IDs, names and roles.

    Lookup by type name is what lets persisted change sets find their types
    again after the in-memory object graph has been rebuilt.
    """

    def __init__(self) -> None:
        """Initialize empty component registry."""
        self._by_type: dict[type, ComponentTypeMeta] = {}
        self._by_type_id: dict[int, type] = {}
        self._by_name: dict[str, type] = {}

    def register(
        self, cls: type, roles: frozenset[ComponentRole] = frozenset()
    ) -> ComponentTypeMeta:
        """Register a component type and return its metadata.

        Registering an already known type returns the existing metadata;
        roles are fixed at first registration.

        Args:
            cls: Component class to register.
            roles: Roles the engine assigns to instances of this type.

        Returns:
            Component metadata including ID, type name and roles.

        Raises:
            RuntimeError: If component ID collides with another registered type.
        """
        if cls in self._by_type:
            return self._by_type[cls]

        component_type_id = _stable_component_type_id(cls)

        if component_type_id in self._by_type_id:
            existing = self._by_type_id[component_type_id]
            raise RuntimeError(
                f"Component ID collision: {cls} and {existing} hash to {component_type_id}"
            )

        meta = ComponentTypeMeta(
            component_type_id=component_type_id,
            type_name=_qualified_name(cls),
            roles=roles,
        )
        self._by_type[cls] = meta
        self._by_type_id[component_type_id] = cls
        self._by_name[meta.type_name] = cls
        return meta

    def get_meta(self, cls: type) -> ComponentTypeMeta | None:
        """Get metadata for a registered component type, None if unregistered."""
        return self._by_type.get(cls)

    def get_type(self, component_type_id: int) -> type | None:
        """Get component type by its type ID."""
        return self._by_type_id.get(component_type_id)

    def get_type_by_name(self, type_name: str) -> type | None:
        """Get component type by its fully qualified type name.

        Args:
            type_name: Name as produced by ``type_name_of``.

        Returns:
            Component class if registered under that name, None otherwise.
        """
        return self._by_name.get(type_name)

    def find_by_simple_name(self, simple_name: str) -> type | None:
        """Find the first registered type whose class name matches.

        Used when a persisted type name no longer matches its module path,
        e.g. after a module was moved.
        """
        for cls, meta in self._by_type.items():
            if meta.simple_name == simple_name:
                return cls
        return None

    def is_registered(self, cls: type) -> bool:
        """Check if a type is registered as a component."""
        return cls in self._by_type

    def has_role(self, cls: type, role: ComponentRole) -> bool:
        """Check if a registered type carries a role. Unregistered types carry none."""
        meta = self._by_type.get(cls)
        return meta is not None and role in meta.roles

    def types_with_role(self, role: ComponentRole) -> Iterator[type]:
        """Iterate registered types carrying a role, in registration order."""
        for cls, meta in self._by_type.items():
            if role in meta.roles:
                yield cls

    def tracked_types(self) -> list[type]:
        return list(self.types_with_role(ComponentRole.TRACKED))

    def root_types(self) -> list[type]:
        return list(self.types_with_role(ComponentRole.ROOT))

    def is_tracked(self, cls: type) -> bool:
        return self.has_role(cls, ComponentRole.TRACKED)

    def is_essential(self, cls: type) -> bool:
        return self.has_role(cls, ComponentRole.ESSENTIAL)

    def is_root(self, cls: type) -> bool:
        return self.has_role(cls, ComponentRole.ROOT)


# Module-level registry instance
_registry = ComponentRegistry()


def get_registry() -> ComponentRegistry:
    """Access the global component registry.

    Returns:
        The process-local ComponentRegistry instance.
    """
    return _registry


def type_name_of(component: Any) -> str:
    """Type name under which a component instance is persisted.

    Registered types use their registry name; anything else falls back to the
    fully qualified class name so that unregistered instances still get a
    stable key.
    """
    cls = type(component)
    meta = _registry.get_meta(cls)
    if meta is not None:
        return meta.type_name
    return _qualified_name(cls)


def _is_pydantic(cls: type) -> bool:
    """Check if class is a Pydantic model without importing pydantic.

    Args:
        cls: Class to check.

    Returns:
        True if class inherits from pydantic.BaseModel, False otherwise.
    """
    for base in cls.__mro__:
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def _roles(tracked: bool, essential: bool, root: bool) -> frozenset[ComponentRole]:
    roles: set[ComponentRole] = set()
    if tracked:
        roles.add(ComponentRole.TRACKED)
    if root:
        roles.add(ComponentRole.ROOT)
    # Tracked and root types must survive stripping of the preview copy
    if tracked or root or essential:
        roles.add(ComponentRole.ESSENTIAL)
    return frozenset(roles)


@overload
def component(cls: type) -> type: ...


@overload
def component(
    cls: None = None, *, tracked: bool = False, essential: bool = False, root: bool = False
) -> Callable[[type], type]: ...


def component(
    cls: type | None = None,
    *,
    tracked: bool = False,
    essential: bool = False,
    root: bool = False,
) -> type | Callable[[type], type]:
    """Register a dataclass or Pydantic model as a component type.

    Supports three forms:
        @component                    # bare decorator, no roles
        @component()                  # parenthesized, no args
        @component(tracked=True)      # factory with roles

    Args:
        cls: The class to register, or None if called with arguments.
        tracked: Instances are snapshotted, diffed and re-applied.
        essential: Instances are kept on the preview copy.
        root: Nodes carrying an instance are isolable roots.

    Returns:
        Decorated class or decorator function.

    Raises:
        TypeError: If class is neither a dataclass nor Pydantic model.

    Note:
        Apply @component AFTER @dataclass:

        >>> @component(tracked=True)
        ... @dataclass
        ... class MyComponent:
        ...     value: int = 0
    """

    def decorator(c: type) -> type:
        if not (is_dataclass(c) or _is_pydantic(c)):
            raise TypeError(
                f"Component {c.__name__} must be a dataclass or Pydantic model. "
                f"Did you forget @dataclass decorator?"
            )
        meta = _registry.register(c, roles=_roles(tracked, essential, root))
        c.__component_meta__ = meta  # type: ignore
        return c

    if cls is None:
        # Called with args: @component() or @component(tracked=True)
        return decorator
    else:
        # Called bare: @component
        return decorator(cls)
