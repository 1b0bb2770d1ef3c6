"""Component functionality: role metadata, registry and decorator."""

from rigpreview.core.component.core import (
    ComponentRegistry,
    component,
    get_registry,
    type_name_of,
)
from rigpreview.core.component.models import ComponentRole, ComponentTypeMeta

__all__ = [
    # Models
    "ComponentRole",
    "ComponentTypeMeta",
    # Core
    "component",
    "get_registry",
    "type_name_of",
    "ComponentRegistry",
]
