"""Switching off third-party avatar automation during a preview.

Some tooling does not register through hook channels but runs from classes
with a class-level switch. Those classes are located by module-name fragment
among loaded modules and their switch is flipped to the "off" value until the
preview ends.

Usage:
    switchboard = AutomationSwitchboard(families_for(settings))
    switchboard.start()
    ...
    switchboard.stop()
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from rigpreview.config import PreviewSettings

logger = logging.getLogger(__name__)

# Attribute -> value that disables processing; the first one present is used
SWITCHES: tuple[tuple[str, Any], ...] = (
    ("enabled", False),
    ("disabled", True),
    ("skip", True),
    ("skipProcessing", True),
)


@dataclass(frozen=True, slots=True)
class AutomationFamily:
    """A third-party tool located by module and class name fragments."""

    name: str
    module_fragments: tuple[str, ...]
    class_fragments: tuple[str, ...]

    def matches_module(self, module_name: str) -> bool:
        lowered = module_name.lower()
        return any(fragment.lower() in lowered for fragment in self.module_fragments)

    def matches_class(self, cls: type) -> bool:
        return any(fragment in cls.__name__ for fragment in self.class_fragments)


VRCFURY = AutomationFamily(
    name="VRCFury",
    module_fragments=("vrcfury",),
    class_fragments=("VRCFuryBuilder", "VRCFuryProcessor", "PlayModeTrigger"),
)

MODULAR_AVATAR = AutomationFamily(
    name="Modular Avatar",
    module_fragments=("modular_avatar", "modularavatar", "nadena", "ndmf"),
    class_fragments=("AvatarProcessor", "ModularAvatarBuilder", "ApplyOnPlay"),
)


def families_for(settings: PreviewSettings) -> list[AutomationFamily]:
    """Families enabled for prevention by settings."""
    families: list[AutomationFamily] = []
    if settings.prevent_vrcfury_in_preview:
        families.append(VRCFURY)
    if settings.prevent_modular_avatar_in_preview:
        families.append(MODULAR_AVATAR)
    return families


def loaded_modules() -> list[ModuleType]:
    return [m for m in list(sys.modules.values()) if isinstance(m, ModuleType)]


def _defined_classes(module: ModuleType) -> Iterator[type]:
    for obj in list(vars(module).values()):
        if isinstance(obj, type) and obj.__module__ == module.__name__:
            yield obj


@dataclass(slots=True)
class _Switch:
    family: str
    cls: type
    attribute: str
    original: Any


class AutomationSwitchboard:
    """Flips and restores class-level switches of automation families.

    Args:
        families: Families to switch off.
        modules: Provider of modules to scan; loaded modules by default.
    """

    def __init__(
        self,
        families: Iterable[AutomationFamily],
        modules: Callable[[], Iterable[ModuleType]] = loaded_modules,
    ) -> None:
        self._families = list(families)
        self._modules = modules
        self._switched: list[_Switch] = []

    @property
    def is_active(self) -> bool:
        return bool(self._switched)

    @property
    def switched(self) -> list[tuple[str, type, str]]:
        """(family, class, attribute) of every flipped switch."""
        return [(s.family, s.cls, s.attribute) for s in self._switched]

    def start(self) -> int:
        """Flip the switch of every matching class.

        A family that fails to scan is logged and skipped.

        Returns:
            Number of switches flipped.
        """
        if self._switched:
            self.stop()
        modules = list(self._modules())
        for family in self._families:
            try:
                self._switch_family(family, modules)
            except Exception:
                logger.exception("Failed to switch off %s", family.name)
        return len(self._switched)

    def _switch_family(self, family: AutomationFamily, modules: list[ModuleType]) -> None:
        for module in modules:
            if not family.matches_module(module.__name__):
                continue
            for cls in _defined_classes(module):
                if not family.matches_class(cls):
                    continue
                for attribute, off_value in SWITCHES:
                    if attribute in vars(cls):
                        self._switched.append(
                            _Switch(family.name, cls, attribute, getattr(cls, attribute))
                        )
                        setattr(cls, attribute, off_value)
                        logger.info(
                            "Disabled %s during preview (%s.%s)",
                            family.name,
                            cls.__qualname__,
                            attribute,
                        )
                        break

    def stop(self) -> int:
        """Restore every flipped switch, most recent first.

        Returns:
            Number of switches restored.
        """
        restored = 0
        while self._switched:
            switch = self._switched.pop()
            try:
                setattr(switch.cls, switch.attribute, switch.original)
                restored += 1
            except Exception:
                logger.exception(
                    "Failed to restore %s.%s", switch.cls.__qualname__, switch.attribute
                )
        return restored
