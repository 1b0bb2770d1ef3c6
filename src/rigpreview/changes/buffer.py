"""Durable buffers holding the pending change set across a host reload.

Usage:
    pending = PendingChanges(FileChangeBuffer(Path(".rigpreview/pending.json")))
    pending.store(change_set)
    ...  # host reloads
    change_set = pending.load()
    pending.clear()
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from rigpreview.changes.models import ChangeSet, ChangeSetFormatError

logger = logging.getLogger(__name__)


class ChangeBuffer(Protocol):
    """Text slot that survives the host rebuilding its objects."""

    def read(self) -> str:
        """Stored payload, empty if nothing is stored."""
        ...

    def write(self, payload: str) -> None:
        """Replace the stored payload."""
        ...

    def clear(self) -> None:
        """Drop the stored payload."""
        ...


class MemoryChangeBuffer:
    """Buffer kept in process memory; survives a host reload, not a restart."""

    def __init__(self) -> None:
        self._payload = ""

    def read(self) -> str:
        return self._payload

    def write(self, payload: str) -> None:
        self._payload = payload

    def clear(self) -> None:
        self._payload = ""


class FileChangeBuffer:
    """Buffer kept in a file; survives a process restart.

    Writes go to a temporary file in the same directory that then replaces
    the target, so a reader never sees a partial payload.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def write(self, payload: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class PendingChanges:
    """Typed access to the change set stored in a buffer."""

    def __init__(self, buffer: ChangeBuffer | None = None) -> None:
        self._buffer: ChangeBuffer = buffer if buffer is not None else MemoryChangeBuffer()

    @property
    def buffer(self) -> ChangeBuffer:
        return self._buffer

    @property
    def has_pending(self) -> bool:
        return bool(self._buffer.read())

    def store(self, change_set: ChangeSet) -> None:
        self._buffer.write(change_set.to_json())
        logger.debug(
            "Stored %d changed properties for %s", change_set.property_count, change_set.root
        )

    def load(self) -> ChangeSet | None:
        """Read the stored change set.

        Returns:
            The change set, or None if nothing is stored or the payload is
            unreadable (logged).
        """
        payload = self._buffer.read()
        if not payload:
            return None
        try:
            return ChangeSet.from_json(payload)
        except ChangeSetFormatError as e:
            logger.error("Discarding unreadable pending changes: %s", e)
            return None

    def clear(self) -> None:
        self._buffer.clear()
