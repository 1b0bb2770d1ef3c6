"""Node instance id allocation service.

InstanceAllocator is a stateful service that manages the lifecycle of
in-memory node ids.
"""

from __future__ import annotations

from rigpreview.core.identity import InstanceId

# Ids below this are never handed out, mirroring hosts that reserve low ids
_FIRST_INDEX = 1000


class InstanceAllocator:
    """Allocates instance ids with generation tracking for recycling.

    Maintains a free list of released indices with incremented generations so
    that a stale id held across a destroy or reload never matches a new node.
    """

    def __init__(self) -> None:
        self._next_index = _FIRST_INDEX
        self._free_list: list[tuple[int, int]] = []  # (index, generation)
        self._generations: dict[int, int] = {}

    def allocate(self) -> InstanceId:
        """Allocate a new id, reusing recycled slots when available.

        Returns:
            Newly allocated InstanceId.
        """
        if self._free_list:
            index, gen = self._free_list.pop()
            return InstanceId(index=index, generation=gen)

        index = self._next_index
        self._next_index += 1
        self._generations[index] = 0
        return InstanceId(index=index, generation=0)

    def deallocate(self, instance: InstanceId) -> None:
        """Return an id for reuse with incremented generation.

        Args:
            instance: Id to release.

        Raises:
            ValueError: If the id is not currently alive.
        """
        if not self.is_alive(instance):
            raise ValueError(f"Instance {instance} is not alive")
        new_gen = instance.generation + 1
        self._generations[instance.index] = new_gen
        self._free_list.append((instance.index, new_gen))

    def is_alive(self, instance: InstanceId) -> bool:
        """Check if an id is still valid (not recycled)."""
        return self._generations.get(instance.index, -1) == instance.generation

    @property
    def live_count(self) -> int:
        return len(self._generations) - len(self._free_list)
