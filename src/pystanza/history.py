"""Undo and redo of option values.

A :class:`History` keeps a bounded run of snapshots and a cursor, the
*present*, pointing at the one currently in effect.  Snapshots are plain
mappings produced by :meth:`Section.snapshot` or
:meth:`SectionGroup.snapshot` and applied back with the matching
``restore``.

    history = History(first=group.snapshot())
    group.find_option_spec("beta").set_integer_value(5)
    history.add(group.snapshot())
    group.restore(history.undo())
"""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

DEFAULT_HISTORY_SIZE = 32


class History(Generic[T]):
    """Bounded undo/redo list.

    Adding a state after an undo drops the states that could have been
    redone.  When the list is full the oldest state is discarded.
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE, first: T | None = None) -> None:
        if max_size < 1:
            raise ValueError(f"history size must be positive: {max_size}")
        self._states: deque[T] = deque()
        self._max_size = max_size
        self._present = 0
        if first is not None:
            self.add(first)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[T]:
        return iter(self._states)

    def active(self) -> bool:
        return bool(self._states)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def present(self) -> int:
        return self._present

    def get(self, index: int) -> T | None:
        if 0 <= index < len(self._states):
            return self._states[index]
        return None

    def get_present(self) -> T | None:
        return self.get(self._present) if self._states else None

    def undoable(self) -> bool:
        return self.active() and self._present > 0

    def redoable(self) -> bool:
        return self.active() and self._present < len(self._states) - 1

    def add(self, state: T) -> bool:
        """Record *state* as the present one.

        Returns ``False`` when the oldest state had to be discarded.
        """
        while len(self._states) > self._present + 1:
            self._states.pop()
        self._states.append(state)
        kept = True
        if len(self._states) > self._max_size:
            self._states.popleft()
            kept = False
        self._present = len(self._states) - 1
        return kept

    def undo(self) -> T | None:
        """Step back and return the state now in effect, or ``None``."""
        if not self.undoable():
            return None
        self._present -= 1
        return self._states[self._present]

    def redo(self) -> T | None:
        if not self.redoable():
            return None
        self._present += 1
        return self._states[self._present]

    def reset(self) -> bool:
        if not self._states:
            return False
        self._states.clear()
        self._present = 0
        return True

    def text(self) -> str:
        if not self._states:
            return "Empty"
        lines = [
            f"Count: {len(self._states)} states; Present = {self._present}; "
            f"Max. size = {self._max_size}"
        ]
        for index, state in enumerate(self._states):
            lines.append(f"({index}) {state!r}")
        return "\n".join(lines)


__all__ = ["DEFAULT_HISTORY_SIZE", "History"]
