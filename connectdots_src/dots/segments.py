"""Registry of drawn segments and the add/remove deltas a renderer consumes."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .grid import Line


class DeltaKind(Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class SegmentDelta:
    """One change to the set of displayed segments."""

    kind: DeltaKind
    line: Line


class SegmentRegistry:
    """Live set of displayed segments keyed by (start, end, color).

    Every change is queued as a SegmentDelta until the host drains it, so the
    core never has to know how segments are drawn.
    """

    def __init__(self) -> None:
        self._live: set[Line] = set()
        self._pending: deque[SegmentDelta] = deque()

    def add(self, line: Line) -> None:
        self._live.add(line)
        self._pending.append(SegmentDelta(DeltaKind.ADD, line))

    def remove(self, line: Line) -> None:
        """Drop a segment. Unknown segments are ignored."""
        if line in self._live:
            self._live.remove(line)
            self._pending.append(SegmentDelta(DeltaKind.REMOVE, line))

    def remove_all(self, lines: Iterable[Line]) -> None:
        for line in list(lines):
            self.remove(line)

    def reset(self) -> None:
        """Forget every segment, queueing a removal for each one still live."""
        self.remove_all(sorted(self._live, key=_line_key))

    def drain(self) -> list[SegmentDelta]:
        """Return and clear the queued deltas, oldest first."""
        out = list(self._pending)
        self._pending.clear()
        return out

    def __contains__(self, line: object) -> bool:
        return line in self._live

    def __iter__(self) -> Iterator[Line]:
        return iter(self._live)

    def __len__(self) -> int:
        return len(self._live)


def _line_key(line: Line) -> tuple[int, int, int, int, int]:
    return (line.color.value, line.start.x, line.start.y, line.end.x, line.end.y)
