"""Ordered, append-only storage for processed frames."""

from __future__ import annotations

import copy
from typing import Iterable, Iterator, List, Optional, Sequence, Union, overload

from facelandmarks.types import Frame


class FrameSequence:
    """Sole owner of the frames of one sequence, in temporal order.

    Frames are only ever appended or dropped all together by ``clear``.
    """

    def __init__(self, frames: Optional[Iterable[Frame]] = None) -> None:
        self._frames: List[Frame] = list(frames or [])

    def append(self, frame: Frame) -> Frame:
        self._frames.append(frame)
        return frame

    def clear(self) -> None:
        self._frames.clear()

    def replace(self, frames: Iterable[Frame]) -> None:
        """Swap in a complete new frame list."""
        self._frames = list(frames)

    def copy(self) -> "FrameSequence":
        """Deep copy: new Frame and Face objects holding the same values."""
        return FrameSequence(copy.deepcopy(self._frames))

    @property
    def last(self) -> Optional[Frame]:
        return self._frames[-1] if self._frames else None

    def view(self) -> "SequenceView":
        return SequenceView(self)

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)

    @overload
    def __getitem__(self, index: int) -> Frame: ...

    @overload
    def __getitem__(self, index: slice) -> List[Frame]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Frame, List[Frame]]:
        return self._frames[index]


class SequenceView(Sequence[Frame]):
    """Read-only, live view over a FrameSequence."""

    def __init__(self, store: FrameSequence) -> None:
        self._store = store

    def __len__(self) -> int:
        return len(self._store)

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return tuple(self._store[index])
        return self._store[index]

    def __iter__(self) -> Iterator[Frame]:
        return iter(list(self._store))

    def __repr__(self) -> str:
        return f"SequenceView(frames={len(self)})"
