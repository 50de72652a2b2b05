"""Preview handles and the collections that own them.

A handle is a displayable reference to encoded bytes. It stays registered
until its owner releases it; collections release the handles of every item
they drop.
"""

from __future__ import annotations

import logging
import uuid
from typing import Generic, Iterator, Protocol, TypeVar

logger = logging.getLogger(__name__)

_LIVE_HANDLES: dict[str, bytes] = {}


class PreviewHandle:
    def __init__(self, data: bytes):
        self.id = uuid.uuid4().hex
        self.url = f"preview://{self.id}"
        _LIVE_HANDLES[self.id] = data

    @property
    def released(self) -> bool:
        return self.id not in _LIVE_HANDLES

    @property
    def data(self) -> bytes:
        try:
            return _LIVE_HANDLES[self.id]
        except KeyError:
            raise ValueError(f"Preview handle {self.url} was released") from None

    def release(self) -> None:
        if _LIVE_HANDLES.pop(self.id, None) is not None:
            logger.debug("Released %s", self.url)

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"PreviewHandle({self.url}, {state})"


def live_handle_count() -> int:
    return len(_LIVE_HANDLES)


class Releasable(Protocol):
    def release(self) -> None: ...


T = TypeVar("T", bound=Releasable)


class OwnedCollection(Generic[T]):
    """Ordered items whose resources are released when they leave the collection."""

    def __init__(self) -> None:
        self._items: list[T] = []

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def append(self, item: T) -> None:
        self._items.append(item)

    def insert(self, index: int, item: T) -> None:
        self._items.insert(index, item)

    def move(self, index: int, step: int) -> bool:
        """Swap the item at ``index`` with its neighbour; out-of-range moves do nothing."""

        target = index + step
        if not (0 <= index < len(self._items)) or not (0 <= target < len(self._items)):
            return False
        self._items[index], self._items[target] = self._items[target], self._items[index]
        return True

    def remove(self, item: T) -> None:
        self._items.remove(item)
        item.release()

    def pop(self, index: int) -> None:
        self._items.pop(index).release()

    def clear(self) -> None:
        items, self._items = self._items, []
        for item in items:
            item.release()

    def __enter__(self) -> "OwnedCollection[T]":
        return self

    def __exit__(self, *exc_info) -> None:
        self.clear()
