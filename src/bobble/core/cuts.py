"""
The user's cut set.

A CutSet holds the CutKeys toggled during an analysis session. It is written
by a single interactive caller and read through frozen snapshots, so that
background computations see the cuts as they were when they were requested.
"""

import logging
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional

from .types import CutKey

logger = logging.getLogger(__name__)

CutListener = Callable[["CutSet"], None]


class CutSet:
    """
    Observable set of CutKeys.

    Every mutation bumps ``generation`` and notifies subscribers once.
    """

    def __init__(self):
        self._keys: Dict[CutKey, None] = {}
        self._generation = 0
        self._snapshot: Optional[FrozenSet[CutKey]] = frozenset()
        self._listeners: List[CutListener] = []

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[CutKey]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def generation(self) -> int:
        return self._generation

    def is_cut(self, key: CutKey) -> bool:
        return key in self._keys

    def toggle(self, key: CutKey) -> bool:
        """
        Flip a key in or out of the set.

        Returns:
            bool: True if the key is cut after the call.
        """
        if key in self._keys:
            del self._keys[key]
            now_cut = False
        else:
            self._keys[key] = None
            now_cut = True
        logger.debug(f"Toggled cut {key}: {'cut' if now_cut else 'restored'}")
        self._changed()
        return now_cut

    def add(self, key: CutKey) -> None:
        if key not in self._keys:
            self._keys[key] = None
            self._changed()

    def discard(self, key: CutKey) -> None:
        if key in self._keys:
            del self._keys[key]
            self._changed()

    def clear(self) -> None:
        if self._keys:
            self._keys.clear()
            self._changed()

    def snapshot(self) -> FrozenSet[CutKey]:
        """Immutable view of the current keys, shared until the next mutation."""
        if self._snapshot is None:
            self._snapshot = frozenset(self._keys)
        return self._snapshot

    def subscribe(self, listener: CutListener) -> Callable[[], None]:
        """
        Register a callback run after every mutation.

        Returns:
            Callable: Call it to unsubscribe.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        self._generation += 1
        self._snapshot = None
        for listener in list(self._listeners):
            listener(self)
