#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Random picker that avoids repeating recently chosen items.
"""

import random
from collections import deque
from typing import Callable, Deque, Generic, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T", bound=Hashable)


class HistoryRandomPicker(Generic[T]):
    """Pick uniformly at random, skipping the last `cooldown` picks.

    Candidates are read through `candidates` on every call so the pool can
    change between picks. When every candidate is in the history, the history
    is cleared and the full pool is used instead.
    """

    def __init__(self, candidates: Callable[[], Iterable[T]], cooldown: int = 5,
                 rng: Optional[random.Random] = None):
        if cooldown < 0:
            raise ValueError("cooldown must be >= 0")
        self.candidates = candidates
        self.cooldown = cooldown
        self.rng = rng or random.Random()
        self._history: Deque[T] = deque(maxlen=cooldown)

    @property
    def history(self) -> List[T]:
        """Most recent picks, oldest first."""
        return list(self._history)

    def reset(self) -> None:
        self._history.clear()

    def pick(self) -> Optional[T]:
        # dict.fromkeys drops duplicates while keeping the caller's order
        pool = list(dict.fromkeys(self.candidates()))
        eligible = [item for item in pool if item not in self._history]
        if not eligible:
            self._history.clear()
            eligible = pool
        if not eligible:
            return None

        choice = self.rng.choice(eligible)
        self._history.append(choice)
        return choice
