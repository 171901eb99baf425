from __future__ import annotations

import random
from typing import Callable, Iterable

import pytest


class ScriptedRandom(random.Random):
    """``random.Random`` whose ``random()`` calls replay a fixed script.

    Shuffles, choices and id generation still use the seeded generator.
    """

    def __init__(self, values: Iterable[float], seed: int = 0) -> None:
        super().__init__(seed)
        self.values = list(values)

    def getrandbits(self, k: int) -> int:
        # Defining this keeps integer draws on the seeded generator.
        return super().getrandbits(k)

    def random(self) -> float:
        if not self.values:
            raise AssertionError("unexpected random() call")
        return self.values.pop(0)


@pytest.fixture
def scripted_rng() -> Callable[..., ScriptedRandom]:
    return ScriptedRandom
