from __future__ import annotations

import pytest


class ScriptedRandom:
    """Returns the queued values in order and fails loudly once they run out."""

    def __init__(self, *values: float) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if not self.values:
            raise AssertionError("random() called more often than scripted")
        return self.values.pop(0)


@pytest.fixture
def scripted_random():
    return ScriptedRandom
