"""Shared pytest fixtures."""

import random

import pytest


class ScriptedRandom(random.Random):
    """Random source that replays a fixed list of draws in [0, 1).

    `uniform(a, b)` is derived from `random()` by the base class, so every
    draw the engine makes consumes exactly one scripted value.
    """

    def __init__(self, values):
        self._values = list(values)
        self.calls = 0
        super().__init__(0)

    def random(self):
        if self.calls >= len(self._values):
            raise AssertionError(f"scripted random exhausted after {self.calls} draws")
        value = self._values[self.calls]
        self.calls += 1
        return value


@pytest.fixture
def scripted_rng():
    """Factory for deterministic random sources: scripted_rng([0.5, 0.1, ...])."""
    return ScriptedRandom
