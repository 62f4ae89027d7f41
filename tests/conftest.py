import random

import pytest


class SequenceRng:
    """Hands out a fixed list of die values, checking each against its range."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        value = self.values.pop(0)
        assert a <= value <= b, f"{value} outside [{a}, {b}]"
        return value


class RecordingRng:
    def __init__(self, rng):
        self.rng = rng
        self.draws = []

    def randint(self, a, b):
        value = self.rng.randint(a, b)
        self.draws.append((value, a, b))
        return value


@pytest.fixture
def rng_of():
    return SequenceRng


@pytest.fixture
def recording_rng():
    return RecordingRng(random.Random(1234))
