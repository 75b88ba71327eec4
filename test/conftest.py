import time

import pytest
import structlog

import tasktick


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def sched():
    s = tasktick.new()
    yield s
    s.stop()


class Counter:
    '''Thread-safe enough for tests: list.append is atomic.'''

    def __init__(self):
        self.calls = []

    def __call__(self, ctx):
        self.calls.append(time.monotonic())

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def counter():
    return Counter()
