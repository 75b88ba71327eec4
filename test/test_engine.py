import threading
import time

import pytest

from tasktick.errors import ScheduleParseError, SchedulerError
from tasktick.scheduler import CronEngine


@pytest.fixture
def engine():
    e = CronEngine()
    yield e
    e.stop()


def test_handles_increase(engine):
    assert engine.add_func('@every 1h', lambda: None) == 1
    assert engine.add_func('0 0 * * * *', lambda: None, name='hourly') == 2
    views = {e.id: e for e in engine.entries()}
    assert views[2].name == 'hourly'
    assert views[2].spec == '0 0 * * * *'
    assert views[1].next_run is None  # not started


def test_bad_spec_installs_nothing(engine):
    with pytest.raises(ScheduleParseError):
        engine.add_func('bogus', lambda: None)
    assert engine.entries() == []


def test_remove(engine):
    handle = engine.add_func('@every 1h', lambda: None)
    engine.remove(handle)
    engine.remove(handle)
    engine.remove(999)
    assert engine.entries() == []


def test_fires_after_start(engine):
    fired = threading.Event()
    engine.add_func('@every 1s', fired.set)
    engine.start()
    assert engine.running
    assert fired.wait(3)
    assert engine.entries()[0].next_run is not None


def test_stop_waits_for_running_callback(engine):
    started = threading.Event()
    finished = threading.Event()

    def slow():
        started.set()
        time.sleep(0.5)
        finished.set()

    engine.add_func('@every 1s', slow)
    engine.start()
    assert started.wait(3)
    engine.stop()
    assert finished.is_set()
    assert not engine.running


def test_remove_after_stop(engine):
    handle = engine.add_func('@every 1h', lambda: None)
    engine.start()
    engine.stop()
    engine.remove(handle)
    assert engine.entries() == []


def test_stop_from_callback_raises(engine):
    errors = []
    fired = threading.Event()

    def stopper():
        try:
            engine.stop()
        except SchedulerError as e:
            errors.append(e)
        fired.set()

    engine.add_func('@every 1s', stopper)
    engine.start()
    assert fired.wait(3)
    assert errors and engine.running
    assert not engine.in_worker()
