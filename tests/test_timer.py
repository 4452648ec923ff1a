import threading
import time

from repcoach.services.timer import DurationTimer
from tests.conftest import wait_for


def test_ticks_until_stopped():
    ticks = []
    timer = DurationTimer(0.01, lambda: ticks.append(1))
    timer.start()
    assert wait_for(lambda: len(ticks) >= 3)
    timer.stop()
    assert not timer.running

    seen = len(ticks)
    time.sleep(0.05)
    assert len(ticks) == seen


def test_no_tick_after_stop_even_when_one_is_due():
    ticks = []
    in_tick = threading.Event()
    release = threading.Event()

    def slow_tick():
        ticks.append(1)
        in_tick.set()
        release.wait(timeout=1)

    timer = DurationTimer(0.01, slow_tick)
    timer.start()
    assert in_tick.wait(timeout=2)

    stopper = threading.Thread(target=timer.stop)
    stopper.start()
    release.set()
    stopper.join(timeout=2)

    seen = len(ticks)
    time.sleep(0.05)
    assert len(ticks) == seen


def test_failing_tick_keeps_timer_alive():
    ticks = []

    def tick():
        ticks.append(1)
        raise ValueError("boom")

    timer = DurationTimer(0.01, tick)
    timer.start()
    assert wait_for(lambda: len(ticks) >= 2)
    timer.stop()


def test_stop_from_inside_a_tick():
    ticks = []
    timer = None

    def tick():
        ticks.append(1)
        timer.stop()

    timer = DurationTimer(0.01, tick)
    timer.start()
    assert wait_for(lambda: not timer.running)
    time.sleep(0.05)
    assert ticks == [1]
