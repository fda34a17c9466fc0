import threading
import time

from trojango.notifier import Notifier


def test_signal_then_wait():
    n = Notifier()
    n.signal()
    assert n.wait(timeout=1) is True


def test_wait_times_out_without_signal():
    n = Notifier()
    assert n.wait(timeout=0.01) is False


def test_signals_coalesce():
    n = Notifier()
    n.signal()
    n.signal()
    n.signal()
    assert n.wait(timeout=1) is True
    assert n.wait(timeout=0.01) is False


def test_signal_from_other_thread_wakes_waiter():
    n = Notifier()

    def producer():
        time.sleep(0.05)
        n.signal()

    t = threading.Thread(target=producer)
    t.start()
    assert n.wait(timeout=5) is True
    t.join()