import threading

from portal_client.scheduler import TimerScheduler


def test_call_later_runs_the_callback():
    done = threading.Event()
    TimerScheduler().call_later(0.01, done.set)
    assert done.wait(2)


def test_cancelled_callback_never_runs():
    fired = threading.Event()
    handle = TimerScheduler().call_later(0.2, fired.set)
    handle.cancel()
    assert not fired.wait(0.4)


def test_callback_errors_do_not_escape():
    done = threading.Event()

    def explode():
        done.set()
        raise RuntimeError('boom')

    TimerScheduler().call_later(0.01, explode)
    assert done.wait(2)
