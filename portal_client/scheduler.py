import logging
import threading

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Runs callables later. `call_later` returns a handle with `cancel()`.
    """

    def call_later(self, delay, fn):
        raise NotImplementedError


class TimerHandle:

    def __init__(self, timer):
        self._timer = timer

    def cancel(self):
        self._timer.cancel()


class TimerScheduler(Scheduler):
    """Scheduler backed by one daemon threading.Timer per call."""

    def call_later(self, delay, fn):
        def _run():
            try:
                fn()
            except Exception:
                logger.exception("Scheduled callback failed")

        timer = threading.Timer(delay, _run)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)
