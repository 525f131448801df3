"""
Payment Status Poller.

After the processor redirects back, the capture outcome arrives out of
band, so the client polls its own mirrored Payment row:

    loading -> pending -> completed | failed | refunded | not_found

Terminal statuses stop polling on first sight. Hitting the attempt
ceiling without ever seeing a row ends in `not_found` (the payment may
still resolve later); with a row that is still pending it stays
`pending` and polling stops.
"""
import logging

logger = logging.getLogger(__name__)

LOADING = 'loading'
PENDING = 'pending'
COMPLETED = 'completed'
FAILED = 'failed'
REFUNDED = 'refunded'
NOT_FOUND = 'not_found'

TERMINAL = (COMPLETED, FAILED, REFUNDED)

POLL_INTERVAL = 5
MAX_POLL_ATTEMPTS = 30


class PaymentStatusPoller:

    def __init__(self, order_id, fetch_status, scheduler, interval=POLL_INTERVAL,
                 max_attempts=MAX_POLL_ATTEMPTS, on_change=None):
        """
        Args:
            fetch_status: callable(order_id) -> status string, or None
                while no payment row exists.
            on_change: callback(state) on every state change.
        """
        self.order_id = order_id
        self.fetch_status = fetch_status
        self.scheduler = scheduler
        self.interval = interval
        self.max_attempts = max_attempts
        self.on_change = on_change

        self.state = LOADING
        self.attempts = 0
        self.row_seen = False
        self.running = False
        self._handle = None

    @property
    def done(self):
        return self.state in TERMINAL or self.state == NOT_FOUND

    def start(self):
        self.cancel()
        self.attempts = 0
        self.row_seen = False
        self._set_state(LOADING)

        if not self.order_id:
            self._set_state(NOT_FOUND)
            return self.state

        self.running = True
        self._poll()
        return self.state

    def retry(self):
        """'Check status again': a fresh round of attempts."""
        return self.start()

    def cancel(self):
        """Teardown: no timer survives the hosting view."""
        self.running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    # -----------------------------------------------------

    def _poll(self):
        self._handle = None
        if not self.running or self.attempts >= self.max_attempts:
            return

        self.attempts += 1
        try:
            status = self.fetch_status(self.order_id)
        except Exception as e:
            # Counts as an attempt; never turns into `failed`
            logger.warning(f"Payment status fetch failed for {self.order_id}: {e}")
            status = PENDING
        else:
            if status is not None:
                self.row_seen = True

        if status in TERMINAL:
            self.running = False
            self._set_state(status)
            return

        if self.attempts >= self.max_attempts:
            self.running = False
            self._set_state(PENDING if self.row_seen else NOT_FOUND)
            logger.info(
                f"Stopped polling {self.order_id} after {self.attempts} attempts ({self.state})")
            return

        self._set_state(PENDING)
        self._handle = self.scheduler.call_later(self.interval, self._poll)

    def _set_state(self, state):
        if state == self.state:
            return
        self.state = state
        if self.on_change:
            self.on_change(state)
