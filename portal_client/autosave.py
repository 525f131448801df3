"""
Autosave Orchestrator.

Decides when the draft is sent to the gateway:

* EDIT      - any field change, debounced (a new edit replaces the pending timer)
* HIDE      - page/tab hidden, immediately
* NAVIGATE  - before switching form section, synchronously
* EXIT      - "save & exit"
* EXPLICIT  - save button / pre-submit save

At most one save is in flight; a save requested meanwhile is dropped
and the next trigger resends the whole current state.
"""
import logging
import threading
from datetime import datetime, timezone

from visas.eligibility import check_application
from visas.schema import ANCHOR_FIELD, is_blank, missing_items, summarize_missing
from .api import PortalClientError

logger = logging.getLogger(__name__)

EDIT = 'edit'
HIDE = 'hide'
NAVIGATE = 'navigate'
EXIT = 'exit'
EXPLICIT = 'explicit'

# Failures of these are shown to the user; the others only get logged
USER_INITIATED = (EXIT, EXPLICIT)

DEFAULT_DEBOUNCE = 0.3

PAYMENT_REQUIRED_MESSAGE = 'Please complete payment or redeem a credit before continuing your application.'


class DraftState:
    """
    Single source of truth for the draft being edited.
    """

    def __init__(self, application_id=None, values=None, is_paid=None):
        self.id = application_id
        self.values = dict(values or {})
        # None until the server has said; a draft is only editable once paid
        self.is_paid = is_paid

    @classmethod
    def from_server(cls, data):
        values = {k: v for k, v in data.items() if k not in ('id', 'is_paid')}
        return cls(application_id=data.get('id'), values=values, is_paid=data.get('is_paid'))

    @property
    def awaiting_payment(self):
        """An existing draft the server reports as unpaid."""
        return bool(self.id) and self.is_paid is False

    def set(self, field, value):
        self.values[field] = value

    def get(self, field, default=None):
        return self.values.get(field, default)

    def payload(self):
        payload = dict(self.values)
        if self.id:
            payload['id'] = self.id
        return payload


class SubmitResult:

    def __init__(self, success, error=None, missing=None, code=None):
        self.success = success
        self.error = error
        self.missing = missing or {}
        self.code = code

    def __bool__(self):
        return self.success

    def __repr__(self):
        return f"SubmitResult(success={self.success}, error={self.error!r})"


class AutosaveOrchestrator:

    def __init__(self, draft, gateway, scheduler, debounce=DEFAULT_DEBOUNCE,
                 on_saved=None, on_error=None, clock=None):
        """
        Args:
            draft (DraftState): the draft owned by the current view.
            gateway: object with `save_application(payload)` and
                `submit_application(id)` (e.g. PortalClient).
            scheduler: Scheduler used for the debounce timer.
            on_saved: callback(saved_at) for the "last saved" indicator.
            on_error: callback(message) used as the toast.
        """
        self.draft = draft
        self.gateway = gateway
        self.scheduler = scheduler
        self.debounce = debounce
        self.on_saved = on_saved
        self.on_error = on_error
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        self.saving = False
        self.last_saved_at = None
        self._pending = None
        self._lock = threading.Lock()

    # -----------------------------------------------------
    # Triggers
    # -----------------------------------------------------

    def on_edit(self, field, value):
        self.draft.set(field, value)
        self._cancel_pending()
        self._pending = self.scheduler.call_later(self.debounce, self._debounced_save)

    def on_hide(self):
        self._cancel_pending()
        return self.save(HIDE)

    def navigate(self, section=None):
        """Synchronous save before switching to `section`."""
        self._cancel_pending()
        saved = self.save(NAVIGATE)
        logger.debug(f"Navigating to {section} (saved={saved})")
        return saved

    def save_and_exit(self):
        self._cancel_pending()
        return self.save(EXIT)

    def save_now(self):
        self._cancel_pending()
        return self.save(EXPLICIT)

    def teardown(self):
        self._cancel_pending()

    # -----------------------------------------------------
    # Save
    # -----------------------------------------------------

    def _debounced_save(self):
        self._pending = None
        self.save(EDIT)

    def _cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def should_save(self):
        """No row yet and no surname: nothing worth creating."""
        return bool(self.draft.id) or not is_blank(self.draft.get(ANCHOR_FIELD))

    def save(self, trigger=EXPLICIT):
        """
        Returns True when the gateway accepted the current state.
        """
        if not self.should_save():
            logger.debug(f"Save ({trigger}) skipped: no draft id and no {ANCHOR_FIELD}")
            return False

        with self._lock:
            if self.saving:
                logger.debug(f"Save ({trigger}) dropped: another save is in flight")
                return False
            self.saving = True

        if self.draft.awaiting_payment:
            self._finish_unsaved(trigger, PAYMENT_REQUIRED_MESSAGE)
            self.saving = False
            return False

        try:
            data = self.gateway.save_application(self.draft.payload())
            if data.get('id'):
                self.draft.id = data['id']
            if 'is_paid' in data:
                self.draft.is_paid = data['is_paid']
            self.last_saved_at = self.clock()
            if self.on_saved:
                self.on_saved(self.last_saved_at)
            return True

        except PortalClientError as e:
            self._finish_unsaved(trigger, f"Failed to save: {e.message}")
            return False

        finally:
            self.saving = False

    def _finish_unsaved(self, trigger, message):
        if trigger in USER_INITIATED:
            self._toast(message)
        else:
            logger.warning(f"Autosave ({trigger}) not saved, will retry on next edit: {message}")

    def _toast(self, message):
        logger.error(message)
        if self.on_error:
            self.on_error(message)

    # -----------------------------------------------------
    # Submission
    # -----------------------------------------------------

    def local_check(self, uploaded_document_types=None):
        """
        What the client can verify before calling the server.
        Documents are only checked when their types are known.
        """
        missing = missing_items(
            self.draft.values,
            uploaded_document_types,
            check_documents=uploaded_document_types is not None,
        )
        if missing:
            return SubmitResult(
                False,
                error='Please complete: ' + '; '.join(summarize_missing(missing)),
                missing=missing,
                code='incomplete_application',
            )

        eligible, reason = check_application(self.draft.values)
        if not eligible:
            return SubmitResult(False, error=reason, code='INDIAN_CITIZEN_INELIGIBLE')
        return None

    def submit(self, uploaded_document_types=None):
        """
        (a) save the in-memory state, abort if that fails,
        (b) ask the server to submit (it re-checks everything).
        """
        if self.draft.awaiting_payment:
            self._toast(PAYMENT_REQUIRED_MESSAGE)
            return SubmitResult(False, error=PAYMENT_REQUIRED_MESSAGE, code='payment_required')

        problem = self.local_check(uploaded_document_types)
        if problem is not None:
            self._toast(problem.error)
            return problem

        self._cancel_pending()
        if not self.save(EXPLICIT):
            return SubmitResult(False, error='Could not save your application. Please try again.')

        try:
            self.gateway.submit_application(self.draft.id)
        except PortalClientError as e:
            missing = {}
            if e.code == 'incomplete_application' and isinstance(e.details, list):
                missing = {item['section']: item['missing'] for item in e.details}
            self._toast(e.message)
            return SubmitResult(False, error=e.message, missing=missing, code=e.code)

        self.draft.values['status'] = 'submitted'
        self.draft.values['is_locked'] = True
        logger.info(f"Application {self.draft.id} submitted")
        return SubmitResult(True)
