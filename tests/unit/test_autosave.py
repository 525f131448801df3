from datetime import datetime, timezone

import pytest

from portal_client.api import PortalClientError
from portal_client.autosave import (
    AutosaveOrchestrator, DraftState, EDIT, PAYMENT_REQUIRED_MESSAGE,
)

SAVED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeGateway:

    def __init__(self):
        self.saved = []
        self.submitted = []
        self.save_error = None
        self.submit_error = None
        self.during_save = None

    def save_application(self, payload):
        self.saved.append(dict(payload))
        if self.during_save:
            self.during_save()
        if self.save_error:
            raise self.save_error
        return dict(payload, id=payload.get('id') or 'app-1')

    def submit_application(self, application_id):
        self.submitted.append(application_id)
        if self.submit_error:
            raise self.submit_error
        return {'success': True}


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def toasts():
    return []


@pytest.fixture
def orchestrator(gateway, scheduler, toasts):
    return AutosaveOrchestrator(
        DraftState(), gateway, scheduler,
        on_error=toasts.append, clock=lambda: SAVED_AT)


def test_edits_are_debounced(orchestrator, gateway, scheduler):
    orchestrator.on_edit('surname', 'W')
    orchestrator.on_edit('surname', 'Wa')
    orchestrator.on_edit('surname', 'Walker')

    assert gateway.saved == []
    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].delay == 0.3

    scheduler.run_pending()

    assert gateway.saved == [{'surname': 'Walker'}]
    assert orchestrator.draft.id == 'app-1'
    assert orchestrator.last_saved_at == SAVED_AT


def test_first_save_needs_a_surname(orchestrator, gateway):
    orchestrator.draft.set('given_name', 'Alice')

    assert orchestrator.save_now() is False
    assert gateway.saved == []


def test_existing_draft_saves_without_surname(gateway, scheduler):
    orchestrator = AutosaveOrchestrator(
        DraftState('app-9', {'given_name': 'Alice'}), gateway, scheduler)

    assert orchestrator.on_hide() is True
    assert gateway.saved == [{'given_name': 'Alice', 'id': 'app-9'}]


def test_hide_and_navigate_cancel_the_pending_edit(orchestrator, gateway, scheduler):
    orchestrator.on_edit('surname', 'Walker')
    assert orchestrator.navigate('passport') is True

    assert scheduler.pending == []
    assert len(gateway.saved) == 1


def test_only_one_save_in_flight(orchestrator, gateway):
    orchestrator.draft.set('surname', 'Walker')
    nested = []
    gateway.during_save = lambda: nested.append(orchestrator.save(EDIT))

    assert orchestrator.save_now() is True
    assert nested == [False]
    assert len(gateway.saved) == 1
    assert orchestrator.saving is False


def test_background_failures_are_not_toasted(orchestrator, gateway, scheduler, toasts):
    gateway.save_error = PortalClientError(0, 'Network error')
    orchestrator.on_edit('surname', 'Walker')
    scheduler.run_pending()

    assert toasts == []
    assert orchestrator.saving is False


def test_user_initiated_failures_are_toasted(orchestrator, gateway, toasts):
    gateway.save_error = PortalClientError(500, 'Failed to update application')
    orchestrator.draft.set('surname', 'Walker')

    assert orchestrator.save_and_exit() is False
    assert toasts == ['Failed to save: Failed to update application']


def test_on_saved_callback(gateway, scheduler):
    seen = []
    orchestrator = AutosaveOrchestrator(
        DraftState(values={'surname': 'Walker'}), gateway, scheduler,
        on_saved=seen.append, clock=lambda: SAVED_AT)

    orchestrator.save_now()
    assert seen == [SAVED_AT]


def test_teardown_leaves_no_timer(orchestrator, scheduler):
    orchestrator.on_edit('surname', 'Walker')
    orchestrator.teardown()
    assert scheduler.pending == []


# -----------------------------------------------------
# Submission
# -----------------------------------------------------

def test_submit_blocks_locally_on_missing_items(orchestrator, gateway, toasts):
    orchestrator.draft.set('surname', 'Walker')

    result = orchestrator.submit({'photo'})

    assert not result
    assert result.code == 'incomplete_application'
    assert 'Passport scan' in result.missing['Documents']
    assert toasts and toasts[0].startswith('Please complete: Applicant:')
    assert gateway.saved == []
    assert gateway.submitted == []


def test_submit_blocks_locally_on_eligibility(orchestrator, gateway, complete_fields):
    orchestrator.draft.values.update(
        complete_fields, nationality='India', passport_place_of_issue='India')

    result = orchestrator.submit({'photo', 'passport'})

    assert result.code == 'INDIAN_CITIZEN_INELIGIBLE'
    assert gateway.submitted == []


def test_submit_saves_first_then_submits(orchestrator, gateway, complete_fields):
    orchestrator.draft.values.update(complete_fields)

    result = orchestrator.submit({'photo', 'passport'})

    assert result
    assert len(gateway.saved) == 1
    assert gateway.submitted == ['app-1']
    assert orchestrator.draft.get('status') == 'submitted'
    assert orchestrator.draft.get('is_locked') is True


def test_submit_aborts_when_save_fails(orchestrator, gateway, complete_fields):
    orchestrator.draft.values.update(complete_fields)
    gateway.save_error = PortalClientError(0, 'Network error')

    result = orchestrator.submit()

    assert not result
    assert gateway.submitted == []


def test_server_side_missing_items_are_mapped(orchestrator, gateway, complete_fields, toasts):
    orchestrator.draft.values.update(complete_fields)
    gateway.submit_error = PortalClientError(
        400, 'Please complete all required fields',
        details=[{'section': 'Documents', 'missing': ['Photo']}],
        code='incomplete_application')

    result = orchestrator.submit()

    assert result.missing == {'Documents': ['Photo']}
    assert toasts == ['Please complete all required fields']


# -----------------------------------------------------
# Payment gate
# -----------------------------------------------------

@pytest.fixture
def unpaid(gateway, scheduler, toasts, complete_fields):
    draft = DraftState.from_server(dict(complete_fields, id='app-7', is_paid=False))
    return AutosaveOrchestrator(draft, gateway, scheduler, on_error=toasts.append)


def test_from_server_keeps_is_paid_out_of_the_payload():
    draft = DraftState.from_server({'id': 'app-7', 'surname': 'Walker', 'is_paid': True})

    assert draft.is_paid is True
    assert draft.payload() == {'surname': 'Walker', 'id': 'app-7'}


def test_unpaid_draft_is_not_saved(unpaid, gateway, scheduler, toasts):
    unpaid.on_edit('surname', 'Walker-Smith')
    scheduler.run_pending()
    assert toasts == []

    assert unpaid.save_and_exit() is False
    assert gateway.saved == []
    assert toasts == [PAYMENT_REQUIRED_MESSAGE]
    assert unpaid.saving is False


def test_unpaid_draft_is_not_submitted(unpaid, gateway, toasts):
    result = unpaid.submit({'photo', 'passport'})

    assert not result
    assert result.code == 'payment_required'
    assert result.error == PAYMENT_REQUIRED_MESSAGE
    assert gateway.saved == []
    assert gateway.submitted == []


def test_paid_draft_saves_again(unpaid, gateway):
    unpaid.draft.is_paid = True

    assert unpaid.save_now() is True
    assert gateway.saved[0]['id'] == 'app-7'


def test_save_response_updates_is_paid(orchestrator, gateway):
    gateway.save_application = lambda payload: dict(payload, id='app-3', is_paid=False)
    orchestrator.draft.set('surname', 'Walker')

    assert orchestrator.save_now() is True
    assert orchestrator.draft.awaiting_payment is True
    assert orchestrator.save_now() is False
