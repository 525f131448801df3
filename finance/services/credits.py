import logging

from django.db import transaction

from core.exceptions import InvalidState
from core.services.audit import log_event
from visas.services.drafts import create_draft
from ..models import CreditAccount, CreditTransaction, Payment

logger = logging.getLogger(__name__)


# =========================================================
# 1. CORE CREDIT MOVEMENT (locked counter + ledger row)
# =========================================================

def get_account(user):
    account, _ = CreditAccount.objects.get_or_create(user=user)
    return account


def move_credits(user, trans_type, description, payment=None, application=None, created_by=None):
    """
    Moves exactly one credit in or out of the user's account.
    Returns the ledger row, or None when a revoke finds nothing to take.
    """
    with transaction.atomic():
        # 1. Lock the counter
        get_account(user)
        account = CreditAccount.objects.select_for_update().get(user=user)

        # 2. Sign
        if trans_type == 'grant':
            delta = 1
        elif trans_type in ('redeem', 'revoke'):
            delta = -1
        else:
            raise ValueError(f"Invalid credit transaction type: {trans_type}")

        # 3. Never below zero
        if account.available + delta < 0:
            if trans_type == 'redeem':
                raise InvalidState('No application credits available')
            logger.warning(f"Revoke skipped for user {user.pk}: no credits left")
            return None

        # 4. Update counter
        account.available += delta
        account.save(update_fields=['available', 'updated_at'])

        # 5. History
        entry = CreditTransaction.objects.create(
            account=account,
            transaction_type=trans_type,
            amount=delta,
            balance_after=account.available,
            description=description,
            payment=payment,
            application=application,
            created_by=created_by,
        )

    logger.info(
        f"Credit {trans_type} for user {user.pk}: {delta:+d} (available {account.available})")
    return entry


# =========================================================
# 2. LIFECYCLE
# =========================================================

def grant_credit(payment):
    """
    One credit for a completed payment that targets no application.
    Caller holds the payment row lock.
    """
    if payment.credit_state != 'none':
        return None

    entry = move_credits(
        payment.user, 'grant',
        description=f"Payment {payment.paypal_order_id} captured",
        payment=payment,
    )
    payment.credit_state = 'available'
    payment.save(update_fields=['credit_state', 'updated_at'])
    log_event('credit_granted', 'credit', payment.id, user=payment.user,
              changes={'available': entry.balance_after})
    return entry


def revoke_credit(payment, created_by=None):
    """
    Takes back the credit of a refunded payment if it was never redeemed.
    """
    if payment.credit_state != 'available':
        return None

    entry = move_credits(
        payment.user, 'revoke',
        description=f"Payment {payment.paypal_order_id} refunded",
        payment=payment,
        created_by=created_by,
    )
    payment.credit_state = 'revoked'
    payment.save(update_fields=['credit_state', 'updated_at'])
    log_event('credit_revoked', 'credit', payment.id, user=payment.user,
              changes={'available': entry.balance_after if entry else 0})
    return entry


def redeem_credit(user):
    """
    Spends one credit on a new draft.

    The draft is inserted first and the credit is spent in the same
    transaction, so a failed insert leaves the counter untouched.
    """
    with transaction.atomic():
        # 1. Lock the counter and the oldest unused credit
        get_account(user)
        account = CreditAccount.objects.select_for_update().get(user=user)
        if account.available < 1:
            raise InvalidState('No application credits available')

        payment = (
            Payment.objects.select_for_update()
            .filter(user=user, status='completed', credit_state='available',
                    application__isnull=True)
            .order_by('captured_at', 'created_at')
            .first()
        )
        if payment is None:
            logger.error(
                f"Credit counter for user {user.pk} is {account.available} but no credit-granting payment is left")
            raise InvalidState('No application credits available')

        # 2. Create the draft (raises StorageError -> whole block rolls back)
        application = create_draft(user, {'email': user.email})

        # 3. Spend
        move_credits(
            user, 'redeem',
            description=f"New application {application.id}",
            payment=payment,
            application=application,
            created_by=user,
        )

        # 4. Link
        payment.application = application
        payment.credit_state = 'redeemed'
        payment.save(update_fields=['application', 'credit_state', 'updated_at'])

        application.is_paid = True
        application.save(update_fields=['is_paid', 'updated_at'])

        log_event('credit_redeemed', 'credit', payment.id, user=user,
                  changes={'application_id': str(application.id)})

    logger.info(f"User {user.pk} redeemed a credit into application {application.id}")
    return application


# =========================================================
# 3. READ HELPERS
# =========================================================

def available_credits(user):
    return (
        Payment.objects
        .filter(user=user, status='completed', credit_state='available',
                application__isnull=True)
        .order_by('captured_at', 'created_at')
    )


def get_credit_history(user, limit=50):
    return CreditTransaction.objects.filter(account__user=user)[:limit]
