"""
Payment/Credit Reconciler.

A Payment row mirrors one processor order. Whatever path reports the
outcome first (capture call, webhook, admin refund) goes through the
locked transitions below, so each outcome is applied exactly once.
"""
import logging
import uuid
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from core.exceptions import Forbidden, InvalidState, NotFound, ValidationFailed
from core.services.audit import log_event
from visas.models import VisaApplication
from visas.services.drafts import get_owned_application
from ..models import Booking, Payment
from .credits import grant_credit, revoke_credit
from .notifications import notify_payment_captured
from .paypal import CaptureDeclined, get_client, parse_capture
from .pricing import normalize_duration, quote

logger = logging.getLogger(__name__)

VISA_TYPES = ('tourist', 'business', 'medical', 'conference', 'student', 'other')


# =========================================================
# 1. ORDER CREATION
# =========================================================

def create_order(user, data, client=None):
    """
    Creates the processor order and the optimistic `initiated` row.

    Body: {visaType, duration, countryCode?, applicationId?, bookingId?}
    Returns (payment, order).
    """
    visa_type = data.get('visaType') or 'tourist'
    if visa_type not in VISA_TYPES:
        raise ValidationFailed(
            'Validation failed',
            details=[{'field': 'visaType', 'message': 'Invalid visa type'}])

    country_code = (data.get('countryCode') or '').strip().upper()
    if country_code and len(country_code) != 2:
        raise ValidationFailed(
            'Validation failed',
            details=[{'field': 'countryCode', 'message': 'Country code must have 2 letters'}])

    duration = normalize_duration(data.get('duration'))
    application = None
    booking = None

    # 1. What is being paid for
    if data.get('bookingId'):
        try:
            booking_id = uuid.UUID(str(data['bookingId']))
        except ValueError:
            raise ValidationFailed(
                'Validation failed',
                details=[{'field': 'bookingId', 'message': 'Invalid booking id'}])
        booking = Booking.objects.filter(pk=booking_id, user=user).first()
        if booking is None:
            raise NotFound('Booking not found')
        if booking.payment_status != 'pending':
            raise InvalidState(f"Booking is already {booking.payment_status}")
        currency, amount = booking.currency, booking.total_amount
        duration = booking.visa_type
    else:
        if data.get('applicationId'):
            application = get_owned_application(user, data['applicationId'])
            if application.is_paid:
                raise InvalidState('Application is already paid')
        currency, _, amount = quote(duration, country_code, 1)

    reference_id = str(application.id if application else booking.id if booking else user.pk)
    service_name = f"India e-{visa_type.capitalize()} Visa"

    # 2. Processor order
    client = client or get_client()
    order = client.create_order(
        reference_id=reference_id,
        description=f"{service_name} - {duration.replace('_', ' ')}",
        amount=amount,
        currency=currency,
    )

    # 3. Optimistic row
    with transaction.atomic():
        payment = Payment.objects.create(
            paypal_order_id=order['id'],
            user=user,
            booking=booking,
            application=application,
            service_name=service_name,
            visa_duration=duration,
            country=country_code,
            amount=amount,
            total_amount=amount,
            currency=currency,
            status='initiated',
        )
        log_event('payment_initiated', 'payment', payment.id, user=user,
                  changes={'order_id': payment.paypal_order_id,
                           'amount': str(amount), 'currency': currency})

    logger.info(
        f"Order {payment.paypal_order_id} created for user {user.pk}: {amount} {currency}")
    return payment, order


# =========================================================
# 2. TRANSITIONS (idempotent, row locked)
# =========================================================

def _reconcile(payment, now):
    """
    Applies a completed payment: unlock the targeted application, or
    mint one credit. Runs once per payment (`reconciled_at`).
    """
    if payment.reconciled_at:
        return

    if payment.application_id:
        VisaApplication.objects.filter(pk=payment.application_id).update(
            is_paid=True, updated_at=now)
        logger.info(
            f"Application {payment.application_id} unlocked by payment {payment.paypal_order_id}")
    else:
        grant_credit(payment)

    if payment.booking_id:
        Booking.objects.filter(pk=payment.booking_id).update(
            payment_status='paid',
            payment_transaction_id=payment.paypal_capture_id or payment.paypal_order_id,
            updated_at=now,
        )

    payment.reconciled_at = now


def complete_payment(order_id, capture_id='', payer_email='', payer_name=''):
    """
    Marks the order's payment completed and reconciles it.
    Returns (payment, newly_completed).
    """
    now = timezone.now()
    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(
            paypal_order_id=order_id).first()
        if payment is None:
            raise NotFound('Payment not found')

        if payment.status == 'refunded' or (payment.status == 'completed' and payment.reconciled_at):
            return payment, False

        old_status = payment.status
        payment.status = 'completed'
        payment.paypal_capture_id = capture_id or payment.paypal_capture_id
        payment.payer_email = payer_email or payment.payer_email
        payment.payer_name = payer_name or payment.payer_name
        payment.captured_at = payment.captured_at or now

        _reconcile(payment, now)
        payment.save()

        log_event('payment_captured', 'payment', payment.id, user=payment.user,
                  changes={'status': [old_status, 'completed'],
                           'capture_id': payment.paypal_capture_id})

    logger.info(f"Payment {order_id} completed (was {old_status})")

    # === NOTIFY OUTSIDE THE TRANSACTION ===
    try:
        if notify_payment_captured(payment):
            Payment.objects.filter(pk=payment.pk).update(thank_you_email_sent=True)
            payment.thank_you_email_sent = True
    except Exception as e:
        logger.error(f"Payment notification failed for {order_id}: {e}")

    return payment, True


def mark_pending(order_id):
    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(
            paypal_order_id=order_id).first()
        if payment is None:
            raise NotFound('Payment not found')
        if payment.status == 'initiated':
            payment.status = 'pending'
            payment.save(update_fields=['status', 'updated_at'])
            logger.info(f"Payment {order_id} approved by payer, now pending")
    return payment


def mark_failed(order_id, reason=''):
    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(
            paypal_order_id=order_id).first()
        if payment is None:
            raise NotFound('Payment not found')
        if payment.status not in ('initiated', 'pending'):
            return payment

        old_status = payment.status
        payment.status = 'failed'
        payment.save(update_fields=['status', 'updated_at'])

        if payment.booking_id:
            Booking.objects.filter(pk=payment.booking_id, payment_status='pending').update(
                payment_status='failed', updated_at=timezone.now())

        log_event('payment_failed', 'payment', payment.id, user=payment.user,
                  changes={'status': [old_status, 'failed'], 'reason': reason})

    logger.warning(f"Payment {order_id} failed: {reason}")
    return payment


def refund_payment(order_id, user=None, reason='Refund'):
    """
    completed -> refunded. An unredeemed credit minted by this payment
    is revoked with it.
    """
    with transaction.atomic():
        payment = Payment.objects.select_for_update().filter(
            paypal_order_id=order_id).first()
        if payment is None:
            raise NotFound('Payment not found')

        if payment.status == 'refunded':
            return payment
        if payment.status != 'completed':
            raise InvalidState(
                f"Cannot refund. Only completed payments can be refunded (Status: {payment.status}).")

        now = timezone.now()
        payment.status = 'refunded'
        payment.refunded_at = now
        payment.save(update_fields=['status', 'refunded_at', 'updated_at'])

        revoke_credit(payment, created_by=user)

        if payment.booking_id:
            Booking.objects.filter(pk=payment.booking_id).update(
                payment_status='refunded', updated_at=now)

        log_event('payment_refunded', 'payment', payment.id, user=user,
                  changes={'status': ['completed', 'refunded'], 'reason': reason})

    logger.info(f"Payment {order_id} refunded: {reason}")
    return payment


# =========================================================
# 3. CAPTURE (client return path)
# =========================================================

def _amount_from_capture(capture_data):
    units = capture_data.get('purchase_units') or [{}]
    captures = (units[0].get('payments') or {}).get('captures') or [{}]
    amount = captures[0].get('amount') or {}
    try:
        value = Decimal(str(amount.get('value', '0')))
    except InvalidOperation:
        value = Decimal('0')
    return value, amount.get('currency_code') or 'USD'


def capture_order(user, order_id, client=None):
    """
    Captures an approved order. Already completed payments are returned
    as they are.
    """
    payment = Payment.objects.filter(paypal_order_id=order_id).first()
    if payment is not None:
        if payment.user_id != user.pk:
            raise Forbidden('You do not have access to this payment')
        if payment.status == 'completed':
            logger.info(f"Order {order_id} already captured")
            return payment
        if payment.status in ('failed', 'refunded'):
            raise InvalidState(f"Payment is already {payment.status}")

    client = client or get_client()
    try:
        capture_data = client.capture_order(order_id)
    except CaptureDeclined as e:
        if payment is not None:
            mark_failed(order_id, reason=e.name)
        raise ValidationFailed(
            e.user_message,
            details={'name': e.name, 'debug_id': e.debug_id, 'details': e.details},
            code='payment_declined',
        )

    capture_id, payer_email, payer_name = parse_capture(capture_data)

    if payment is None:
        # Order created outside this portal's create path
        logger.warning(f"No payment row for captured order {order_id}, creating it")
        amount, currency = _amount_from_capture(capture_data)
        Payment.objects.get_or_create(
            paypal_order_id=order_id,
            defaults={'user': user, 'amount': amount, 'total_amount': amount,
                      'currency': currency, 'status': 'pending'},
        )

    payment, _ = complete_payment(order_id, capture_id, payer_email, payer_name)
    return payment


# =========================================================
# 4. READ (payment status poller)
# =========================================================

def get_payment_status(user, order_id):
    payment = (
        Payment.objects.select_related('booking')
        .filter(paypal_order_id=order_id, user=user)
        .first()
    )
    if payment is None:
        raise NotFound('Payment not found')
    return payment


def serialize_payment(payment):
    return {
        'id': str(payment.id),
        'paypal_order_id': payment.paypal_order_id,
        'paypal_capture_id': payment.paypal_capture_id or None,
        'status': payment.status,
        'amount': str(payment.amount),
        'total_amount': str(payment.total_amount),
        'currency': payment.currency,
        'service_name': payment.service_name,
        'visa_duration': payment.visa_duration,
        'application_id': str(payment.application_id) if payment.application_id else None,
        'booking_id': str(payment.booking_id) if payment.booking_id else None,
        'credit_state': payment.credit_state,
        'payer_email': payment.payer_email or None,
        'captured_at': payment.captured_at.isoformat() if payment.captured_at else None,
        'refunded_at': payment.refunded_at.isoformat() if payment.refunded_at else None,
        'created_at': payment.created_at.isoformat() if payment.created_at else None,
    }
