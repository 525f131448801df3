import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.exceptions import InvalidState, ValidationFailed
from core.http import error_response, parse_json_body
from users.authentication import bearer_required
from visas.serializers import serialize_application
from .models import Payment
from .services.booking import create_booking
from .services.credits import available_credits, get_account, get_credit_history, redeem_credit
from .services.payments import (
    capture_order, create_order, get_payment_status, serialize_payment
)
from .services.receipt import render_receipt_pdf
from .services.webhooks import handle_event

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# -------------------- Booking -------------------------------
# ------------------------------------------------------------

@csrf_exempt
@require_POST
@bearer_required
def create_booking_api(request):
    """
    API: One booking + its travelers.
    Body: {duration, country_code?, nationality?, email, phone, travelers: [...]}
    """
    try:
        booking = create_booking(request.user, parse_json_body(request))
        return JsonResponse({
            'success': True,
            'data': {
                'id': str(booking.id),
                'total_travelers': booking.total_travelers,
                'price_per_traveler': str(booking.price_per_traveler),
                'total_amount': str(booking.total_amount),
                'currency': booking.currency,
                'payment_status': booking.payment_status,
            }
        }, status=201)

    except Exception as e:
        return error_response(e)


# ------------------------------------------------------------
# -------------------- Payments ------------------------------
# ------------------------------------------------------------

@csrf_exempt
@require_POST
@bearer_required
def create_order_api(request):
    try:
        payment, order = create_order(request.user, parse_json_body(request))
        approve_url = next(
            (link.get('href') for link in order.get('links', []) if link.get('rel') in ('approve', 'payer-action')),
            None
        )
        return JsonResponse({
            'success': True,
            'orderId': payment.paypal_order_id,
            'approveUrl': approve_url,
            'amount': str(payment.total_amount),
            'currency': payment.currency,
        })

    except Exception as e:
        return error_response(e)


@csrf_exempt
@require_POST
@bearer_required
def capture_order_api(request):
    try:
        order_id = str(parse_json_body(request).get('orderId') or '').strip()
        if not order_id or len(order_id) > 100:
            raise ValidationFailed('Order ID is required')

        payment = capture_order(request.user, order_id)
        return JsonResponse({
            'success': True,
            'status': payment.status,
            'payment': serialize_payment(payment),
        })

    except Exception as e:
        return error_response(e)


@require_GET
@bearer_required
def payment_status_api(request, order_id):
    """
    API: The mirrored payment row, polled by the client after checkout.
    404 while no row exists for the order.
    """
    try:
        payment = get_payment_status(request.user, order_id)
        return JsonResponse({'success': True, 'data': serialize_payment(payment)})

    except Exception as e:
        return error_response(e)


@require_GET
@bearer_required
def payment_history_api(request):
    payments = Payment.objects.filter(user=request.user)
    return JsonResponse({
        'success': True,
        'data': [serialize_payment(p) for p in payments]
    })


@require_GET
@bearer_required
def download_receipt_pdf(request, order_id):
    """
    Generates the payment receipt using xhtml2pdf.
    """
    try:
        payment = get_payment_status(request.user, order_id)
        if payment.status not in ('completed', 'refunded'):
            raise InvalidState('Receipt is only available for completed payments')

        pdf = render_receipt_pdf(payment)
        response = HttpResponse(pdf, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="receipt_{payment.paypal_order_id}.pdf"'
        return response

    except Exception as e:
        return error_response(e)


@csrf_exempt
@require_POST
def paypal_webhook(request):
    """
    Processor callbacks. Always 200 once accepted so the processor
    stops retrying; only bad signatures and bad JSON are refused.
    """
    try:
        event = json.loads(request.body or b'{}')
    except ValueError:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    try:
        result = handle_event(event, request.headers)
        return JsonResponse({'received': True, 'result': result})

    except Exception as e:
        return error_response(e)


# ------------------------------------------------------------
# -------------------- Credits -------------------------------
# ------------------------------------------------------------

@require_GET
@bearer_required
def credits_api(request):
    account = get_account(request.user)
    return JsonResponse({
        'success': True,
        'available': account.available,
        'credits': [serialize_payment(p) for p in available_credits(request.user)],
        'history': [
            {
                'type': t.transaction_type,
                'amount': t.amount,
                'balance_after': t.balance_after,
                'description': t.description,
                'created_at': t.created_at.isoformat(),
            }
            for t in get_credit_history(request.user)
        ],
    })


@csrf_exempt
@require_POST
@bearer_required
def redeem_credit_api(request):
    """
    API: Spends one credit on a brand new draft.
    """
    try:
        application = redeem_credit(request.user)
        return JsonResponse({
            'success': True,
            'data': serialize_application(application)
        }, status=201)

    except Exception as e:
        return error_response(e)
